# simulation/events.py
import logging
import random

from models.message import Message

logger = logging.getLogger(__name__)


class MessageGenerator:
    """
    Crée des messages entre nœuds choisis aléatoirement, à intervalles
    aléatoires.
    """

    def __init__(self, interval=(25, 35), size=(50000, 500000), prefix='M',
                 ttl=None, seed=None, end_time=None):
        """
        Args:
            interval (tuple): bornes (min, max) de l'intervalle entre deux messages (s)
            size (tuple): bornes (min, max) de la taille des messages (octets)
            prefix (str): préfixe des identifiants de messages
            ttl (float, optional): TTL des messages; None = TTL du routeur
            seed (int, optional): graine aléatoire
            end_time (float, optional): plus aucun message après cet instant
        """
        self.interval = interval
        self.size = size
        self.prefix = prefix
        self.ttl = ttl
        self.end_time = end_time
        self.rng = random.Random(seed)
        self.next_event_time = self._next_interval()
        self.counter = 0

    def _next_interval(self):
        return self.rng.uniform(*self.interval)

    def update(self, world):
        """Crée les messages dont l'instant de création est atteint."""
        now = world.clock.time
        while self.next_event_time <= now:
            if self.end_time is not None and self.next_event_time > self.end_time:
                return
            self.create_message(world)
            self.next_event_time += self._next_interval()

    def create_message(self, world):
        source, destination = self.rng.sample(world.hosts, 2)
        self.counter += 1
        message = Message(f"{self.prefix}{self.counter}", source, destination,
                          self.rng.randint(*self.size), world.clock.time, self.ttl)
        if not source.create_new_message(message):
            logger.debug("Message %s rejeté par %s (buffer plein)", message, source)
        return message
