# models/message.py
import math


class Message:
    """
    Représente un message (bundle) transporté par les nœuds du réseau DTN.
    """

    def __init__(self, msg_id, source, destination, size, creation_time=0.0, ttl=None):
        """
        Constructeur d'un objet Message

        Args:
            msg_id (str): identifiant unique du message
            source (DTNHost): nœud qui a créé le message
            destination (DTNHost): destinataire final
            size (int): taille du message en octets
            creation_time (float, optional): instant de création. Par défaut 0.0.
            ttl (float, optional): durée de vie initiale en secondes. None = pas d'expiration.
        """
        self.id = msg_id
        self.source = source
        self.destination = destination
        self.size = int(size)
        self.creation_time = float(creation_time)
        self.initial_ttl = ttl
        self.receive_time = float(creation_time)
        self.path = [source]
        self.properties = {}

    def __str__(self):
        return self.id

    def __repr__(self):
        return f"Message({self.id}, {self.source}->{self.destination}, {self.size}o)"

    @property
    def hop_count(self):
        """Nombre de sauts effectués par cette copie."""
        return len(self.path) - 1

    def remaining_ttl(self, now):
        """
        Durée de vie restante au temps `now`.

        Returns:
            float: secondes restantes (peut être négatif), ou inf sans TTL
        """
        if self.initial_ttl is None:
            return math.inf
        return self.initial_ttl - (now - self.creation_time)

    def is_expired(self, now):
        return self.remaining_ttl(now) <= 0

    #*************** Propriétés ****************
    def add_property(self, key, value):
        if key in self.properties:
            raise ValueError(f"Le message {self.id} possède déjà la propriété {key}")
        self.properties[key] = value

    def get_property(self, key):
        return self.properties.get(key)

    def update_property(self, key, value):
        if key not in self.properties:
            raise KeyError(f"Le message {self.id} n'a pas de propriété {key}")
        self.properties[key] = value

    def replicate(self, next_hop, now):
        """
        Crée la copie remise au prochain saut.

        Args:
            next_hop (DTNHost): nœud qui reçoit la copie
            now (float): instant de réception

        Returns:
            Message: copie avec le même identifiant et les mêmes propriétés
        """
        copy = Message(self.id, self.source, self.destination, self.size,
                       self.creation_time, self.initial_ttl)
        copy.path = self.path + [next_hop]
        copy.properties = dict(self.properties)
        copy.receive_time = now
        return copy
