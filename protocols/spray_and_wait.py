#!/usr/bin/env python3
# protocols/spray_and_wait.py
"""
Routeur Spray-and-Wait binaire, utilisé comme référence de comparaison.

Principe:
1. Phase Spray: à l'émission, la source initialise L copies.
   Lors d'une rencontre, un nœud avec >1 copies en donne la moitié à son pair.
2. Phase Wait: dès qu'un nœud n'a plus qu'une seule copie, il attend de
   rencontrer directement la destination pour transmettre.

Avantages:
- Plus économe en ressources que l'épidémique
- Délais de livraison contrôlables via le paramètre L
- Compromis entre overhead et fiabilité
"""
from protocols.base import DTNProtocol, Q_MODE_FIFO
from protocols.replicas import ReplicaController

NAMESPACE = 'SprayAndWaitRouter'
NROF_COPIES_S = 'nrofCopies'
MSG_COUNT_PROPERTY = NAMESPACE + '.copies'


class SprayAndWaitRouter(DTNProtocol):
    """
    Implémentation du protocole Spray-and-Wait binaire.

    Le choix du prochain saut est opportuniste: le premier voisin qui
    accepte le message reçoit la moitié des copies.
    """

    def __init__(self, settings, clock, buffer_size: int, msg_ttl: float = None,
                 send_queue: str = Q_MODE_FIFO):
        """
        Args:
            settings (Settings): Paramètres (nrofCopies obligatoire)
            clock (SimClock): Horloge de simulation
            buffer_size (int): Capacité du buffer en octets
            msg_ttl (float): TTL des messages créés (en secondes)
            send_queue (str): Politique de file d'envoi
        """
        super().__init__(clock, buffer_size, msg_ttl, send_queue)
        self.initial_nrof_copies = settings.get_int(NROF_COPIES_S)
        self.replicas = ReplicaController(self.initial_nrof_copies, MSG_COUNT_PROPERTY)

    def __str__(self):
        return f"Binary Spray and Wait (L={self.initial_nrof_copies})"

    def create_new_message(self, message):
        self.replicas.on_create_message(message)
        return super().create_new_message(message)

    def message_transferred(self, msg_id, from_host):
        message = super().message_transferred(msg_id, from_host)
        self.replicas.on_receive(message)
        return message

    def transfer_done(self, con):
        message = self.get_message(con.message.id)
        if message is None:
            return
        self.replicas.on_send_completed(message)

    def update(self):
        super().update()
        if not self.can_start_transfer() or self.is_transferring():
            return

        if self.exchange_deliverable_messages() is not None:
            return

        copies_left = [m for m in self.get_message_collection()
                       if self.replicas.has_copies_left(m)]
        if copies_left:
            self.try_messages_to_connections(self.sort_by_queue_mode(copies_left),
                                             self.connections)
