# models/connection.py
import logging

from protocols.base import RCV_OK

logger = logging.getLogger(__name__)


class Connection:
    """
    Lien bidirectionnel entre deux nœuds à portée radio l'un de l'autre.

    Un seul transfert peut être actif à la fois sur une connexion.
    """

    def __init__(self, host_a, host_b, speed):
        """
        Args:
            host_a (DTNHost): premier nœud
            host_b (DTNHost): second nœud
            speed (float): débit du lien en octets par seconde
        """
        self.host_a = host_a
        self.host_b = host_b
        self.speed = float(speed)
        self.is_up = True
        self.message = None
        self.sender = None
        self.bytes_transferred = 0.0

    def __str__(self):
        state = "up" if self.is_up else "down"
        transfer = f" transferring {self.message}" if self.message is not None else ""
        return f"{self.host_a}<->{self.host_b} ({state}){transfer}"

    def other_node(self, host):
        return self.host_b if host is self.host_a else self.host_a

    def is_transferring(self):
        return self.message is not None

    def is_ready_for_transfer(self):
        return self.is_up and self.message is None

    def start_transfer(self, from_host, message):
        """
        Propose `message` au nœud à l'autre extrémité.

        Returns:
            int: code de retour du routeur récepteur (RCV_OK si le transfert démarre)
        """
        receiver = self.other_node(from_host)
        retval = receiver.router.receive_message(message, from_host)
        if retval == RCV_OK:
            self.message = message
            self.sender = from_host
            self.bytes_transferred = 0.0
        return retval

    def update(self, dt):
        """Fait progresser le transfert en cours de `dt` secondes."""
        if self.message is not None:
            self.bytes_transferred = min(self.message.size,
                                         self.bytes_transferred + self.speed * dt)

    def is_message_transferred(self):
        return self.message is not None and self.bytes_transferred >= self.message.size

    def finalize_transfer(self):
        """
        Remet le message au récepteur et libère la connexion.

        Returns:
            Message: le message tel qu'il a été transmis
        """
        message, sender = self.message, self.sender
        receiver = self.other_node(sender)
        self.clear_transfer()
        receiver.router.message_transferred(message.id, sender)
        return message

    def abort_transfer(self):
        """Interrompt le transfert en cours (connexion coupée)."""
        if self.message is None:
            return
        message, sender = self.message, self.sender
        logger.debug("Transfert de %s interrompu sur %s", message, self)
        self.clear_transfer()
        self.other_node(sender).router.message_aborted(message.id, sender)

    def clear_transfer(self):
        self.message = None
        self.sender = None
        self.bytes_transferred = 0.0
