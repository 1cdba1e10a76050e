#!/usr/bin/env python3
# protocols/base.py
"""
Classe de base pour les routeurs DTN (Delay-Tolerant Networking).
Définit l'interface commune à tous les protocoles de routage DTN ainsi que la
gestion générique du buffer: stockage des messages, démarrage des transferts,
livraison directe, expiration des TTL et libération d'espace.

Les sous-classes ne redéfinissent que les points d'extension:
update(), changed_connection(), message_transferred(), transfer_done() et
get_next_message_to_remove().
"""
import logging

logger = logging.getLogger(__name__)

# Codes de retour de receive_message() / start_transfer()
RCV_OK = 0
TRY_LATER_BUSY = 1
DENIED_OLD = -1
DENIED_NO_SPACE = -2
DENIED_TTL = -3
DENIED_LOW_RESOURCES = -4
DENIED_POLICY = -5

# Politiques d'ordonnancement de la file d'envoi
Q_MODE_FIFO = 'fifo'
Q_MODE_SIZE = 'size'
QUEUE_MODES = (Q_MODE_FIFO, Q_MODE_SIZE)


class PeerView:
    """
    Vue en lecture seule d'un routeur pair.

    C'est la seule surface qu'un routeur expose à un autre routeur: un pair
    peut consulter l'état du nœud mais jamais le modifier.
    """

    def __init__(self, router):
        self._router = router

    @property
    def host(self):
        return self._router.host

    @property
    def energy(self):
        return self._router.host.energy

    @property
    def buffer_size(self):
        return self._router.buffer_size

    def has_energy(self):
        return self._router.host.has_energy()

    def is_transferring(self):
        return self._router.is_transferring()

    def is_blacklisted(self, msg_id):
        return self._router.is_blacklisted(msg_id)

    def has_message(self, msg_id):
        return self._router.has_message(msg_id)

    def peer_hosts(self):
        """Nœuds actuellement connectés au pair."""
        return self._router.peer_hosts()


class DTNProtocol:
    """
    Classe de base pour les routeurs DTN.
    Cette classe définit l'interface commune à tous les routeurs et le
    comportement générique d'un routeur actif.
    """

    def __init__(self, clock, buffer_size: int, msg_ttl: float = None,
                 send_queue: str = Q_MODE_FIFO):
        """
        Initialise un routeur DTN.

        Args:
            clock (SimClock): Horloge de simulation partagée
            buffer_size (int): Capacité du buffer en octets
            msg_ttl (float): TTL appliqué aux messages créés sans TTL (en secondes)
            send_queue (str): Politique de file d'envoi ('fifo' ou 'size')
        """
        if send_queue not in QUEUE_MODES:
            raise ValueError(f"Politique de file inconnue: {send_queue}")
        self.clock = clock
        self.buffer_size = int(buffer_size)
        self.msg_ttl = msg_ttl
        self.send_queue_mode = send_queue
        self.host = None
        self.messages = {}       # Messages stockés, indexés par identifiant
        self.incoming = {}       # Messages en cours de réception
        self.delivered = set()   # Messages dont ce nœud est le destinataire final
        self.blacklist = set()   # Messages refusés par ce nœud
        self.sending_connections = []
        self.listeners = []

    def init(self, host):
        """Lie le routeur à son nœud."""
        self.host = host

    def add_listener(self, listener):
        self.listeners.append(listener)

    def __str__(self):
        return f"{type(self).__name__} de {self.host}"

    #*************** Accès à l'état ****************
    @property
    def connections(self):
        return self.host.connections

    def peer_view(self):
        return PeerView(self)

    def peer_hosts(self):
        return [con.other_node(self.host) for con in self.connections]

    def get_message_collection(self):
        return list(self.messages.values())

    def get_message(self, msg_id):
        return self.messages.get(msg_id)

    def has_message(self, msg_id):
        return msg_id in self.messages

    def is_blacklisted(self, msg_id):
        return msg_id in self.blacklist

    def nrof_messages(self):
        return len(self.messages)

    def free_buffer_size(self):
        return self.buffer_size - sum(m.size for m in self.messages.values())

    def is_transferring(self):
        """Vrai si une des connexions du nœud transporte un message."""
        return any(con.is_transferring() for con in self.connections)

    def is_sending(self, msg_id):
        return any(con.message is not None and con.message.id == msg_id
                   for con in self.sending_connections)

    def can_start_transfer(self):
        return (self.host.has_energy() and len(self.connections) > 0
                and self.nrof_messages() > 0)

    #*************** Gestion du buffer ****************
    def create_new_message(self, message):
        """
        Crée un nouveau message sur ce nœud.

        Returns:
            bool: True si le message a été ajouté au buffer
        """
        if message.initial_ttl is None and self.msg_ttl is not None:
            message.initial_ttl = self.msg_ttl
        if not self.make_room_for_message(message.size):
            logger.debug("%s: pas de place pour le nouveau message %s", self.host, message)
            return False
        self.add_to_messages(message, True)
        return True

    def add_to_messages(self, message, new_message):
        self.messages[message.id] = message
        for listener in self.listeners:
            if new_message:
                listener.new_message(message)

    def delete_message(self, msg_id, drop, reason='drop'):
        """
        Supprime un message du buffer.

        Args:
            msg_id (str): identifiant du message
            drop (bool): True si le message est abandonné (et non livré)
            reason (str): cause de suppression pour les rapports
        """
        message = self.messages.pop(msg_id)
        for listener in self.listeners:
            listener.message_deleted(message, self.host, drop, reason)
        return message

    def make_room_for_message(self, size):
        """
        Libère de l'espace en supprimant des messages choisis par
        get_next_message_to_remove().

        Returns:
            bool: True si l'espace demandé est disponible
        """
        if size > self.buffer_size:
            return False
        while self.free_buffer_size() < size:
            victim = self.get_next_message_to_remove(True)
            if victim is None:
                return False
            logger.debug("%s: éviction de %s", self.host, victim)
            self.delete_message(victim.id, True)
        return True

    def get_next_message_to_remove(self, exclude_msg_being_sent):
        """
        Retourne le plus ancien message du buffer (politique FIFO).

        Args:
            exclude_msg_being_sent (bool): ignorer les messages en cours d'envoi

        Returns:
            Message: message à supprimer, ou None
        """
        oldest = None
        for message in self.messages.values():
            if exclude_msg_being_sent and self.is_sending(message.id):
                continue
            if oldest is None or message.receive_time < oldest.receive_time:
                oldest = message
        return oldest

    def drop_expired_messages(self):
        now = self.clock.time
        for message in list(self.messages.values()):
            if message.is_expired(now) and not self.is_sending(message.id):
                self.delete_message(message.id, True, reason='ttl')

    #*************** File d'envoi ****************
    def queue_key(self, message):
        if self.send_queue_mode == Q_MODE_SIZE:
            return (message.size, message.receive_time, message.id)
        return (message.receive_time, message.id)

    def sort_by_queue_mode(self, messages):
        return sorted(messages, key=self.queue_key)

    def compare_by_queue_mode(self, m1, m2):
        k1, k2 = self.queue_key(m1), self.queue_key(m2)
        return (k1 > k2) - (k1 < k2)

    #*************** Réception ****************
    def receive_message(self, message, from_host):
        """
        Appelé par la connexion quand un pair propose un message.

        Returns:
            int: RCV_OK si le transfert peut démarrer, un code de refus sinon
        """
        if self.has_message(message.id) or message.id in self.delivered \
                or message.id in self.incoming:
            return DENIED_OLD
        if self.is_blacklisted(message.id):
            return DENIED_POLICY
        if not self.host.has_energy():
            return DENIED_LOW_RESOURCES
        if message.is_expired(self.clock.time):
            return DENIED_TTL
        if message.destination is not self.host and not self.make_room_for_message(message.size):
            return DENIED_NO_SPACE
        self.incoming[message.id] = message.replicate(self.host, self.clock.time)
        for listener in self.listeners:
            listener.message_transfer_started(message, from_host, self.host)
        return RCV_OK

    def message_transferred(self, msg_id, from_host):
        """
        Appelé sur le nœud récepteur quand un transfert se termine.
        Le message est ajouté au buffer sauf si ce nœud en est le destinataire.

        Returns:
            Message: le message reçu
        """
        message = self.incoming.pop(msg_id)
        is_final = message.destination is self.host
        first_delivery = is_final and msg_id not in self.delivered
        if is_final:
            self.delivered.add(msg_id)
        else:
            self.add_to_messages(message, False)
        for listener in self.listeners:
            listener.message_transferred(message, from_host, self.host, first_delivery)
        return message

    def message_aborted(self, msg_id, from_host):
        message = self.incoming.pop(msg_id, None)
        if message is None:
            return
        for listener in self.listeners:
            listener.message_transfer_aborted(message, from_host, self.host)

    #*************** Émission ****************
    def start_transfer(self, message, con):
        """
        Tente de démarrer l'envoi de `message` sur `con`.

        Returns:
            int: code de retour du récepteur
        """
        if not con.is_ready_for_transfer():
            return TRY_LATER_BUSY
        retval = con.start_transfer(self.host, message)
        if retval == RCV_OK:
            self.sending_connections.append(con)
            logger.debug("%s: envoi de %s vers %s", self.host, message, con.other_node(self.host))
        elif retval == DENIED_OLD and message.destination is con.other_node(self.host):
            # Déjà livré: la copie locale n'a plus d'utilité
            self.delete_message(message.id, False, reason='delivered')
        return retval

    def get_messages_for_connected(self):
        """Couples (message, connexion) dont le pair est le destinataire final."""
        pairs = []
        for message in self.sort_by_queue_mode(self.get_message_collection()):
            for con in self.connections:
                if message.destination is con.other_node(self.host):
                    pairs.append((message, con))
        return pairs

    def exchange_deliverable_messages(self):
        """
        Tente de livrer directement les messages à leur destinataire.

        Returns:
            Connection: la connexion qui a démarré un transfert, ou None
        """
        for message, con in self.get_messages_for_connected():
            if self.start_transfer(message, con) == RCV_OK:
                return con
        return None

    def try_messages_to_connections(self, messages, connections):
        for con in connections:
            for message in messages:
                if self.start_transfer(message, con) == RCV_OK:
                    return con
        return None

    def try_messages_for_connected(self, pairs):
        for message, con in pairs:
            if self.start_transfer(message, con) == RCV_OK:
                return con
        return None

    #*************** Points d'extension ****************
    def changed_connection(self, con):
        """Appelé quand une connexion du nœud s'établit ou se coupe."""

    def transfer_done(self, con):
        """Appelé sur l'émetteur juste avant la finalisation d'un transfert."""

    def update(self):
        """
        Met à jour le routeur. Doit être appelée à chaque pas de simulation.
        Termine les transferts achevés et supprime les messages expirés.
        """
        for con in list(self.sending_connections):
            if con.message is None or not con.is_up:
                # Transfert interrompu
                self.sending_connections.remove(con)
                continue
            if con.is_message_transferred():
                receiver = con.other_node(self.host)
                message = con.message
                self.transfer_done(con)
                con.finalize_transfer()
                self.sending_connections.remove(con)
                if message.destination is receiver and self.has_message(message.id):
                    self.delete_message(message.id, False, reason='delivered')
        self.drop_expired_messages()
