#!/usr/bin/env python3
# protocols/utility_router.py
"""
Routeur à utilité: protocole hybride combinant le routage probabiliste
(PRoPHET) et Spray-and-Wait binaire.

Le prochain saut est choisi selon l'utilité du voisin, qui tient compte de:
- l'énergie du voisin,
- sa mobilité (probabilité de livraison vers la destination),
- sa localisation (recouvrement de ses contacts avec les nôtres),
- la file d'envoi (départage des ex-æquo).

Côté buffer, le message qui a le moins de chances d'être livré est supprimé
en premier (voir protocols/eviction.py).

Déroulement d'un pas:
1. Rien à faire si un transfert est en cours ou impossible.
2. Livraison directe aux destinataires connectés.
3. Sinon, pour chaque couple (message avec copies restantes, connexion)
   qui passe les filtres, calcul de l'utilité; les couples au-dessus de
   FILTER_THRESHOLD sont triés par utilité décroissante (GRTRMax) puis
   proposés dans cet ordre, une seule fois par connexion et par message.
"""
import functools
import logging
from collections import namedtuple

from protocols.base import DTNProtocol, PeerView, RCV_OK, Q_MODE_FIFO
from protocols.errors import ProtocolMismatchError
from protocols.eviction import discard_priority, select_victim
from protocols.predictability import PredictabilityStore, DEFAULT_BETA, DEFAULT_GAMMA
from protocols.replicas import ReplicaController
from protocols.utility import UtilitySnapshot, connection_overlap, neighbor_utility

logger = logging.getLogger(__name__)

NAMESPACE = 'UtilityRouter'
SECONDS_IN_UNIT_S = 'secondsInTimeUnit'
NROF_COPIES_S = 'nrofCopies'
BETA_S = 'beta'
GAMMA_S = 'gamma'
MSG_COUNT_PROPERTY = NAMESPACE + '.copies'

FILTER_THRESHOLD = 0.67  # Seuil de présélection du prochain saut
OVERLAP_CUTOFF = 0.7     # Au-delà, le voisin est un porteur redondant

Candidate = namedtuple('Candidate', ['message', 'connection'])


class UtilityPeerView(PeerView):
    """Vue d'un pair UtilityRouter: ajoute la lecture de ses probabilités."""

    def predictions(self):
        return self._router.store.predictions()

    def prediction_for(self, host):
        return self._router.store.get(host)


class UtilityRouter(DTNProtocol):
    """
    Routeur à utilité.

    Ne fonctionne qu'avec des pairs du même type: toute autre configuration
    lève ProtocolMismatchError.
    """

    def __init__(self, settings, clock, buffer_size: int, msg_ttl: float = None,
                 send_queue: str = Q_MODE_FIFO):
        """
        Initialise le routeur à partir de la section 'UtilityRouter' des paramètres.

        Args:
            settings (Settings): Paramètres (secondsInTimeUnit et nrofCopies obligatoires)
            clock (SimClock): Horloge de simulation
            buffer_size (int): Capacité du buffer en octets
            msg_ttl (float): TTL des messages créés (en secondes)
            send_queue (str): Politique de file d'envoi
        """
        super().__init__(clock, buffer_size, msg_ttl, send_queue)
        self.seconds_in_time_unit = settings.get_int(SECONDS_IN_UNIT_S)
        self.initial_nrof_copies = settings.get_int(NROF_COPIES_S)
        self.beta = settings.get_float(BETA_S, DEFAULT_BETA)
        self.gamma = settings.get_float(GAMMA_S, DEFAULT_GAMMA)
        self.store = PredictabilityStore(clock, self.seconds_in_time_unit,
                                         self.beta, self.gamma)
        self.replicas = ReplicaController(self.initial_nrof_copies, MSG_COUNT_PROPERTY)
        self.snapshot = UtilitySnapshot(clock)

    def peer_view(self):
        return UtilityPeerView(self)

    def peer(self, host):
        """
        Retourne la vue du routeur de `host`.

        Raises:
            ProtocolMismatchError: si `host` n'exécute pas UtilityRouter
        """
        if not isinstance(host.router, UtilityRouter):
            raise ProtocolMismatchError(
                f"UtilityRouter ne fonctionne qu'avec des routeurs du même type "
                f"({host} utilise {type(host.router).__name__})")
        return host.router.peer_view()

    def get_pred_for(self, host):
        return self.store.get(host)

    #*************** Rencontres ****************
    def changed_connection(self, con):
        if not con.is_up:
            return
        other = con.other_node(self.host)
        peer = self.peer(other)
        self.store.on_encounter(other)
        self.store.propagate_transitive(other, peer.predictions(), self.host)

    #*************** Utilité ****************
    def check_overlap(self, peer):
        return connection_overlap(self.peer_hosts(), peer.peer_hosts())

    def utility_for(self, peer, message):
        """
        Calcule l'utilité de `peer` pour `message` et la mémorise pour ce pas.
        """
        utility = neighbor_utility(self.host.energy, self.peer_hosts(),
                                   peer.energy, peer.peer_hosts(),
                                   peer.prediction_for(message.destination))
        self.snapshot.put(peer.host, message.id, utility)
        return utility

    #*************** Copies ****************
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
            # Supprimé du buffer pendant le transfert
            return
        self.replicas.on_send_completed(message)

    def get_messages_with_copies_left(self):
        return [m for m in self.get_message_collection()
                if self.replicas.has_copies_left(m)]

    #*************** Sélection du prochain saut ****************
    def update(self):
        super().update()
        self.snapshot = UtilitySnapshot(self.clock)

        if not self.can_start_transfer() or self.is_transferring():
            return

        if self.exchange_deliverable_messages() is not None:
            return

        copies_left = self.sort_by_queue_mode(self.get_messages_with_copies_left())
        if copies_left:
            self.try_messages_to_connections(copies_left, self.connections)

    def collect_candidates(self, messages, connections):
        """
        Construit les couples (message, connexion) qui passent les filtres
        et dont l'utilité atteint FILTER_THRESHOLD.
        """
        candidates = []
        for con in connections:
            peer = self.peer(con.other_node(self.host))
            if peer.is_transferring():
                continue
            if not peer.has_energy():
                continue
            if self.check_overlap(peer) > OVERLAP_CUTOFF:
                continue
            for message in messages:
                if peer.is_blacklisted(message.id):
                    continue
                if peer.has_message(message.id):
                    continue
                if message.size > peer.buffer_size:
                    continue
                if self.utility_for(peer, message) >= FILTER_THRESHOLD:
                    candidates.append(Candidate(message, con))
        return candidates

    def compare_candidates(self, c1, c2):
        """Utilité décroissante, puis politique de file."""
        p1 = self.snapshot.get(c1.connection.other_node(self.host), c1.message.id)
        p2 = self.snapshot.get(c2.connection.other_node(self.host), c2.message.id)
        if p1 == p2:
            return self.compare_by_queue_mode(c1.message, c2.message)
        return -1 if p1 > p2 else 1

    def rank_candidates(self, candidates):
        return sorted(candidates, key=functools.cmp_to_key(self.compare_candidates))

    def try_messages_to_connections(self, messages, connections):
        """
        Propose les messages aux voisins les plus utiles.

        Returns:
            list: connexions sur lesquelles un transfert a démarré
        """
        candidates = self.collect_candidates(messages, connections)
        if not candidates:
            return []
        started = []
        started_messages = set()
        for candidate in self.rank_candidates(candidates):
            # Une connexion par message et un message par connexion: le
            # récepteur copie le compteur de copies au démarrage du transfert
            if candidate.connection in started or candidate.message.id in started_messages:
                continue
            if self.start_transfer(candidate.message, candidate.connection) == RCV_OK:
                started.append(candidate.connection)
                started_messages.add(candidate.message.id)
        logger.debug("%s: %d candidats, %d transferts démarrés",
                     self.host, len(candidates), len(started))
        return started

    #*************** Buffer ****************
    def discard_priority(self, message):
        return discard_priority(message, self.host.location, self.buffer_size, self.clock.time)

    def get_next_message_to_remove(self, exclude_msg_being_sent):
        return select_victim(self.get_message_collection(), self.discard_priority,
                             self.is_sending if exclude_msg_being_sent else None)
