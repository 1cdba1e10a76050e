#!/usr/bin/env python3
# protocols/prophet.py
"""
Routeur PRoPHET (Probabilistic Routing Protocol using History of Encounters
and Transitivity), utilisé comme référence de comparaison.

Principe:
1. Chaque nœud maintient ses probabilités de livraison P(A,B), mises à jour
   à chaque rencontre, vieillies avec le temps et propagées par transitivité
   (voir protocols/predictability.py).
2. Politique de transfert: A transfère une copie à B si et seulement si
   P(B,D) > P(A,D) où D est la destination finale.
3. Les couples (message, connexion) sont proposés par P(B,D) décroissant
   (GRTRMax).

Référence: Lindgren, A., Doria, A., & Schelén, O. (2003).
"Probabilistic routing in intermittently connected networks"
ACM SIGMOBILE mobile computing and communications review, 7(3), 19-20.
"""
from protocols.base import DTNProtocol, Q_MODE_FIFO
from protocols.errors import ProtocolMismatchError
from protocols.predictability import PredictabilityStore, DEFAULT_BETA, DEFAULT_GAMMA

NAMESPACE = 'ProphetRouter'
SECONDS_IN_UNIT_S = 'secondsInTimeUnit'
BETA_S = 'beta'
GAMMA_S = 'gamma'


class ProphetRouter(DTNProtocol):
    """
    Implémentation du protocole PRoPHET.

    Ce protocole maintient une métrique de probabilité pour chaque destination et utilise cette
    information pour déterminer si un message doit être transmis lors d'une rencontre.
    """

    def __init__(self, settings, clock, buffer_size: int, msg_ttl: float = None,
                 send_queue: str = Q_MODE_FIFO):
        """
        Args:
            settings (Settings): Paramètres (secondsInTimeUnit obligatoire)
            clock (SimClock): Horloge de simulation
            buffer_size (int): Capacité du buffer en octets
            msg_ttl (float): TTL des messages créés (en secondes)
            send_queue (str): Politique de file d'envoi
        """
        super().__init__(clock, buffer_size, msg_ttl, send_queue)
        self.store = PredictabilityStore(clock,
                                         settings.get_int(SECONDS_IN_UNIT_S),
                                         settings.get_float(BETA_S, DEFAULT_BETA),
                                         settings.get_float(GAMMA_S, DEFAULT_GAMMA))

    def __str__(self):
        return f"PRoPHET (β={self.store.beta}, γ={self.store.gamma})"

    def other_router(self, host):
        if not isinstance(host.router, ProphetRouter):
            raise ProtocolMismatchError(
                f"ProphetRouter ne fonctionne qu'avec des routeurs du même type "
                f"({host} utilise {type(host.router).__name__})")
        return host.router

    def changed_connection(self, con):
        if not con.is_up:
            return
        other = con.other_node(self.host)
        other_router = self.other_router(other)
        self.store.on_encounter(other)
        self.store.propagate_transitive(other, other_router.store.predictions(), self.host)

    def update(self):
        super().update()
        if not self.can_start_transfer() or self.is_transferring():
            return

        if self.exchange_deliverable_messages() is not None:
            return

        pairs = []
        for con in self.connections:
            other = con.other_node(self.host)
            other_router = self.other_router(other)
            if other_router.is_transferring():
                continue
            for message in self.get_message_collection():
                if other_router.has_message(message.id):
                    continue
                p_other = other_router.store.get(message.destination)
                if p_other > self.store.get(message.destination):
                    pairs.append((p_other, message, con))

        # Probabilité du pair décroissante, puis politique de file
        pairs.sort(key=lambda p: (-p[0], self.queue_key(p[1])))
        self.try_messages_for_connected([(m, con) for _, m, con in pairs])
