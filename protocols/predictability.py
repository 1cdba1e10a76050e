#!/usr/bin/env python3
# protocols/predictability.py
"""
Table des probabilités de livraison (delivery predictabilities) d'un nœud.

Principe (d'après PRoPHET):
1. Rencontre directe: P(a,b) = P(a,b)_ancien + (1 - P(a,b)_ancien) * P_init
   avec P_init = P_MAX * (intervalle / I_TYP) si l'intervalle depuis la
   dernière rencontre est inférieur à I_TYP, P_MAX sinon.
2. Vieillissement: P(a,b) = P(a,b)_ancien * γ^k où k est le nombre d'unités
   de temps écoulées depuis le dernier vieillissement.
3. Transitivité: P(a,c) = max(P(a,c)_ancien, P(a,b) * P(b,c) * β)

Le vieillissement est appliqué avant toute lecture, quel que soit l'ordre
des appels.

Référence: Lindgren, A., Doria, A., & Schelén, O. (2003).
"Probabilistic routing in intermittently connected networks"
"""
import logging
from types import MappingProxyType

logger = logging.getLogger(__name__)

P_MAX = 0.75          # Valeur maximale de P_init
I_TYP = 1800.0        # Intervalle typique entre deux rencontres (s)
DEFAULT_BETA = 0.25   # Facteur de transitivité par défaut
DEFAULT_GAMMA = 0.98  # Facteur de vieillissement par défaut


class PredictabilityStore:
    """
    Probabilités de livraison et instants de dernière rencontre d'un nœud.

    Chaque routeur possède sa propre table; les pairs n'y accèdent qu'en
    lecture via predictions().
    """

    def __init__(self, clock, seconds_in_time_unit: float,
                 beta: float = DEFAULT_BETA, gamma: float = DEFAULT_GAMMA):
        """
        Args:
            clock (SimClock): Horloge de simulation
            seconds_in_time_unit (float): Durée d'une unité de temps pour le vieillissement
            beta (float): Facteur de transitivité (entre 0 et 1)
            gamma (float): Facteur de vieillissement (entre 0 et 1)
        """
        if seconds_in_time_unit <= 0:
            raise ValueError("secondsInTimeUnit doit être strictement positif")
        self.clock = clock
        self.seconds_in_time_unit = seconds_in_time_unit
        self.beta = beta
        self.gamma = gamma
        self.preds = {}
        self.last_encounter_time = {}
        self.last_age_update = clock.time

    def __len__(self):
        return len(self.preds)

    def on_encounter(self, neighbor):
        """
        Met à jour la probabilité vers `neighbor` lors d'une rencontre.

        Args:
            neighbor (DTNHost): le nœud rencontré

        Returns:
            float: la nouvelle probabilité P(self, neighbor)
        """
        now = self.clock.time
        last = self.last_encounter_time.get(neighbor)
        if last is None:
            pinit = P_MAX
        elif now - last < I_TYP:
            pinit = P_MAX * ((now - last) / I_TYP)
        else:
            pinit = P_MAX

        old_value = self.get(neighbor)
        new_value = old_value + (1 - old_value) * pinit
        self.preds[neighbor] = new_value
        self.last_encounter_time[neighbor] = now
        logger.debug("Rencontre %s à t=%.1f: P %.4f -> %.4f", neighbor, now, old_value, new_value)
        return new_value

    def propagate_transitive(self, neighbor, neighbor_preds, me=None):
        """
        Met à jour les probabilités transitives (A->B->C).

        Args:
            neighbor (DTNHost): le nœud B qui vient d'être rencontré
            neighbor_preds (Mapping): probabilités de B, {C: P(B,C)}
            me (DTNHost, optional): ce nœud, exclu de la propagation
        """
        p_for_host = self.get(neighbor)  # P(a,b)
        for other, p_other in neighbor_preds.items():
            if other is me:
                continue
            p_old = self.get(other)
            p_new = p_for_host * p_other * self.beta
            if p_new > p_old:
                self.preds[other] = p_new

    def age(self):
        """Applique le vieillissement γ^k à toutes les entrées."""
        now = self.clock.time
        time_diff = (now - self.last_age_update) / self.seconds_in_time_unit
        if time_diff == 0:
            return
        mult = self.gamma ** time_diff
        for host in self.preds:
            self.preds[host] *= mult
        self.last_age_update = now

    def get(self, neighbor):
        """Retourne P(self, neighbor) après vieillissement, 0 si inconnu."""
        self.age()
        return self.preds.get(neighbor, 0.0)

    def last_encounter(self, neighbor):
        """Instant de la dernière rencontre avec `neighbor`, ou None."""
        return self.last_encounter_time.get(neighbor)

    def predictions(self):
        """Vue en lecture seule des probabilités, après vieillissement."""
        self.age()
        return MappingProxyType(self.preds)
