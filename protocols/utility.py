#!/usr/bin/env python3
# protocols/utility.py
"""
Score d'utilité d'un voisin pour un message donné.

L'utilité combine trois critères:
- Énergie: 1.0 si le voisin a au moins autant d'énergie que nous, 0.5 sinon.
- Localisation: 1 - recouvrement des contacts. Deux porteurs qui voient les
  mêmes voisins atteindront les mêmes destinations, ce qui dégrade
  Spray-and-Wait.
- Mobilité: probabilité de livraison du voisin vers la destination du message.

    utilité = 0.20 * énergie + 0.55 * localisation + 0.25 * mobilité
"""
from protocols.errors import StaleSnapshotError

ENERGY_WEIGHT = 0.20
LOCATION_WEIGHT = 0.55
MOBILITY_WEIGHT = 0.25


def energy_credit(self_energy, other_energy):
    return 1.0 if other_energy >= self_energy else 0.5


def connection_overlap(self_contacts, other_contacts):
    """
    Fraction de nos contacts actuels également connectés à l'autre nœud.

    Args:
        self_contacts (list): nœuds connectés à ce nœud
        other_contacts (list): nœuds connectés à l'autre nœud

    Returns:
        float: recouvrement entre 0 et 1 (0 si ce nœud n'a aucun contact)
    """
    if not self_contacts:
        return 0.0
    others = set(other_contacts)
    shared = sum(1 for host in self_contacts if host in others)
    return shared / len(self_contacts)


def neighbor_utility(self_energy, self_contacts, other_energy, other_contacts,
                     mobility_credit):
    """
    Calcule l'utilité globale d'un voisin.

    Args:
        self_energy (float): énergie de ce nœud
        self_contacts (list): contacts actuels de ce nœud
        other_energy (float): énergie du voisin
        other_contacts (list): contacts actuels du voisin
        mobility_credit (float): P(voisin, destination du message)

    Returns:
        float: utilité entre 0 et 1
    """
    location_credit = 1.0 - connection_overlap(self_contacts, other_contacts)
    return (ENERGY_WEIGHT * energy_credit(self_energy, other_energy)
            + LOCATION_WEIGHT * location_credit
            + MOBILITY_WEIGHT * mobility_credit)


class UtilitySnapshot:
    """
    Utilités calculées pendant un pas de simulation, par voisin et par message.

    Un nouvel instantané est créé à chaque pas; il refuse d'être lu à un
    autre instant que celui qui l'a construit.
    """

    def __init__(self, clock):
        self.clock = clock
        self.time = clock.time
        self.values = {}

    def _check(self):
        if self.clock.time != self.time:
            raise StaleSnapshotError(
                f"Instantané construit à t={self.time} lu à t={self.clock.time}")

    def put(self, host, msg_id, utility):
        self._check()
        self.values.setdefault(host, {})[msg_id] = utility

    def get(self, host, msg_id):
        self._check()
        return self.values.get(host, {}).get(msg_id, 0.0)
