#!/usr/bin/env python3
# protocols/errors.py
"""
Exceptions levées par les routeurs DTN.

Ces erreurs signalent des violations d'invariants: elles ne sont jamais
rattrapées par les routeurs eux-mêmes.
"""


class RoutingError(Exception):
    """Erreur de base des protocoles de routage."""


class ProtocolMismatchError(RoutingError):
    """Le pair à l'autre bout de la connexion n'exécute pas le même protocole."""


class MissingCopiesError(RoutingError):
    """Un message transporté n'a pas de compteur de copies."""


class StaleSnapshotError(RoutingError):
    """Lecture d'un instantané d'utilités en dehors du pas qui l'a construit."""
