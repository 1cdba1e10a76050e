#!/usr/bin/env python3
# protocols/__init__.py
"""
Package des protocoles DTN.

Ce package contient le routeur à utilité et les routeurs de référence pour
les réseaux tolérants aux délais (DTN).

Protocoles disponibles:
- DTNProtocol: Classe de base définissant l'interface commune et la gestion du buffer
- UtilityRouter: Routeur hybride PRoPHET / Spray-and-Wait pondéré par l'énergie,
  le recouvrement des contacts et la file d'envoi, avec suppression intelligente
- SprayAndWaitRouter: Spray-and-Wait binaire
- ProphetRouter: PRoPHET (Probabilistic Routing Protocol using History of
  Encounters and Transitivity)
"""

from protocols.base import DTNProtocol
from protocols.utility_router import UtilityRouter
from protocols.spray_and_wait import SprayAndWaitRouter
from protocols.prophet import ProphetRouter

__all__ = ['DTNProtocol', 'UtilityRouter', 'SprayAndWaitRouter', 'ProphetRouter']
