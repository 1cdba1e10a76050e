"""
Configuration pytest et fixtures partagées pour les tests des routeurs DTN.
"""

import copy

import pytest

from config import CONFIG, Settings
from models.host import DTNHost
from models.message import Message
from protocols.utility_router import UtilityRouter
from simulation.clock import SimClock
from simulation.world import World


@pytest.fixture
def clock():
    """Horloge de simulation à t=0"""
    return SimClock()


@pytest.fixture
def router_config():
    """Paramètres du routeur: une seconde par unité de temps, pas de vieillissement"""
    return {
        'UtilityRouter': {'secondsInTimeUnit': 1, 'nrofCopies': 8, 'gamma': 1.0},
        'SprayAndWaitRouter': {'nrofCopies': 8},
        'ProphetRouter': {'secondsInTimeUnit': 1}
    }


@pytest.fixture
def make_host(clock, router_config):
    """Fabrique de nœuds équipés d'un routeur"""
    def _make(address, x=0.0, y=0.0, energy=100.0, buffer_size=1000,
              router_cls=UtilityRouter, namespace='UtilityRouter'):
        router = router_cls(Settings(namespace, router_config), clock, buffer_size)
        return DTNHost(address, router, x, y, energy)
    return _make


@pytest.fixture
def make_world(clock):
    """Fabrique de mondes: portée 15, débit élevé (transfert en un pas)"""
    def _make(hosts, transmit_range=15.0, transmit_speed=1e6):
        return World(hosts, clock, transmit_range, transmit_speed, seed=7)
    return _make


@pytest.fixture
def make_message(clock):
    """Fabrique de messages créés à l'instant courant"""
    def _make(msg_id, source, destination, size=100, ttl=None):
        return Message(msg_id, source, destination, size, clock.time, ttl)
    return _make


@pytest.fixture
def small_config():
    """Scénario réduit pour les simulations complètes"""
    config = copy.deepcopy(CONFIG)
    config['Scenario'].update({'end_time': 300, 'transmit_range': 150.0, 'seed': 3})
    config['Group'].update({'buffer_size': 2000000, 'msg_ttl': 600})
    config['Events'].update({'interval': (10, 20), 'size': (10000, 100000)})
    return config
