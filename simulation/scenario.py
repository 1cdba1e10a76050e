# simulation/scenario.py
import logging
import random

from config import CONFIG, Settings
from models.host import DTNHost
from protocols.prophet import ProphetRouter
from protocols.spray_and_wait import SprayAndWaitRouter
from protocols.utility_router import UtilityRouter
from simulation.clock import SimClock
from simulation.events import MessageGenerator
from simulation.metrics import MessageStatsReport
from simulation.world import World
from traces.loader import TracePlayer

logger = logging.getLogger(__name__)

# Nom court -> (classe du routeur, section de configuration, libellé)
ROUTERS = {
    'utility': (UtilityRouter, 'UtilityRouter', 'Utility'),
    'spray': (SprayAndWaitRouter, 'SprayAndWaitRouter', 'Spray-and-Wait'),
    'prophet': (ProphetRouter, 'ProphetRouter', 'Prophet')
}


def build_world(router_name, trace, config=None):
    """
    Construit le monde simulé pour un protocole.

    Les énergies initiales et la suite de messages ne dépendent que de la
    graine du scénario: tous les protocoles sont comparés sur les mêmes
    conditions.

    Args:
        router_name (str): 'utility', 'spray' ou 'prophet'
        trace (pd.DataFrame): trace de positions
        config (dict, optional): configuration. Par défaut CONFIG.

    Returns:
        tuple: (World, MessageStatsReport)
    """
    config = CONFIG if config is None else config
    if router_name not in ROUTERS:
        raise ValueError(f"Protocole inconnu: {router_name}")
    router_cls, namespace, label = ROUTERS[router_name]

    scenario = Settings('Scenario', config)
    group = Settings('Group', config)
    events = Settings('Events', config)
    router_settings = Settings(namespace, config)
    seed = scenario.get_int('seed', 0)

    clock = SimClock()
    report = MessageStatsReport(clock, label)
    player = TracePlayer(trace)
    rng = random.Random(seed)
    energy_min, energy_max = group.get('energy')

    hosts = []
    for address in player.hosts:
        router = router_cls(router_settings, clock,
                            group.get_int('buffer_size'),
                            group.get_float('msg_ttl'),
                            group.get_str('send_queue', 'fifo'))
        router.add_listener(report)
        hosts.append(DTNHost(address, router, energy=rng.uniform(energy_min, energy_max)))

    generator = MessageGenerator(events.get('interval'), events.get('size'),
                                 seed=seed, end_time=scenario.get_float('end_time'))
    world = World(hosts, clock,
                  scenario.get_float('transmit_range'),
                  scenario.get_float('transmit_speed'),
                  scenario.get_float('update_interval'),
                  trace=player, generator=generator, seed=seed)
    logger.info("%s: %s", label, world)
    return world, report


def run_scenario(router_name, trace, config=None, progress=False):
    """
    Exécute une simulation complète pour un protocole.

    Returns:
        MessageStatsReport: statistiques de la simulation
    """
    config = CONFIG if config is None else config
    world, report = build_world(router_name, trace, config)
    world.run(Settings('Scenario', config).get_float('end_time'), progress=progress,
              desc=report.name)
    return report
