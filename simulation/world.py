# simulation/world.py
import logging
import random

import numpy as np
from tqdm import tqdm

from models.connection import Connection

logger = logging.getLogger(__name__)


class World:
    """
    Représente le monde simulé: les nœuds, leurs connexions et l'horloge.

    À chaque pas, le monde déplace les nœuds selon la trace, établit ou
    coupe les connexions selon la portée radio, fait progresser les
    transferts, crée les nouveaux messages puis met à jour chaque routeur.
    """

    def __init__(self, hosts, clock, transmit_range, transmit_speed,
                 update_interval=1.0, trace=None, generator=None, seed=None):
        """
        Constructeur d'un objet World

        Args:
            hosts (list(DTNHost)): nœuds du monde
            clock (SimClock): horloge partagée avec les routeurs
            transmit_range (float): distance maximale pour établir une connexion
            transmit_speed (float): débit des connexions en octets/s
            update_interval (float, optional): durée d'un pas. Par défaut 1.0.
            trace (TracePlayer, optional): positions des nœuds au cours du temps
            generator (MessageGenerator, optional): créateur de messages
            seed (int, optional): graine pour l'ordre de mise à jour des nœuds
        """
        self.hosts = list(hosts)
        self.clock = clock
        self.transmit_range = float(transmit_range)
        self.transmit_speed = float(transmit_speed)
        self.update_interval = float(update_interval)
        self.trace = trace
        self.generator = generator
        self.rng = random.Random(seed)
        self.connections = {}  # (adresse_a, adresse_b) -> Connection

    def __str__(self):
        nb_hosts = len(self.hosts)
        return (f"Monde avec {nb_hosts} nœud{'s' if nb_hosts > 1 else ''}, "
                f"portée {self.transmit_range}, t={self.clock.time}")

    def get_host(self, address):
        for host in self.hosts:
            if host.address == address:
                return host
        return None

    #*************** Mobilité ****************
    def move_hosts(self):
        if self.trace is None:
            return
        positions = self.trace.positions_at(self.clock.time)
        for host in self.hosts:
            if host.address in positions:
                host.move_to(*positions[host.address])

    def distance_matrix(self):
        """
        Calcule la matrice des distances euclidiennes entre les nœuds.

        Returns:
            np.ndarray: matrice (n, n) des distances
        """
        pos = np.array([host.location for host in self.hosts])
        return np.linalg.norm(pos[:, None, :] - pos[None, :, :], axis=-1)

    #*************** Connexions ****************
    def update_connections(self):
        """Établit ou coupe les connexions selon la portée radio."""
        if len(self.hosts) < 2:
            return
        in_range = self.distance_matrix() <= self.transmit_range
        for i, a in enumerate(self.hosts):
            for j in range(i + 1, len(self.hosts)):
                b = self.hosts[j]
                con = self.connections.get((a.address, b.address))
                if in_range[i, j] and con is None:
                    self.connect(a, b)
                elif not in_range[i, j] and con is not None:
                    self.disconnect(con)

    def connect(self, a, b):
        """
        Crée une connexion entre `a` et `b` et prévient leurs routeurs.

        Returns:
            Connection: la nouvelle connexion
        """
        con = Connection(a, b, self.transmit_speed)
        self.connections[(a.address, b.address)] = con
        a.add_connection(con)
        b.add_connection(con)
        logger.debug("t=%.1f connexion %s", self.clock.time, con)
        a.router.changed_connection(con)
        b.router.changed_connection(con)
        return con

    def disconnect(self, con):
        con.abort_transfer()
        con.is_up = False
        del self.connections[(con.host_a.address, con.host_b.address)]
        con.host_a.remove_connection(con)
        con.host_b.remove_connection(con)
        logger.debug("t=%.1f déconnexion %s", self.clock.time, con)
        con.host_a.router.changed_connection(con)
        con.host_b.router.changed_connection(con)

    #*************** Boucle de simulation ****************
    def step(self):
        """Exécute un pas de simulation."""
        self.clock.advance(self.update_interval)
        self.move_hosts()
        self.update_connections()
        for con in self.connections.values():
            con.update(self.update_interval)
        if self.generator is not None:
            self.generator.update(self)

        # Mélange pour éviter les biais d'ordre entre nœuds
        order = list(self.hosts)
        self.rng.shuffle(order)
        for host in order:
            host.update()

    def run(self, end_time, progress=False, desc="Simulation"):
        """
        Exécute la simulation jusqu'à `end_time`.

        Args:
            end_time (float): instant de fin
            progress (bool, optional): afficher une barre de progression tqdm
            desc (str, optional): libellé de la barre de progression
        """
        nrof_steps = int(round((end_time - self.clock.time) / self.update_interval))
        self.move_hosts()
        self.update_connections()
        for _ in tqdm(range(nrof_steps), desc=desc, unit="pas", disable=not progress):
            self.step()
