# simulation/metrics.py
"""
Module pour le calcul des métriques de performance des routeurs DTN.

Le rapport s'abonne aux routeurs (add_listener) et compte les créations,
transferts, suppressions et livraisons de messages pendant la simulation.
"""
import math

import numpy as np
import pandas as pd
from tabulate import tabulate


class MessageStatsReport:
    """
    Statistiques de livraison des messages d'une simulation.

    Métriques principales:
    - delivery_prob: messages livrés / messages créés
    - overhead_ratio: (relais - livrés) / livrés
    - latency_avg: délai moyen de livraison
    - hopcount_avg: nombre moyen de sauts des messages livrés
    - buffertime_avg: temps moyen passé dans un buffer avant suppression
    """

    def __init__(self, clock, name=""):
        """
        Args:
            clock (SimClock): Horloge de simulation
            name (str): Nom du scénario ou du protocole
        """
        self.clock = clock
        self.name = name
        self.created = {}       # id -> Message d'origine
        self.delivered = {}     # id -> (latence, nombre de sauts)
        self.nrof_started = 0
        self.nrof_relayed = 0
        self.nrof_aborted = 0
        self.nrof_dropped = 0
        self.nrof_removed = 0
        self.nrof_expired = 0
        self.buffer_times = []

    #*************** Événements ****************
    def new_message(self, message):
        self.created[message.id] = message

    def message_transfer_started(self, message, from_host, to_host):
        self.nrof_started += 1

    def message_transfer_aborted(self, message, from_host, to_host):
        self.nrof_aborted += 1

    def message_transferred(self, message, from_host, to_host, first_delivery):
        self.nrof_relayed += 1
        if first_delivery:
            latency = self.clock.time - message.creation_time
            self.delivered[message.id] = (latency, message.hop_count)

    def message_deleted(self, message, host, drop, reason='drop'):
        if reason == 'ttl':
            self.nrof_expired += 1
        elif drop:
            self.nrof_dropped += 1
        else:
            self.nrof_removed += 1
        self.buffer_times.append(self.clock.time - message.receive_time)

    #*************** Métriques ****************
    def delivery_prob(self):
        if not self.created:
            return 0.0
        return len(self.delivered) / len(self.created)

    def overhead_ratio(self):
        """
        Returns:
            float: transmissions inutiles par message livré, ou inf si aucune livraison
        """
        nrof_delivered = len(self.delivered)
        if nrof_delivered == 0:
            return math.inf
        return (self.nrof_relayed - nrof_delivered) / nrof_delivered

    def latency_avg(self):
        if not self.delivered:
            return math.nan
        return float(np.mean([lat for lat, _ in self.delivered.values()]))

    def hopcount_avg(self):
        if not self.delivered:
            return math.nan
        return float(np.mean([hops for _, hops in self.delivered.values()]))

    def buffertime_avg(self):
        if not self.buffer_times:
            return math.nan
        return float(np.mean(self.buffer_times))

    def summary(self):
        """
        Returns:
            dict: métriques agrégées de la simulation
        """
        return {
            'protocol': self.name,
            'created': len(self.created),
            'started': self.nrof_started,
            'relayed': self.nrof_relayed,
            'aborted': self.nrof_aborted,
            'dropped': self.nrof_dropped,
            'removed': self.nrof_removed,
            'expired': self.nrof_expired,
            'delivered': len(self.delivered),
            'delivery_prob': self.delivery_prob(),
            'overhead_ratio': self.overhead_ratio(),
            'latency_avg': self.latency_avg(),
            'hopcount_avg': self.hopcount_avg(),
            'buffertime_avg': self.buffertime_avg()
        }

    def to_dataframe(self):
        """
        Returns:
            pd.DataFrame: une ligne par message créé
        """
        rows = []
        for msg_id, message in self.created.items():
            latency, hops = self.delivered.get(msg_id, (math.nan, math.nan))
            rows.append({
                'protocol': self.name,
                'id': msg_id,
                'source': message.source.address,
                'destination': message.destination.address,
                'size': message.size,
                't_emit': message.creation_time,
                'delivered': msg_id in self.delivered,
                'latency': latency,
                'num_hops': hops
            })
        return pd.DataFrame(rows, columns=['protocol', 'id', 'source', 'destination', 'size',
                                           't_emit', 'delivered', 'latency', 'num_hops'])


def comparison_table(reports, table_format='grid'):
    """
    Génère un tableau comparatif des rapports.

    Args:
        reports (list(MessageStatsReport)): rapports à comparer
        table_format (str): format tabulate

    Returns:
        str: tableau formaté
    """
    headers = ["Protocole", "Créés", "Livrés", "Taux de livraison", "Overhead",
               "Latence moy. (s)", "Sauts moy.", "Supprimés"]
    table_data = []
    for report in reports:
        s = report.summary()
        table_data.append([
            s['protocol'], s['created'], s['delivered'],
            f"{s['delivery_prob']:.3f}", f"{s['overhead_ratio']:.2f}",
            f"{s['latency_avg']:.1f}", f"{s['hopcount_avg']:.2f}",
            s['dropped']
        ])
    return tabulate(table_data, headers=headers, tablefmt=table_format)


def summaries_to_dataframe(reports):
    return pd.DataFrame([report.summary() for report in reports])
