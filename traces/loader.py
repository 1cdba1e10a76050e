# traces/loader.py
import bisect

import numpy as np
import pandas as pd

TRACE_COLUMNS = ['time', 'host', 'x', 'y']


def load_trace(path):
    """
    Charge une trace de positions des nœuds.

    Le fichier CSV doit contenir les colonnes time, host, x, y: la position
    d'un nœud est valable jusqu'à l'échantillon suivant.

    Args:
        path: Chemin du fichier CSV

    Returns:
        pd.DataFrame: trace triée par temps puis par nœud
    """
    print(f"### Importation de la trace {path} ###")
    df = pd.read_csv(path, header=0)
    missing = [c for c in TRACE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Colonnes manquantes dans la trace: {', '.join(missing)}")
    df = df[TRACE_COLUMNS].astype({'time': float, 'host': int, 'x': float, 'y': float})
    return df.sort_values(['time', 'host']).reset_index(drop=True)


def generate_random_trace(nrof_hosts, end_time, world_size=(1000, 1000),
                          max_step=10.0, interval=1.0, seed=None):
    """
    Génère une trace synthétique (marche aléatoire bornée) pour les essais.

    Args:
        nrof_hosts (int): Nombre de nœuds
        end_time (float): Durée couverte par la trace (s)
        world_size (tuple): Dimensions (largeur, hauteur) de la zone
        max_step (float): Déplacement maximal par échantillon et par axe
        interval (float): Intervalle entre deux échantillons (s)
        seed (int, optional): Graine aléatoire

    Returns:
        pd.DataFrame: trace au format de load_trace()
    """
    rng = np.random.default_rng(seed)
    size = np.asarray(world_size, dtype=float)
    times = np.arange(0.0, end_time + interval, interval)
    pos = rng.uniform(0, 1, size=(nrof_hosts, 2)) * size
    frames = []
    for t in times:
        frames.append(pd.DataFrame({'time': t, 'host': np.arange(nrof_hosts),
                                    'x': pos[:, 0], 'y': pos[:, 1]}))
        pos = np.clip(pos + rng.uniform(-max_step, max_step, size=pos.shape), 0, size)
    return pd.concat(frames, ignore_index=True)


class TracePlayer:
    """
    Relit une trace: retourne les positions valables à un instant donné.
    """

    def __init__(self, trace):
        """
        Args:
            trace (pd.DataFrame): trace au format de load_trace()
        """
        self.times = []
        self.frames = []
        for t, group in trace.groupby('time', sort=True):
            self.times.append(float(t))
            self.frames.append({int(h): (x, y) for h, x, y in
                                zip(group['host'], group['x'], group['y'])})

    @property
    def hosts(self):
        addresses = set()
        for frame in self.frames:
            addresses.update(frame)
        return sorted(addresses)

    def positions_at(self, t):
        """
        Returns:
            dict: {adresse: (x, y)} du dernier échantillon à t ou avant
        """
        idx = bisect.bisect_right(self.times, t) - 1
        if idx < 0:
            return {}
        return self.frames[idx]
