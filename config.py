# config.py
import os

# Configuration centralisée pour tout le projet
CONFIG = {
    'outdir': 'data_logs',
    'UtilityRouter': {
        'secondsInTimeUnit': 30,   # Durée (s) d'une unité de temps pour le vieillissement
        'nrofCopies': 8,           # Nombre initial de copies d'un message
        'beta': 0.25,              # Facteur de transitivité
        'gamma': 0.98              # Facteur de vieillissement
    },
    'SprayAndWaitRouter': {
        'nrofCopies': 8
    },
    'ProphetRouter': {
        'secondsInTimeUnit': 30
    },
    'Scenario': {
        'update_interval': 1.0,    # Durée d'un pas de simulation (s)
        'end_time': 3600,          # Fin de la simulation (s)
        'transmit_range': 50.0,    # Portée radio (m)
        'transmit_speed': 250000,  # Débit des liens (octets/s)
        'world_size': (1000, 1000),
        'seed': 1
    },
    'Group': {
        'nrof_hosts': 30,
        'buffer_size': 5000000,    # Capacité du buffer (octets)
        'energy': (50.0, 100.0),   # Niveau d'énergie initial (min, max)
        'msg_ttl': 1800,           # TTL des messages (s)
        'send_queue': 'fifo'       # Politique de file: 'fifo' ou 'size'
    },
    'Events': {
        'interval': (25, 35),      # Intervalle entre deux créations de messages (s)
        'size': (50000, 500000)    # Taille des messages (octets)
    }
}


class SettingsError(KeyError):
    """Paramètre obligatoire absent de la configuration."""


class Settings:
    """
    Accès typé à un espace de noms de la configuration.

    Les routeurs lisent leurs paramètres via cet objet plutôt que directement
    dans CONFIG, ce qui permet d'injecter une configuration de test.
    """

    def __init__(self, namespace: str, config: dict = None):
        """
        Args:
            namespace (str): Nom de la section (ex: 'UtilityRouter')
            config (dict, optional): Configuration à utiliser. Par défaut CONFIG.
        """
        self.namespace = namespace
        source = CONFIG if config is None else config
        self.values = dict(source.get(namespace, {}))

    def contains(self, name: str) -> bool:
        return name in self.values

    def _get(self, name, default):
        if name in self.values:
            return self.values[name]
        if default is not None:
            return default
        raise SettingsError(f"Paramètre obligatoire manquant: {self.namespace}.{name}")

    def get_int(self, name: str, default: int = None) -> int:
        return int(self._get(name, default))

    def get_float(self, name: str, default: float = None) -> float:
        return float(self._get(name, default))

    def get_str(self, name: str, default: str = None) -> str:
        return str(self._get(name, default))

    def get(self, name: str, default=None):
        """Retourne la valeur brute (tuples compris)."""
        return self._get(name, default)


# Paramètres de scénario (pour accès facile)
UPDATE_INTERVAL = CONFIG['Scenario']['update_interval']
END_TIME        = CONFIG['Scenario']['end_time']
TRANSMIT_RANGE  = CONFIG['Scenario']['transmit_range']
TRANSMIT_SPEED  = CONFIG['Scenario']['transmit_speed']
SEED            = CONFIG['Scenario']['seed']
OUTDIR          = CONFIG['outdir']

# Créer le dossier de sortie s'il n'existe pas
os.makedirs(OUTDIR, exist_ok=True)
