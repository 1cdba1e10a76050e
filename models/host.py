# models/host.py
import numpy as np


class DTNHost:
    """
    Représente un nœud mobile du réseau DTN.

    Le nœud porte sa position, son niveau d'énergie, la liste de ses
    connexions actives et le routeur qui décide de ses transferts.
    """

    def __init__(self, address, router, x=0.0, y=0.0, energy=100.0):
        """
        Constructeur d'un objet DTNHost

        Args:
            address (int): numéro d'identification du nœud (obligatoire)
            router (DTNProtocol): routeur de ce nœud, lié au nœud par le constructeur
            x (float, optional): coordonnée x. Par défaut 0.0.
            y (float, optional): coordonnée y. Par défaut 0.0.
            energy (float, optional): niveau d'énergie. Par défaut 100.0.
        """
        self.address = int(address)
        self.location = np.array([float(x), float(y)], dtype=float)
        self.energy = float(energy)
        self.connections = []  # Liste des connexions actives
        self.router = router
        router.init(self)

    def __str__(self):
        return f"n{self.address}"

    def __repr__(self):
        return f"DTNHost({self.address})"

    def __lt__(self, other):
        return self.address < other.address

    #*************** Opérations courantes ****************
    def move_to(self, x, y):
        self.location = np.array([float(x), float(y)], dtype=float)

    def distance_to(self, other):
        """
        Calcule la distance euclidienne entre deux nœuds.

        Args:
            other (DTNHost): le nœud avec lequel calculer la distance.

        Returns:
            float: la distance euclidienne entre les deux nœuds.
        """
        return float(np.linalg.norm(self.location - other.location))

    def has_energy(self):
        return self.energy > 0

    def add_connection(self, con):
        if con not in self.connections:
            self.connections.append(con)

    def remove_connection(self, con):
        if con in self.connections:
            self.connections.remove(con)

    #*************** Délégation au routeur ****************
    @property
    def buffer_size(self):
        return self.router.buffer_size

    @property
    def messages(self):
        return self.router.get_message_collection()

    def create_new_message(self, message):
        return self.router.create_new_message(message)

    def update(self):
        self.router.update()
