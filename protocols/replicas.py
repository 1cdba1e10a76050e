#!/usr/bin/env python3
# protocols/replicas.py
"""
Gestion du nombre de copies d'un message en mode Spray-and-Wait binaire.

Principe:
1. Phase Spray: à la création, le message reçoit L copies. Lors d'un
   transfert, le récepteur obtient floor(n/2) copies et l'émetteur en garde
   ceil(n/2); le total n'augmente jamais.
2. Phase Wait: un nœud qui n'a plus qu'une copie attend de rencontrer
   directement la destination.

Le compteur est stocké dans les propriétés du message, pas dans le routeur.

Référence: Spyropoulos, Psounis, Raghavendra,
"Spray and Wait: An Efficient Routing Scheme for Intermittently Connected Mobile Networks"
"""
import math

from protocols.errors import MissingCopiesError


class ReplicaController:
    """Compteur de copies binaire attaché aux messages."""

    def __init__(self, initial_copies: int, property_key: str):
        """
        Args:
            initial_copies (int): Nombre initial de copies (L)
            property_key (str): Clé de la propriété de message portant le compteur
        """
        if initial_copies < 1:
            raise ValueError("Le nombre initial de copies doit être >= 1")
        self.initial_copies = initial_copies
        self.property_key = property_key

    def on_create_message(self, message):
        message.add_property(self.property_key, self.initial_copies)
        return self.initial_copies

    def copies(self, message):
        """
        Retourne le nombre de copies restantes.

        Raises:
            MissingCopiesError: si le message n'a pas été créé par ce protocole
        """
        nrof_copies = message.get_property(self.property_key)
        if nrof_copies is None:
            raise MissingCopiesError(
                f"Le message {message.id} n'a pas de propriété {self.property_key}")
        return nrof_copies

    def on_receive(self, message):
        """Côté récepteur: floor(n/2) copies."""
        nrof_copies = int(math.floor(self.copies(message) / 2.0))
        message.update_property(self.property_key, nrof_copies)
        return nrof_copies

    def on_send_completed(self, message):
        """Côté émetteur: ceil(n/2) copies."""
        nrof_copies = int(math.ceil(self.copies(message) / 2.0))
        message.update_property(self.property_key, nrof_copies)
        return nrof_copies

    def has_copies_left(self, message):
        return self.copies(message) > 1
