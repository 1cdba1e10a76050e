#!/usr/bin/env python3
# protocols/eviction.py
"""
Choix du message à supprimer quand le buffer est plein.

Un message est d'autant plus candidat à la suppression que:
- son TTL est consommé alors qu'il reste beaucoup de chemin à parcourir
  (on prend le minimum des deux pénalités: un message presque arrivé n'est
  pas sacrifié parce que son TTL est court);
- il est volumineux par rapport au buffer.

    priorité = min(pénalité_TTL, pénalité_position) * 0.65 + pénalité_taille * 0.35
"""
import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

MAX_DROP = 0.7       # Au-delà, le message est supprimé sans chercher le pire
SCHEDULE_WEIGHT = 0.65
SIZE_WEIGHT = 0.35


def ttl_penalty(message, now):
    if message.initial_ttl is None:
        return 0.0
    return 1.0 - message.remaining_ttl(now) / message.initial_ttl


def position_penalty(carrier_location, origin_location, destination_location):
    """
    Fraction du trajet restant à parcourir, bornée à 1.

    Args:
        carrier_location (array): position du nœud porteur
        origin_location (array): position de la source du message
        destination_location (array): position du destinataire

    Returns:
        float: pénalité entre 0 et 1
    """
    remaining = float(np.linalg.norm(np.asarray(carrier_location) - np.asarray(destination_location)))
    journey = float(np.linalg.norm(np.asarray(origin_location) - np.asarray(destination_location)))
    if journey == 0:
        return 1.0 if remaining > 0 else 0.0
    return min(remaining / journey, 1.0)


def discard_priority(message, carrier_location, buffer_size, now):
    """
    Calcule la priorité de suppression d'un message.

    Args:
        message (Message): message évalué
        carrier_location (array): position du nœud qui porte le message
        buffer_size (int): capacité du buffer du porteur
        now (float): temps courant

    Returns:
        float: priorité (plus elle est grande, plus tôt le message est supprimé)
    """
    schedule = min(ttl_penalty(message, now),
                   position_penalty(carrier_location,
                                    message.source.location,
                                    message.destination.location))
    size = message.size / buffer_size
    return schedule * SCHEDULE_WEIGHT + size * SIZE_WEIGHT


def select_victim(messages, priority, is_sending=None):
    """
    Sélectionne le message à supprimer.

    Dès qu'un message dépasse MAX_DROP il est retourné immédiatement;
    sinon c'est le message de plus haute priorité.

    Args:
        messages (iterable): messages candidats
        priority (callable): fonction message -> priorité
        is_sending (callable, optional): fonction id -> bool; les messages en
            cours d'envoi sont alors ignorés

    Returns:
        Message: le message à supprimer, ou None
    """
    worst = None
    worst_result = -math.inf
    for message in messages:
        if is_sending is not None and is_sending(message.id):
            continue
        result = priority(message)
        if result > MAX_DROP:
            logger.debug("Message %s au-delà du seuil (%.3f)", message, result)
            return message
        if result > worst_result:
            worst = message
            worst_result = result
    return worst
