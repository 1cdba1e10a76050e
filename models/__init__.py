#!/usr/bin/env python3
# models/__init__.py
"""
Package des objets simulés: nœuds, connexions et messages.
"""

from models.message import Message
from models.host import DTNHost
from models.connection import Connection

__all__ = ['Message', 'DTNHost', 'Connection']
