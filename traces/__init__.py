# traces/__init__.py
"""
Chargement et relecture des traces de positions des nœuds.
"""
