# simulation/__init__.py
"""
Hôte de simulation minimal: horloge, monde, génération de messages,
statistiques et visualisation.
"""
