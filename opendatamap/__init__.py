"""
OpenDataMap boundary engine

Reconstructs administrative boundaries from OpenStreetMap relations and
enriches them with Wikidata statistics for the map UI.
"""

__version__ = "0.1.0"
