"""
Data collectors for the boundary engine

- OverpassAPIClient: raw OSM relations, ways and nodes from Overpass
- WikidataSparqlClient / PopulationResolver: population and area statistics
"""

from .overpass import OverpassAPIClient, OSMResponseParser
from .wikidata import WikidataSparqlClient, PopulationResolver

__all__ = [
    "OverpassAPIClient",
    "OSMResponseParser",
    "WikidataSparqlClient",
    "PopulationResolver",
]
