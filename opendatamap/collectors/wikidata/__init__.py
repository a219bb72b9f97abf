"""
Wikidata statistics collection module

- SPARQL client: Wikidata Query Service communication
- Population: population / official area lookup by OSM relation ID
"""

from .sparql_client import WikidataSparqlClient
from .population import PopulationResolver, fetch_population_data

__all__ = [
    "WikidataSparqlClient",
    "PopulationResolver",
    "fetch_population_data",
]
