"""
Population and official area lookup

Wikidata items are linked to OSM relations through P402 (OSM relation ID);
P1082 is population and P2046 is area.
"""

import math
from typing import Any, Dict, Optional
from loguru import logger

from .sparql_client import WikidataSparqlClient
from ...models import PopulationData


POPULATION_QUERY = """
SELECT ?population ?area WHERE {{
  ?item wdt:P402 "{osm_id}" .
  OPTIONAL {{ ?item wdt:P1082 ?population . }}
  OPTIONAL {{ ?item wdt:P2046 ?area . }}
}}
LIMIT 1
"""


def _binding_value(binding: Dict[str, Any], key: str) -> Optional[str]:
    cell = binding.get(key)
    if not isinstance(cell, dict):
        return None
    value = cell.get("value")
    return value if value not in (None, "") else None


def parse_population(value: Optional[str]) -> Optional[int]:
    """Integer population; decimal strings are truncated, garbage is None"""
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def parse_area(value: Optional[str]) -> Optional[float]:
    """Float area; non-numeric or non-finite values are None"""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class PopulationResolver:
    """Resolves population and official area for an OSM relation"""

    def __init__(self, client: Optional[WikidataSparqlClient] = None):
        self.client = client or WikidataSparqlClient()

    def fetch_population_data(self, osm_relation_id: int) -> PopulationData:
        """
        Fetch population and official area from Wikidata

        Never raises: transport or parsing failures are logged and yield
        an empty record, as does a relation with no Wikidata item.

        Args:
            osm_relation_id: OSM relation ID

        Returns:
            PopulationData with population / official_area (None when absent)
        """
        try:
            osm_id = int(osm_relation_id)
        except (TypeError, ValueError):
            logger.warning(f"Invalid OSM relation ID for population lookup: {osm_relation_id!r}")
            return PopulationData()

        try:
            data = self.client.query(POPULATION_QUERY.format(osm_id=osm_id))
            bindings = WikidataSparqlClient.bindings(data)
        except Exception as e:
            logger.error(f"Error fetching population data for relation {osm_id}: {e}")
            return PopulationData()

        if not bindings:
            logger.debug(f"No Wikidata statistics for relation {osm_id}")
            return PopulationData()

        binding = bindings[0]
        result = PopulationData(
            population=parse_population(_binding_value(binding, "population")),
            official_area=parse_area(_binding_value(binding, "area"))
        )
        logger.debug(f"Relation {osm_id}: population={result.population}, official_area={result.official_area}")
        return result


def fetch_population_data(osm_relation_id: int, client: Optional[WikidataSparqlClient] = None) -> PopulationData:
    """Module-level shortcut for PopulationResolver.fetch_population_data"""
    return PopulationResolver(client).fetch_population_data(osm_relation_id)
