"""
Outline resolution

Finds a renderable outline for a Wikidata item (or an OSM relation ID)
by trying progressively looser Overpass queries, then converts whatever
came back into GeoJSON:

- relation with closed outer ways -> Polygon / MultiPolygon
- relation whose ways don't close -> MultiLineString
- bare ways                       -> LineString / MultiLineString
"""

import re
from typing import Any, Dict, List, Optional, Tuple
from loguru import logger

from .utils import is_closed
from ..collectors.overpass import OverpassAPIClient, OSMResponseParser
from ..collectors.overpass import queries
from ..config import get_config, PipelineConfig
from ..models import (
    Feature,
    FeatureCollection,
    GeoJSONLineString,
    GeoJSONMultiLineString,
    GeoJSONMultiPolygon,
    GeoJSONPolygon,
    OutlineResult,
)

QID_PATTERN = re.compile(r"^Q\d+$")

# (source tag, query builder), most specific first
IDENTIFIER_QUERIES = [
    ("admin-relation", queries.admin_relation_by_qid),
    ("generic-relation", queries.relation_by_qid),
    ("way-fallback", queries.way_by_qid),
]


def _has_elements(data) -> bool:
    return isinstance(data, dict) and bool(data.get("elements"))


def _collection(geometry, properties: Dict[str, Any]) -> FeatureCollection:
    return FeatureCollection(features=[Feature(properties=properties, geometry=geometry)])


def overpass_to_geojson(
    data: Dict[str, Any],
    properties: Optional[Dict[str, Any]] = None
) -> Tuple[Optional[FeatureCollection], Optional[str]]:
    """
    Convert a raw Overpass response into an outline FeatureCollection

    Args:
        data: Overpass JSON ({"elements": [...]})
        properties: Extra feature properties

    Returns:
        (FeatureCollection, kind) or (None, None) if nothing is drawable
    """
    if not _has_elements(data):
        return None, None

    base = dict(properties or {})
    _, ways, relations = OSMResponseParser.parse_elements(data)

    relation = relations[0] if relations else None
    if relation is not None and relation.members:
        member_ways = [m for m in relation.members if m.type == "way" and m.has_geometry]

        rings = [
            m.geometry for m in member_ways
            if m.role in ("outer", "") and len(m.geometry) > 3 and is_closed(m.geometry)
        ]
        if rings:
            props = {**base, "kind": "relation-boundary", "id": relation.id}
            if len(rings) == 1:
                geometry = GeoJSONPolygon(coordinates=rings)
            else:
                geometry = GeoJSONMultiPolygon(coordinates=[[r] for r in rings])
            return _collection(geometry, props), "relation-polygon"

        lines = [m.geometry for m in member_ways]
        if lines:
            props = {**base, "kind": "relation-lines", "id": relation.id}
            return _collection(GeoJSONMultiLineString(coordinates=lines), props), "relation-lines"

    way_lines = [w.geometry for w in ways if w.geometry]
    if way_lines:
        props = {**base, "kind": "way-lines"}
        if len(way_lines) == 1:
            geometry = GeoJSONLineString(coordinates=way_lines[0])
        else:
            geometry = GeoJSONMultiLineString(coordinates=way_lines)
        return _collection(geometry, props), "way-lines"

    return None, None


class OutlineResolver:
    """Layered outline lookup against Overpass"""

    def __init__(
        self,
        overpass_client: Optional[OverpassAPIClient] = None,
        config: Optional[PipelineConfig] = None
    ):
        self.config = config or get_config()
        self.overpass_client = overpass_client or OverpassAPIClient(self.config)
        self.timeout = self.config.api.overpass_timeout

    @staticmethod
    def _convert(
        data: Dict[str, Any],
        properties: Dict[str, Any]
    ) -> Tuple[Optional[FeatureCollection], Optional[str]]:
        """overpass_to_geojson, with malformed data logged and treated as no geometry"""
        try:
            return overpass_to_geojson(data, properties)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed Overpass data while building outline: {e}")
            return None, None

    def fetch_outline_by_identifier(self, qid: str) -> OutlineResult:
        """
        Resolve an outline for a Wikidata item

        Tries admin-boundary relation, any relation, then way, stopping at
        the first query that returns at least one element.

        Args:
            qid: Wikidata identifier such as "Q1858"

        Returns:
            OutlineResult; source names the query used, or why nothing was found
        """
        if not isinstance(qid, str) or not QID_PATTERN.match(qid):
            logger.warning(f"Invalid Wikidata identifier: {qid!r}")
            return OutlineResult(source="invalid-id")

        failures = 0
        for source, build_query in IDENTIFIER_QUERIES:
            try:
                data = self.overpass_client.query(build_query(qid, self.timeout))
            except Exception as e:
                logger.warning(f"Outline query '{source}' failed for {qid}: {e}")
                failures += 1
                continue

            if not _has_elements(data):
                logger.debug(f"Outline query '{source}' returned no elements for {qid}")
                continue

            geojson, kind = self._convert(data, {"source": "overpass", "qid": qid})
            if geojson is None:
                logger.warning(f"Outline query '{source}' for {qid} returned elements without geometry")
                return OutlineResult(source="no-geometry")

            logger.info(f"Outline for {qid} resolved via '{source}' ({kind})")
            relation_id = geojson.features[0].properties.get("id")
            return OutlineResult(geojson=geojson, source=source, kind=kind, relation_id=relation_id)

        if failures == len(IDENTIFIER_QUERIES):
            return OutlineResult(source="http-error")
        return OutlineResult(source="empty-elements")

    def fetch_outline_by_relation_id(self, osm_relation_id: int) -> OutlineResult:
        """
        Resolve an outline for a known OSM relation in a single query

        Returns:
            OutlineResult with source "single-query" on success
        """
        try:
            relation_id = int(osm_relation_id)
        except (TypeError, ValueError):
            return OutlineResult(source="invalid-id")
        if relation_id <= 0:
            return OutlineResult(source="invalid-id")

        try:
            data = self.overpass_client.query(queries.relation_recursive_query(relation_id, self.timeout))
        except Exception as e:
            logger.error(f"Outline query failed for relation {relation_id}: {e}")
            return OutlineResult(source="http-error")

        if not _has_elements(data):
            return OutlineResult(source="empty-elements")

        geojson, kind = self._convert(data, {"source": "overpass-osm-id"})
        if geojson is None:
            return OutlineResult(source="no-geometry")

        return OutlineResult(geojson=geojson, source="single-query", kind=kind, relation_id=relation_id)


def outline_geometry_types(result: OutlineResult) -> List[str]:
    """Geometry type of each feature in an outline result"""
    if result.geojson is None:
        return []
    return [f.geometry.type for f in result.geojson.features]
