"""
OSM response parser

Parses Overpass API responses into OSMNode, OSMWay and OSMRelation objects
"""

from typing import Dict, Any, List, Optional, Tuple
from .models import OSMNode, OSMWay, OSMMember, OSMRelation


def geometry_to_coords(geometry: Optional[List[Any]]) -> Optional[List[List[float]]]:
    """
    Convert Overpass geometry to [lon, lat] pairs

    Overpass 'out geom' returns a list of {lat, lon} objects; lists already
    in [lon, lat] order are passed through. Null or non-numeric points are skipped.
    """
    if not geometry or not isinstance(geometry, list):
        return None

    coords = []
    for point in geometry:
        if isinstance(point, dict):
            lon, lat = point.get("lon"), point.get("lat")
        elif isinstance(point, (list, tuple)) and len(point) >= 2:
            lon, lat = point[0], point[1]
        else:
            continue
        try:
            coords.append([float(lon), float(lat)])
        except (TypeError, ValueError):
            continue
    return coords or None


class OSMResponseParser:
    """Parses Overpass API responses"""

    @staticmethod
    def parse_elements(data: Dict[str, Any]) -> Tuple[Dict[int, OSMNode], List[OSMWay], List[OSMRelation]]:
        """
        Parse Overpass response into nodes, ways and relations

        Member geometry missing from a relation (e.g. 'out body; >; out geom')
        is filled in from the matching top-level way or node element.

        Args:
            data: JSON response from Overpass API

        Returns:
            Tuple of (nodes dict, ways list, relations list)
        """
        nodes = {}
        ways = []
        raw_relations = []

        if not isinstance(data, dict):
            return nodes, ways, raw_relations

        elements = data.get("elements")
        if not isinstance(elements, list):
            elements = []

        for element in elements:
            # Elements without an id cannot be referenced or reported
            if not isinstance(element, dict) or element.get("id") is None:
                continue
            element_type = element.get("type")
            if element_type == "node":
                point = geometry_to_coords([element])
                if not point:
                    continue
                nodes[element["id"]] = OSMNode(
                    id=element["id"],
                    lat=point[0][1],
                    lon=point[0][0],
                    tags=element.get("tags", {}) or {}
                )
            elif element_type == "way":
                ways.append(OSMWay(
                    id=element["id"],
                    tags=element.get("tags", {}) or {},
                    geometry=geometry_to_coords(element.get("geometry"))
                ))
            elif element_type == "relation":
                raw_relations.append(element)

        ways_by_id = {w.id: w for w in ways}
        relations = [
            OSMResponseParser._parse_relation(element, nodes, ways_by_id)
            for element in raw_relations
        ]

        return nodes, ways, relations

    @staticmethod
    def _parse_relation(
        element: Dict[str, Any],
        nodes: Dict[int, OSMNode],
        ways_by_id: Dict[int, OSMWay]
    ) -> OSMRelation:
        members = []
        raw_members = element.get("members")
        if not isinstance(raw_members, list):
            raw_members = []

        for raw in raw_members:
            if not isinstance(raw, dict) or raw.get("ref") is None:
                continue
            member = OSMMember(
                type=raw.get("type", ""),
                ref=raw.get("ref"),
                role=raw.get("role", "") or "",
                geometry=geometry_to_coords(raw.get("geometry")),
                lat=raw.get("lat"),
                lon=raw.get("lon"),
                tags=raw.get("tags")
            )

            # Geometry stored on top-level elements instead of the member
            if member.type == "way" and not member.geometry:
                way = ways_by_id.get(member.ref)
                if way and way.geometry:
                    member.geometry = way.geometry
            elif member.type == "node" and member.lat is None:
                node = nodes.get(member.ref)
                if node:
                    member.lat, member.lon = node.lat, node.lon

            members.append(member)

        return OSMRelation(
            id=element["id"],
            members=members,
            tags=element.get("tags", {}) or {}
        )

    @staticmethod
    def first_relation(data: Dict[str, Any]) -> Optional[OSMRelation]:
        """Parse a response and return its first relation, if any"""
        _, _, relations = OSMResponseParser.parse_elements(data)
        return relations[0] if relations else None
