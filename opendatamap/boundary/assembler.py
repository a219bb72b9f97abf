"""
Boundary Assembler

Orchestrates boundary reconstruction for one OSM relation:
fetch -> partition members -> stitch rings -> measure -> enrich -> emit.

Errors never propagate to the caller; they surface as a null geometry
and a status tag on the result.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional
from loguru import logger

from .stitching import connect_ways, connect_all_ways
from .utils import (
    calculate_polygon_area,
    calculate_density,
    close_ring,
    format_area,
    format_density,
    geometry_bounds,
    get_polygon_centroid,
)
from ..collectors.overpass import OverpassAPIClient, OSMResponseParser, OSMRelation
from ..collectors.overpass import queries
from ..collectors.wikidata import PopulationResolver
from ..config import get_config, PipelineConfig
from ..models import (
    BoundaryMembers,
    BoundaryResult,
    BoundaryStats,
    Feature,
    GeoJSONPoint,
    GeoJSONPolygon,
    MemberCounts,
    MemberDetail,
    MemberOutline,
    PopulationData,
)


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def pick_name(tags: Optional[Dict[str, str]], name_tags: Iterable[str]) -> Optional[str]:
    """First non-empty tag value among name_tags"""
    if not isinstance(tags, dict):
        return None
    for key in name_tags:
        if tags.get(key):
            return tags[key]
    return None


class BoundaryAssembler:
    """
    Resolve an administrative boundary relation into a map overlay

    Uses:
    - OverpassAPIClient: relation members with geometry
    - connect_ways / connect_all_ways: outer ring and inner holes
    - PopulationResolver: population / official area (fetched concurrently
      with stitching)

    Usage:
        assembler = BoundaryAssembler()
        result = assembler.resolve_boundary(1903516)
        result.feature  # GeoJSON Feature or None
    """

    def __init__(
        self,
        overpass_client: Optional[OverpassAPIClient] = None,
        population_resolver: Optional[PopulationResolver] = None,
        config: Optional[PipelineConfig] = None,
        resolve_names: bool = True
    ):
        self.config = config or get_config()
        self.overpass_client = overpass_client or OverpassAPIClient(self.config)
        self.population_resolver = population_resolver or PopulationResolver()
        self.parser = OSMResponseParser()
        self.resolve_names = resolve_names
        self.timeout = self.config.api.overpass_timeout

    # ------------------------------------------------------------
    # Partitioning and ring building
    # ------------------------------------------------------------

    @staticmethod
    def partition_members(relation: OSMRelation) -> BoundaryMembers:
        """Split relation members into outer ways, inner ways, nodes and sub-areas"""
        def details(members) -> List[MemberDetail]:
            return [MemberDetail(**m.to_detail()) for m in members]

        outer_ways = relation.members_by("way", "outer")
        inner_ways = relation.members_by("way", "inner")
        nodes = relation.members_by("node")
        sub_areas = relation.members_by("relation")

        return BoundaryMembers(
            counts=MemberCounts(
                outer_ways=len(outer_ways),
                inner_ways=len(inner_ways),
                nodes=len(nodes),
                sub_areas=len(sub_areas),
                total=len(relation.members)
            ),
            outer_ways=details(outer_ways),
            inner_ways=details(inner_ways),
            nodes=details(nodes),
            sub_areas=details(sub_areas),
            details=details(relation.members)
        )

    def build_outer_ring(self, relation: OSMRelation) -> List[List[float]]:
        """Stitch outer member geometries into one closed ring (empty if none or degenerate)"""
        outer_geometry = [
            m.geometry for m in relation.members
            if m.role == "outer" and m.has_geometry
        ]
        if not outer_geometry:
            return []

        chain = connect_ways(outer_geometry, self.config.stitching.endpoint_tolerance_deg)
        ring = close_ring(chain)
        if len(ring) < self.config.stitching.min_ring_vertices:
            logger.warning(f"Outer ring of relation {relation.id} has only {len(ring)} vertices")
            return []
        return ring

    def build_inner_rings(self, relation: OSMRelation) -> List[List[List[float]]]:
        """Stitch inner member geometries into closed holes"""
        inner_geometry = [
            m.geometry for m in relation.members
            if m.role == "inner" and m.has_geometry
        ]
        return connect_all_ways(
            inner_geometry,
            self.config.stitching.endpoint_tolerance_deg,
            self.config.stitching.min_ring_vertices
        )

    # ------------------------------------------------------------
    # Boundary resolution
    # ------------------------------------------------------------

    def resolve_boundary(
        self,
        relation_id: int,
        name: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> BoundaryResult:
        """
        Resolve boundary geometry, members and stats for a relation

        Args:
            relation_id: OSM relation ID
            name: Display name (defaults to the relation's name tags)
            cancel_event: Set to abandon a superseded resolution. Statistics and
                name lookups already in flight keep running in their worker
                threads after a cancelled return; their results are discarded.

        Returns:
            BoundaryResult; feature is None unless status == "ok"
        """
        try:
            relation_id = int(relation_id)
        except (TypeError, ValueError):
            logger.warning(f"No OSM relation ID to fetch boundary: {relation_id!r}")
            return BoundaryResult(relation_id=0, status="error")
        if relation_id <= 0:
            logger.warning(f"No OSM relation ID to fetch boundary: {relation_id}")
            return BoundaryResult(relation_id=relation_id, status="error")

        if _cancelled(cancel_event):
            return BoundaryResult(relation_id=relation_id, status="cancelled")

        logger.info(f"Fetching boundary for relation {relation_id}")
        try:
            data = self.overpass_client.query(queries.relation_geom_query(relation_id, self.timeout))
        except Exception as e:
            logger.error(f"Error fetching boundary for relation {relation_id}: {e}")
            return BoundaryResult(relation_id=relation_id, status="error")

        if _cancelled(cancel_event):
            logger.info(f"Boundary resolution for relation {relation_id} cancelled")
            return BoundaryResult(relation_id=relation_id, status="cancelled")

        try:
            relation = self.parser.first_relation(data)
            if relation is not None:
                members = self.partition_members(relation)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed boundary data for relation {relation_id}: {e}")
            return BoundaryResult(relation_id=relation_id, status="error")

        if relation is None:
            logger.warning(f"Relation {relation_id} not found")
            return BoundaryResult(relation_id=relation_id, status="not-found")

        display_name = name or pick_name(relation.tags, self.config.name_tags)

        executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
        try:
            stats_future = executor.submit(self.population_resolver.fetch_population_data, relation.id)
            names_future = None
            if self.resolve_names and members.sub_areas:
                names_future = executor.submit(
                    self.fetch_member_names, [m.ref for m in members.sub_areas]
                )

            outer_ring = self.build_outer_ring(relation)
            inner_rings = self.build_inner_rings(relation) if outer_ring else []
            calculated_area = calculate_polygon_area(outer_ring)

            if _cancelled(cancel_event):
                logger.info(f"Boundary resolution for relation {relation_id} cancelled")
                return BoundaryResult(relation_id=relation_id, status="cancelled", members=members)

            population_data = stats_future.result()
            if names_future is not None:
                members.sub_area_names = names_future.result()
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if _cancelled(cancel_event):
            logger.info(f"Boundary resolution for relation {relation_id} cancelled")
            return BoundaryResult(relation_id=relation_id, status="cancelled", members=members)

        stats = self.build_stats(calculated_area, population_data)

        if not outer_ring:
            logger.warning(f"Relation {relation_id} has no outer ways with geometry")
            return BoundaryResult(
                relation_id=relation_id,
                status="no-geometry",
                name=display_name,
                members=members,
                stats=stats
            )

        feature = self.build_feature(relation_id, display_name, outer_ring, inner_rings, stats)
        logger.info(
            f"Boundary loaded for relation {relation_id}: {len(outer_ring)} vertices, "
            f"{len(inner_rings)} holes, {format_area(calculated_area)}"
        )

        return BoundaryResult(
            relation_id=relation_id,
            status="ok",
            name=display_name,
            feature=feature,
            members=members,
            stats=stats
        )

    @staticmethod
    def build_stats(calculated_area: float, population_data: PopulationData) -> BoundaryStats:
        """Attach external statistics; density is based on the computed area"""
        return BoundaryStats(
            calculated_area=calculated_area,
            population=population_data.population,
            official_area=population_data.official_area,
            density=calculate_density(population_data.population, calculated_area)
        )

    @staticmethod
    def build_feature(
        relation_id: int,
        name: Optional[str],
        outer_ring: List[List[float]],
        inner_rings: List[List[List[float]]],
        stats: BoundaryStats
    ) -> Feature:
        geometry = GeoJSONPolygon(coordinates=[outer_ring] + inner_rings)
        properties = {
            "relation_id": relation_id,
            "name": name,
            "area": format_area(stats.calculated_area),
            "population": stats.population if stats.population is not None else "No data",
            "density": format_density(stats.density),
            "bounds": geometry_bounds(geometry.model_dump()),
        }
        return Feature(properties=properties, geometry=geometry)

    # ------------------------------------------------------------
    # Member helpers
    # ------------------------------------------------------------

    def fetch_member_names(self, relation_ids: List[int]) -> Dict[int, str]:
        """
        Look up display names for several relations in one query

        Returns:
            Mapping of relation ID to name; {} on failure
        """
        if not relation_ids:
            return {}

        try:
            data = self.overpass_client.query(queries.relation_tags_query(relation_ids, self.timeout))
        except Exception as e:
            logger.error(f"Error fetching relation names: {e}")
            return {}

        names = {}
        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            elements = []
        for element in elements:
            if not isinstance(element, dict):
                continue
            name = pick_name(element.get("tags"), self.config.name_tags)
            if name and "id" in element:
                names[element["id"]] = name
        logger.debug(f"Resolved {len(names)}/{len(relation_ids)} sub-area names")
        return names

    def resolve_member(self, member_type: str, ref: int) -> Optional[MemberOutline]:
        """
        Fetch a single relation member for highlighting

        node -> its point, way -> its line, relation -> its stitched outer ring.

        Returns:
            MemberOutline or None when nothing usable was returned
        """
        if member_type not in ("node", "way", "relation"):
            logger.warning(f"Unsupported member type: {member_type}")
            return None

        try:
            data = self.overpass_client.query(queries.element_geom_query(member_type, ref, self.timeout))
        except Exception as e:
            logger.error(f"Error fetching member {member_type} {ref}: {e}")
            return None

        try:
            return self._build_member_outline(member_type, ref, data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed data for member {member_type} {ref}: {e}")
            return None

    def _build_member_outline(self, member_type: str, ref: int, data) -> Optional[MemberOutline]:
        nodes, ways, relations = self.parser.parse_elements(data)
        default_name = f"{member_type.capitalize()} {ref}"

        if member_type == "node":
            node = nodes.get(ref) or next(iter(nodes.values()), None)
            if node is None:
                return None
            coords = [[node.lon, node.lat]]
            tags = node.tags
        elif member_type == "way":
            way = next((w for w in ways if w.id == ref), ways[0] if ways else None)
            if way is None or not way.geometry:
                return None
            coords = way.geometry
            tags = way.tags
        else:
            relation = next((r for r in relations if r.id == ref), relations[0] if relations else None)
            if relation is None:
                return None
            coords = self.build_outer_ring(relation)
            if not coords:
                return None
            tags = relation.tags

        center_lon, center_lat = get_polygon_centroid(coords)
        return MemberOutline(
            type=member_type,
            ref=ref,
            name=pick_name(tags, ("name",)) or default_name,
            coordinates=coords,
            center=GeoJSONPoint(coordinates=[center_lon, center_lat])
        )
