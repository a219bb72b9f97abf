"""
Pydantic models for boundary engine output

GeoJSON geometry / feature types plus the stats and member records
handed to the map UI.
"""

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Literal, Union
from pydantic import BaseModel, Field


# ============================================================
# GeoJSON Types
# ============================================================

class GeoJSONPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float]  # [longitude, latitude]


class GeoJSONLineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]]  # [[lon, lat], ...]


class GeoJSONMultiLineString(BaseModel):
    type: Literal["MultiLineString"] = "MultiLineString"
    coordinates: List[List[List[float]]]


class GeoJSONPolygon(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]]  # [outer, hole, hole, ...]


class GeoJSONMultiPolygon(BaseModel):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: List[List[List[List[float]]]]


Geometry = Union[
    GeoJSONPoint,
    GeoJSONLineString,
    GeoJSONMultiLineString,
    GeoJSONPolygon,
    GeoJSONMultiPolygon,
]


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    properties: Dict[str, Any] = Field(default_factory=dict)
    geometry: Geometry = Field(discriminator="type")


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = Field(default_factory=list)


# ============================================================
# Statistics
# ============================================================

class PopulationData(BaseModel):
    """External statistics for a relation (Wikidata)"""
    population: Optional[int] = None
    official_area: Optional[float] = None  # km²


class BoundaryStats(BaseModel):
    """Derived statistics; density always uses calculated_area"""
    calculated_area: float = 0.0  # km², unrounded
    population: Optional[int] = None
    official_area: Optional[float] = None
    density: Optional[int] = None  # people / km²


# ============================================================
# Relation Members
# ============================================================

class MemberDetail(BaseModel):
    type: str
    ref: int
    role: str = ""
    tags: Optional[Dict[str, str]] = None


class MemberCounts(BaseModel):
    outer_ways: int = 0
    inner_ways: int = 0
    nodes: int = 0
    sub_areas: int = 0
    total: int = 0


class BoundaryMembers(BaseModel):
    counts: MemberCounts = Field(default_factory=MemberCounts)
    outer_ways: List[MemberDetail] = Field(default_factory=list)
    inner_ways: List[MemberDetail] = Field(default_factory=list)
    nodes: List[MemberDetail] = Field(default_factory=list)
    sub_areas: List[MemberDetail] = Field(default_factory=list)
    details: List[MemberDetail] = Field(default_factory=list)  # every member, in source order
    sub_area_names: Dict[int, str] = Field(default_factory=dict)


class MemberOutline(BaseModel):
    """A single relation member resolved for highlighting"""
    type: Literal["node", "way", "relation"]
    ref: int
    name: str
    coordinates: List[List[float]]  # [[lon, lat], ...]; one point for nodes
    center: GeoJSONPoint


# ============================================================
# Results
# ============================================================

BoundaryStatus = Literal["ok", "no-geometry", "not-found", "error", "cancelled"]


class BoundaryResult(BaseModel):
    """Result of resolving one boundary relation"""
    relation_id: int
    status: BoundaryStatus = "ok"
    name: Optional[str] = None
    feature: Optional[Feature] = None
    members: BoundaryMembers = Field(default_factory=BoundaryMembers)
    stats: BoundaryStats = Field(default_factory=BoundaryStats)
    resolved_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def geometry(self) -> Optional[GeoJSONPolygon]:
        return self.feature.geometry if self.feature else None


class OutlineResult(BaseModel):
    """Result of the outline fallback chain"""
    geojson: Optional[FeatureCollection] = None
    source: str
    kind: Optional[str] = None  # relation-polygon, relation-lines, way-lines
    relation_id: Optional[int] = None
