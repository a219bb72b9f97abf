"""
OSM data models

Data classes for representing OSM nodes, ways and relations
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, field


@dataclass
class OSMNode:
    """Represents an OSM node (point)"""
    id: int
    lat: float
    lon: float
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class OSMWay:
    """Represents an OSM way (line or ring)"""
    id: int
    tags: Dict[str, str] = field(default_factory=dict)
    geometry: Optional[List[List[float]]] = None  # [[lon, lat], ...] from 'out geom'


@dataclass
class OSMMember:
    """A member entry of a relation"""
    type: str  # "way", "node" or "relation"
    ref: int
    role: str = ""
    geometry: Optional[List[List[float]]] = None  # [[lon, lat], ...]
    lat: Optional[float] = None
    lon: Optional[float] = None
    tags: Optional[Dict[str, str]] = None

    @property
    def has_geometry(self) -> bool:
        return bool(self.geometry)

    def to_detail(self) -> Dict[str, object]:
        return {"type": self.type, "ref": self.ref, "role": self.role, "tags": self.tags}


@dataclass
class OSMRelation:
    """Represents an OSM relation and its members"""
    id: int
    members: List[OSMMember] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)

    def members_by(self, member_type: str, role: Optional[str] = None) -> List[OSMMember]:
        """Members of one type, optionally restricted to a role"""
        return [
            m for m in self.members
            if m.type == member_type and (role is None or m.role == role)
        ]
