"""
OpenStreetMap data collection module

- API client: Overpass API communication
- Models: Data structures (OSMNode, OSMWay, OSMMember, OSMRelation)
- Parser: Response parsing and member geometry resolution
- Queries: Overpass QL builders
"""

from .models import OSMNode, OSMWay, OSMMember, OSMRelation
from .api_client import OverpassAPIClient
from .parser import OSMResponseParser

__all__ = [
    "OSMNode",
    "OSMWay",
    "OSMMember",
    "OSMRelation",
    "OverpassAPIClient",
    "OSMResponseParser",
]
