"""
Boundary reconstruction module

- Utils: spherical area, ring closure, density
- Stitching: greedy way stitching into rings
- Assembler: relation -> polygon + members + stats
- Outline: layered outline lookup with GeoJSON conversion
"""

from .utils import calculate_polygon_area, calculate_density, close_ring
from .stitching import connect_ways, connect_all_ways
from .assembler import BoundaryAssembler
from .outline import OutlineResolver, overpass_to_geojson

__all__ = [
    "calculate_polygon_area",
    "calculate_density",
    "close_ring",
    "connect_ways",
    "connect_all_ways",
    "BoundaryAssembler",
    "OutlineResolver",
    "overpass_to_geojson",
]
