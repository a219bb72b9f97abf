"""
Geometry utility functions

Common calculations for boundary rings: area, closure, density, centre
"""

import math
from typing import List, Optional, Tuple

from shapely.geometry import shape

EARTH_RADIUS_KM = 6371.0


def calculate_polygon_area(coords: List[List[float]]) -> float:
    """
    Calculate polygon area in km² using a spherical excess approximation

    Each edge (i, i+1 mod n) contributes (lon_j - lon_i) * (2 + sin(lat_i) + sin(lat_j))
    in radians; the area is |sum| * R² / 2. Good for wards and districts,
    not geodesically exact for continent-sized rings. The ring does not
    have to be closed.
    """
    if len(coords) < 3:
        return 0.0

    n = len(coords)
    total = 0.0
    for i in range(n):
        j = (i + 1) % n
        lon1, lat1 = math.radians(coords[i][0]), math.radians(coords[i][1])
        lon2, lat2 = math.radians(coords[j][0]), math.radians(coords[j][1])
        total += (lon2 - lon1) * (2 + math.sin(lat1) + math.sin(lat2))

    return abs(total * EARTH_RADIUS_KM * EARTH_RADIUS_KM / 2.0)


def points_match(a: List[float], b: List[float], tolerance: float) -> bool:
    """Both axis deltas strictly below tolerance (not a Euclidean test)"""
    return abs(a[0] - b[0]) < tolerance and abs(a[1] - b[1]) < tolerance


def is_closed(coords: List[List[float]]) -> bool:
    """First and last vertex are coordinate-identical"""
    return len(coords) > 1 and list(coords[0]) == list(coords[-1])


def close_ring(coords: List[List[float]]) -> List[List[float]]:
    """Ensure ring is closed (first point == last point), never duplicating the closing point"""
    if not coords:
        return coords

    if list(coords[0]) != list(coords[-1]):
        return coords + [list(coords[0])]

    return coords


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_density(population: Optional[int], area_km2: Optional[float]) -> Optional[int]:
    """People per km², rounded; None unless population is known and area > 0"""
    if population is None or area_km2 is None or area_km2 <= 0:
        return None
    return round_half_up(population / area_km2)


def format_area(area_km2: float) -> str:
    return f"{area_km2:.2f} km²"


def format_density(density: Optional[int]) -> str:
    if density is None:
        return "No data"
    return f"{density:,} people/km²"


def get_polygon_centroid(coords: List[List[float]]) -> Tuple[float, float]:
    """Vertex mean of a ring or line, ignoring a duplicate closing point"""
    if not coords:
        return (0.0, 0.0)

    coords_clean = coords[:-1] if len(coords) > 1 and is_closed(coords) else coords

    lon_sum = sum(c[0] for c in coords_clean)
    lat_sum = sum(c[1] for c in coords_clean)

    return (lon_sum / len(coords_clean), lat_sum / len(coords_clean))


def geometry_bounds(geometry: dict) -> Optional[List[float]]:
    """[min_lon, min_lat, max_lon, max_lat] of a GeoJSON geometry dict"""
    try:
        geom = shape(geometry)
    except (ValueError, TypeError, KeyError, AttributeError):
        return None
    if geom.is_empty:
        return None
    return [float(v) for v in geom.bounds]
