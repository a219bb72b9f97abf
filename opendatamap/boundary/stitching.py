"""
Way stitching

Joins unordered OSM way segments end to end into a continuous chain.
The algorithm is greedy: starting from the first segment, the first unused
segment whose start or end matches the chain tail is appended (reversed if
needed). A pass with no match ends the chain, so segments unreachable from
the seed are left out and the chain may stay open.
"""

from typing import List, Optional, Sequence
from loguru import logger

from .utils import points_match, close_ring
from ..config import get_config

Vertex = List[float]
Segment = Sequence[Vertex]


def _default_tolerance() -> float:
    return get_config().stitching.endpoint_tolerance_deg


def stitch_from(
    segments: Sequence[Segment],
    seed: int,
    used: List[bool],
    tolerance: float
) -> List[Vertex]:
    """
    Grow one chain from segments[seed], marking consumed segments in `used`

    Args:
        segments: All segments ([[lon, lat], ...] each)
        seed: Index of the segment to start from
        used: Consumed flags, one per segment (updated in place)
        tolerance: Per-axis endpoint tolerance in degrees

    Returns:
        The chain of vertices
    """
    chain = [list(v) for v in segments[seed]]
    used[seed] = True

    while not all(used):
        if not chain:
            break
        tail = chain[-1]
        found = False

        for i, segment in enumerate(segments):
            if used[i] or not segment:
                continue

            if points_match(tail, segment[0], tolerance):
                chain.extend(list(v) for v in segment[1:])
                used[i] = True
                found = True
                break
            elif points_match(tail, segment[-1], tolerance):
                chain.extend(list(v) for v in reversed(segment[:-1]))
                used[i] = True
                found = True
                break

        if not found:
            break

    return chain


def connect_ways(segments: Sequence[Segment], tolerance: Optional[float] = None) -> List[Vertex]:
    """
    Connect way segments into a single chain starting at the first segment

    Args:
        segments: Way geometries as [[lon, lat], ...]
        tolerance: Endpoint match tolerance in degrees (config default if None)

    Returns:
        Chain of [lon, lat] vertices; empty when there are no segments
    """
    if not segments:
        return []

    tolerance = _default_tolerance() if tolerance is None else tolerance
    used = [False] * len(segments)
    chain = stitch_from(segments, 0, used, tolerance)

    dropped = used.count(False)
    if dropped:
        logger.warning(f"Way stitching stopped with {dropped}/{len(segments)} segments unconnected")

    return chain


def connect_all_ways(
    segments: Sequence[Segment],
    tolerance: Optional[float] = None,
    min_vertices: Optional[int] = None
) -> List[List[Vertex]]:
    """
    Stitch every segment into closed rings

    Repeats the greedy chain from the first unused segment until all
    segments are consumed. Each chain is closed; rings shorter than
    min_vertices (after closing) are discarded.

    Returns:
        List of closed rings
    """
    if not segments:
        return []

    tolerance = _default_tolerance() if tolerance is None else tolerance
    if min_vertices is None:
        min_vertices = get_config().stitching.min_ring_vertices

    used = [False] * len(segments)
    rings = []
    for seed in range(len(segments)):
        if used[seed]:
            continue
        ring = close_ring(stitch_from(segments, seed, used, tolerance))
        if len(ring) >= min_vertices:
            rings.append(ring)
        else:
            logger.debug(f"Discarding degenerate ring with {len(ring)} vertices")

    return rings

