"""Geodesic math for roof-scale polygons.

Pure, deterministic functions over ``GeoPoint`` rings:

- ``distance_meters``: haversine great-circle distance.
- ``signed_ring_area_sq_ft`` / ``polygon_area_sq_ft``: shoelace area on
  raw degrees, scaled with a local flat-earth approximation.
- ``polygon_perimeter_ft``: sum of haversine edge lengths.
- ``centroid``: arithmetic mean of the distinct vertices.

Limits:
    The area approximation uses a single reference latitude
    (``metres_per_degree_lng = 111320 * cos(ref_lat)``) and is only valid
    for rings spanning at most tens of metres, i.e. a single roof.  Do not
    use it for parcel- or country-scale polygons.

Malformed input (fewer than three vertices) yields zero-valued results
rather than raising; callers validate ring shape beforehand.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from roof_outline.models.geometry import GeoPoint

EARTH_RADIUS_M = 6_371_000.0
METRES_PER_DEGREE_LAT = 111_320.0
SQ_FT_PER_SQ_M = 10.7639
FT_PER_M = 3.28084

# Distinct vertices needed for a non-degenerate polygon.
_MIN_VERTICES = 3


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in metres (haversine)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def open_ring(ring: Sequence[GeoPoint]) -> list[GeoPoint]:
    """Return the ring's vertices without the closing duplicate."""
    vertices = list(ring)
    if len(vertices) > 1 and vertices[0] == vertices[-1]:
        vertices.pop()
    return vertices


def close_ring(vertices: Sequence[GeoPoint]) -> tuple[GeoPoint, ...]:
    """Return *vertices* as a closed ring (first == last)."""
    points = tuple(vertices)
    if points and points[0] != points[-1]:
        points = (*points, points[0])
    return points


def signed_ring_area_sq_ft(ring: Sequence[GeoPoint], reference_latitude: float) -> float:
    """Shoelace area in square feet; positive for counter-clockwise winding.

    Args:
        ring: Closed or open ring of vertices.
        reference_latitude: Latitude (degrees) used for the longitude scale.

    Returns:
        Signed area in square feet, or ``0.0`` for fewer than three vertices.
    """
    vertices = open_ring(ring)
    if len(vertices) < _MIN_VERTICES:
        return 0.0

    twice_area = 0.0
    for i, current in enumerate(vertices):
        nxt = vertices[(i + 1) % len(vertices)]
        twice_area += current.lng * nxt.lat - nxt.lng * current.lat

    metres_per_degree_lng = METRES_PER_DEGREE_LAT * math.cos(math.radians(reference_latitude))
    area_m2 = (twice_area / 2) * METRES_PER_DEGREE_LAT * metres_per_degree_lng
    return area_m2 * SQ_FT_PER_SQ_M


def polygon_area_sq_ft(ring: Sequence[GeoPoint], reference_latitude: float) -> float:
    """Unsigned polygon area in square feet (see module limits)."""
    return abs(signed_ring_area_sq_ft(ring, reference_latitude))


def polygon_perimeter_ft(ring: Sequence[GeoPoint]) -> float:
    """Perimeter in feet as the sum of consecutive haversine distances.

    The ring is closed implicitly when its last vertex differs from the first.
    """
    vertices = open_ring(ring)
    if len(vertices) < _MIN_VERTICES:
        return 0.0

    closed = close_ring(vertices)
    metres = sum(distance_meters(a, b) for a, b in zip(closed, closed[1:], strict=False))
    return metres * FT_PER_M


def centroid(ring: Sequence[GeoPoint]) -> GeoPoint:
    """Arithmetic mean of the vertices, excluding the closing duplicate.

    Returns ``GeoPoint(0, 0)`` when the ring has fewer than three vertices.
    """
    vertices = open_ring(ring)
    if len(vertices) < _MIN_VERTICES:
        return GeoPoint(lng=0.0, lat=0.0)

    return GeoPoint(
        lng=sum(v.lng for v in vertices) / len(vertices),
        lat=sum(v.lat for v in vertices) / len(vertices),
    )
