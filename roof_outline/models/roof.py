"""Data model for a roof structure candidate.

A ``RoofPolygon`` is one detected (or heuristically generated) roof
outline: a closed ring of WGS 84 vertices with its derived area,
perimeter, and the confidence of whatever produced it.

Area and perimeter are computed once, at construction via ``from_ring``,
so that validation and persistence always agree on the numbers.
"""

from __future__ import annotations

from dataclasses import dataclass

from roof_outline.core.constants import CONFIDENCE_THRESHOLD
from roof_outline.models._validation import check_non_empty, check_range
from roof_outline.models.geometry import GeoPoint
from roof_outline.utils.geodesy import (
    centroid,
    close_ring,
    polygon_area_sq_ft,
    polygon_perimeter_ft,
)


@dataclass(frozen=True, slots=True)
class RoofPolygon:
    """A roof structure candidate.

    Attributes:
        id: Structure identifier, visible to operators (e.g. ``"A"``).
        ring: Closed exterior ring (first == last) of WGS 84 points.
        area_sq_ft: Planar area in square feet.
        perimeter_ft: Perimeter in feet.
        confidence: Detector confidence in ``[0, 1]``.
        source: Name of the detector or fallback that produced it.
    """

    id: str
    ring: tuple[GeoPoint, ...]
    area_sq_ft: float
    perimeter_ft: float
    confidence: float
    source: str = ""

    def __post_init__(self) -> None:
        check_non_empty("RoofPolygon", "id", self.id)
        check_range("RoofPolygon", "confidence", self.confidence, 0.0, 1.0)

    @classmethod
    def from_ring(
        cls,
        polygon_id: str,
        vertices: list[GeoPoint] | tuple[GeoPoint, ...],
        *,
        confidence: float,
        reference_latitude: float | None = None,
        source: str = "",
    ) -> RoofPolygon:
        """Build a polygon, closing the ring and deriving area and perimeter.

        Args:
            polygon_id: Structure identifier.
            vertices: Ring vertices, closed or open.
            confidence: Detector confidence in ``[0, 1]``.
            reference_latitude: Latitude for the area scale; defaults to
                the ring centroid latitude.
            source: Producer name, for diagnostics.
        """
        ring = close_ring(vertices)
        ref_lat = reference_latitude if reference_latitude is not None else centroid(ring).lat
        return cls(
            id=polygon_id,
            ring=ring,
            area_sq_ft=polygon_area_sq_ft(ring, ref_lat),
            perimeter_ft=polygon_perimeter_ft(ring),
            confidence=confidence,
            source=source,
        )

    @property
    def included(self) -> bool:
        """Whether the structure counts toward the site total."""
        return self.confidence >= CONFIDENCE_THRESHOLD

    @property
    def coordinates(self) -> list[list[list[float]]]:
        """GeoJSON Polygon ``coordinates`` (a single exterior ring)."""
        return [[point.as_lng_lat() for point in self.ring]]

    def to_feature(self) -> dict[str, object]:
        """Serialise as a GeoJSON Feature for the response payload."""
        return {
            "id": self.id,
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": self.coordinates},
            "properties": {
                "area_sq_ft": self.area_sq_ft,
                "perimeter_ft": self.perimeter_ft,
                "confidence": self.confidence,
                "included": self.included,
            },
        }
