"""Conversion between the editor's pixel space and WGS 84.

``PixelFrame`` is the only place where pixel and geodesic coordinates
meet.  It maps linearly over the image bounds (row 0 is the northern
edge), which is accurate for site-sized images.  It is used once when
seeding the editor from a detected polygon and once at export.

The alignment transform is never applied here: it moves the picture, not
the drawn coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roof_outline.models._validation import check_min
from roof_outline.models.drawing import Edge, EdgeType
from roof_outline.models.geometry import BoundingBox, GeoPoint, PixelPoint
from roof_outline.utils.geodesy import FT_PER_M, METRES_PER_DEGREE_LAT, close_ring, open_ring

if TYPE_CHECKING:
    from collections.abc import Sequence

    from roof_outline.models.roof import RoofPolygon


@dataclass(frozen=True, slots=True)
class PixelFrame:
    """An image of *width* x *height* pixels covering *bounds*."""

    bounds: BoundingBox
    width: int
    height: int

    def __post_init__(self) -> None:
        check_min("PixelFrame", "width", self.width, 1)
        check_min("PixelFrame", "height", self.height, 1)

    @property
    def ground_pixels_per_foot(self) -> float:
        """Horizontal image scale at the frame's centre latitude."""
        metres_per_deg_lng = METRES_PER_DEGREE_LAT * math.cos(math.radians(self.bounds.center.lat))
        width_ft = self.bounds.width_deg * metres_per_deg_lng * FT_PER_M
        return self.width / width_ft

    def to_pixel(self, point: GeoPoint) -> PixelPoint:
        return PixelPoint(
            x=(point.lng - self.bounds.west) / self.bounds.width_deg * self.width,
            y=(self.bounds.north - point.lat) / self.bounds.height_deg * self.height,
        )

    def to_geo(self, point: PixelPoint) -> GeoPoint:
        return GeoPoint(
            lng=self.bounds.west + point.x / self.width * self.bounds.width_deg,
            lat=self.bounds.north - point.y / self.height * self.bounds.height_deg,
        )

    def polygon_to_edges(
        self,
        polygon: RoofPolygon,
        *,
        pixels_per_foot: float | None = None,
        edge_type: EdgeType = EdgeType.UNLABELED,
    ) -> list[Edge]:
        """One edge per ring side, in ring order.

        *pixels_per_foot* defaults to the frame's ground scale so that
        seeded edge lengths match the polygon's real dimensions.
        """
        scale = pixels_per_foot or self.ground_pixels_per_foot
        vertices = [self.to_pixel(p) for p in open_ring(polygon.ring)]
        if len(vertices) < 2:
            return []
        return [
            Edge.between(
                vertices[i],
                vertices[(i + 1) % len(vertices)],
                pixels_per_foot=scale,
                edge_type=edge_type,
                edge_id=f"{polygon.id}-{i + 1}",
            )
            for i in range(len(vertices))
        ]

    def edges_to_ring(self, edges: Sequence[Edge]) -> tuple[GeoPoint, ...]:
        """Closed geodesic ring through the edges' start points, in order."""
        return close_ring([self.to_geo(edge.start) for edge in edges])
