"""Coordinate value types for the two spaces used by the subsystem.

- ``GeoPoint``: WGS 84 longitude/latitude, used by automated detection
  and for area/perimeter truth.
- ``PixelPoint``: image/canvas-relative coordinates, used for drawing and
  snapping.

The two types are deliberately unrelated so that a pixel coordinate can
never be passed where a geodesic one is expected.  Conversion happens in
exactly one place (``roof_outline.editor.frame.PixelFrame``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from roof_outline.models._validation import ModelValidationError, check_range, to_float


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS 84 coordinate in degrees."""

    lng: float
    lat: float

    def __post_init__(self) -> None:
        check_range("GeoPoint", "lng", self.lng, -180.0, 180.0)
        check_range("GeoPoint", "lat", self.lat, -90.0, 90.0)

    def as_lng_lat(self) -> list[float]:
        """GeoJSON position order: ``[lng, lat]``."""
        return [self.lng, self.lat]

    @classmethod
    def from_lng_lat(cls, position: Sequence[float]) -> GeoPoint:
        """Build from a GeoJSON ``[lng, lat]`` position.

        Raises:
            ModelValidationError: If the position does not have two values.
        """
        if len(position) < 2:
            raise ModelValidationError("GeoPoint", "position", position, "needs [lng, lat]")
        return cls(lng=float(position[0]), lat=float(position[1]))


@dataclass(frozen=True, slots=True)
class PixelPoint:
    """A point on the drawing surface, in pixels."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> PixelPoint:
        """Deserialise from ``{x, y}``.

        Raises:
            ModelValidationError: If a coordinate is missing or not numeric.
        """
        for key in ("x", "y"):
            if data.get(key) is None:
                raise ModelValidationError("PixelPoint", key, None, "is required")
        return cls(x=to_float("PixelPoint", "x", data["x"]), y=to_float("PixelPoint", "y", data["y"]))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Bounding box in degrees, always derived from a center plus a margin.

    Attributes:
        west: Minimum longitude.
        south: Minimum latitude.
        east: Maximum longitude.
        north: Maximum latitude.
    """

    west: float
    south: float
    east: float
    north: float

    def __post_init__(self) -> None:
        if self.west >= self.east:
            raise ModelValidationError("BoundingBox", "west", self.west, f"must be < east ({self.east})")
        if self.south >= self.north:
            raise ModelValidationError(
                "BoundingBox", "south", self.south, f"must be < north ({self.north})"
            )

    @classmethod
    def around(cls, center: GeoPoint, margin_deg: float) -> BoundingBox:
        """Square box of half-size *margin_deg* centred on *center*."""
        if margin_deg <= 0:
            raise ModelValidationError("BoundingBox", "margin_deg", margin_deg, "must be > 0")
        return cls(
            west=center.lng - margin_deg,
            south=center.lat - margin_deg,
            east=center.lng + margin_deg,
            north=center.lat + margin_deg,
        )

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(lng=(self.west + self.east) / 2, lat=(self.south + self.north) / 2)

    @property
    def width_deg(self) -> float:
        return self.east - self.west

    @property
    def height_deg(self) -> float:
        return self.north - self.south

    def contains(self, point: GeoPoint) -> bool:
        return self.west <= point.lng <= self.east and self.south <= point.lat <= self.north

    def to_dict(self) -> dict[str, float]:
        return {"west": self.west, "south": self.south, "east": self.east, "north": self.north}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> BoundingBox:
        """Deserialise from a ``{west, south, east, north}`` dict.

        Raises:
            ModelValidationError: If a key is missing or not numeric, or the
                box is inverted.
        """
        values = {}
        for key in ("west", "south", "east", "north"):
            if key not in data:
                raise ModelValidationError("BoundingBox", key, None, "is required")
            values[key] = to_float("BoundingBox", key, data[key])
        return cls(**values)
