"""Value types for hand-drawn roof edges and the imagery alignment.

- ``EdgeType``: closed classification of a roof edge's construction role.
- ``Edge``: an immutable, pixel-space line segment with derived length.
- ``AlignmentTransform``: offset/rotation applied to the base imagery
  layer only, never to drawn geometry.
- ``edge_totals``: per-type length totals of a set of edges.

Edges are value records: every edit returns a new ``Edge`` so that editor
history snapshots can share unchanged records safely.
"""

from __future__ import annotations

import enum
import math
import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, replace

from roof_outline.core.constants import DEFAULT_PIXELS_PER_FOOT
from roof_outline.models._validation import ModelValidationError, check_non_empty, to_float
from roof_outline.models.geometry import PixelPoint


class EdgeType(enum.Enum):
    """Roof-construction role of a drawn edge."""

    UNLABELED = "unlabeled"
    EAVE = "eave"
    RAKE = "rake"
    RIDGE = "ridge"
    HIP = "hip"
    VALLEY = "valley"
    STEP = "step"
    WALL = "wall"
    PITCH_CHANGE = "pitch_change"

    @classmethod
    def parse(cls, raw: object) -> EdgeType:
        """Parse a stored value, accepting ``pitch-change`` as an alias.

        Raises:
            ModelValidationError: If *raw* is not a known edge type.
        """
        if isinstance(raw, EdgeType):
            return raw
        if raw is None or raw == "":
            return cls.UNLABELED
        value = str(raw).strip().lower().replace("-", "_")
        try:
            return cls(value)
        except ValueError as exc:
            raise ModelValidationError("Edge", "edge_type", raw, "unknown edge type") from exc


def pixel_distance(a: PixelPoint, b: PixelPoint) -> float:
    """Euclidean distance in pixels."""
    return math.hypot(b.x - a.x, b.y - a.y)


def line_length_ft(
    a: PixelPoint,
    b: PixelPoint,
    pixels_per_foot: float | None = DEFAULT_PIXELS_PER_FOOT,
) -> float:
    """Real-world length of a pixel segment, rounded to 0.1 ft.

    A missing or non-positive scale falls back to ``DEFAULT_PIXELS_PER_FOOT``.
    """
    scale = pixels_per_foot if pixels_per_foot and pixels_per_foot > 0 else DEFAULT_PIXELS_PER_FOOT
    return round(pixel_distance(a, b) / scale, 1)


def new_edge_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True, slots=True)
class Edge:
    """A drawn roof edge in pixel space.

    Attributes:
        id: Stable identifier within a drawing.
        start: First endpoint.
        end: Second endpoint.
        length_ft: Derived length; never authoritative input.
        edge_type: Roof-construction role.
    """

    id: str
    start: PixelPoint
    end: PixelPoint
    length_ft: float
    edge_type: EdgeType = EdgeType.UNLABELED

    def __post_init__(self) -> None:
        check_non_empty("Edge", "id", self.id)

    @classmethod
    def between(
        cls,
        start: PixelPoint,
        end: PixelPoint,
        *,
        pixels_per_foot: float | None = DEFAULT_PIXELS_PER_FOOT,
        edge_type: EdgeType = EdgeType.UNLABELED,
        edge_id: str = "",
    ) -> Edge:
        """Create an edge, deriving its length from the endpoints."""
        return cls(
            id=edge_id or new_edge_id(),
            start=start,
            end=end,
            length_ft=line_length_ft(start, end, pixels_per_foot),
            edge_type=edge_type,
        )

    @property
    def pixel_length(self) -> float:
        return pixel_distance(self.start, self.end)

    @property
    def angle_deg(self) -> float:
        """Direction from start to end in degrees, ``[0, 360)``, y-down."""
        return math.degrees(math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)) % 360

    def with_endpoint(
        self,
        which: str,
        point: PixelPoint,
        *,
        pixels_per_foot: float | None = DEFAULT_PIXELS_PER_FOOT,
    ) -> Edge:
        """Return a copy with one endpoint replaced and the length recomputed.

        Raises:
            ModelValidationError: If *which* is not ``"start"`` or ``"end"``.
        """
        if which == "start":
            start, end = point, self.end
        elif which == "end":
            start, end = self.start, point
        else:
            raise ModelValidationError("Edge", "endpoint", which, "must be 'start' or 'end'")
        return replace(self, start=start, end=end, length_ft=line_length_ft(start, end, pixels_per_foot))

    def with_edge_type(self, edge_type: EdgeType) -> Edge:
        return replace(self, edge_type=edge_type)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "length_ft": self.length_ft,
            "edge_type": self.edge_type.value,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, object],
        *,
        pixels_per_foot: float | None = DEFAULT_PIXELS_PER_FOOT,
    ) -> Edge:
        """Deserialise an edge; the stored length is ignored and recomputed.

        Raises:
            ModelValidationError: If the endpoints are missing.
        """
        start_raw = data.get("start")
        end_raw = data.get("end")
        if not isinstance(start_raw, dict) or not isinstance(end_raw, dict):
            raise ModelValidationError("Edge", "start/end", data, "both endpoints are required")
        return cls.between(
            PixelPoint.from_dict(start_raw),
            PixelPoint.from_dict(end_raw),
            pixels_per_foot=pixels_per_foot,
            edge_type=EdgeType.parse(data.get("edge_type")),
            edge_id=str(data.get("id", "")),
        )


@dataclass(frozen=True, slots=True)
class AlignmentTransform:
    """Offset and rotation of the base imagery layer.

    Applied to the picture under the drawing surface only; drawn pixel
    coordinates are never transformed.
    """

    offset_x: float = 0.0
    offset_y: float = 0.0
    rotation_degrees: float = 0.0

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY_TRANSFORM

    def moved(self, dx: float, dy: float) -> AlignmentTransform:
        return replace(self, offset_x=self.offset_x + dx, offset_y=self.offset_y + dy)

    def rotated(self, d_deg: float) -> AlignmentTransform:
        return replace(self, rotation_degrees=self.rotation_degrees + d_deg)

    def to_dict(self) -> dict[str, float]:
        return {
            "offset_x": self.offset_x,
            "offset_y": self.offset_y,
            "rotation_degrees": self.rotation_degrees,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> AlignmentTransform:
        if not data:
            return cls()
        return cls(
            offset_x=to_float("AlignmentTransform", "offset_x", data.get("offset_x", 0.0)),
            offset_y=to_float("AlignmentTransform", "offset_y", data.get("offset_y", 0.0)),
            rotation_degrees=to_float(
                "AlignmentTransform", "rotation_degrees", data.get("rotation_degrees", 0.0)
            ),
        )


IDENTITY_TRANSFORM = AlignmentTransform()


def edge_totals(edges: Iterable[Edge]) -> dict[str, float]:
    """Total length per edge type, rounded to 0.1 ft."""
    totals: dict[str, float] = defaultdict(float)
    for edge in edges:
        totals[edge.edge_type.value] += edge.length_ft
    return {edge_type: round(total, 1) for edge_type, total in totals.items()}
