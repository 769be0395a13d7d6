"""Angle snapping for hand-drawn roof edges.

``snap_endpoint`` turns a freehand two-click drag into a clean segment:

1. Snapping disabled, or a drag shorter than 5 px on both axes (direction
   still ambiguous) → the raw point is returned unchanged.
2. Candidate angles are the cardinal directions 0/90/180/270 plus, when a
   prior line exists, the two directions perpendicular to it.  Lines that
   follow each other around a rectilinear roof can therefore stay square
   without being axis-aligned.
3. The drag angle (``[0, 360)``, y-down screen coordinates) is compared to
   every candidate by wrap-around distance; the first closest wins ties.
4. Within 15° of the closest candidate → snap.
5. Otherwise a cardinal-only check compares the drag against pure
   horizontal, then pure vertical, before giving up and returning the raw
   point.
6. A snapped endpoint keeps the drag's length along the chosen angle.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from roof_outline.core.constants import SNAP_MIN_DRAG_PX, SNAP_TOLERANCE_DEG
from roof_outline.models.geometry import PixelPoint

if TYPE_CHECKING:
    from collections.abc import Sequence

    from roof_outline.models.drawing import Edge

CARDINAL_ANGLES: tuple[float, ...] = (0.0, 90.0, 180.0, 270.0)


def normalise_angle(degrees: float) -> float:
    """Map any angle onto ``[0, 360)``."""
    return degrees % 360.0


def angular_distance(a: float, b: float) -> float:
    """Smallest distance between two angles, wrapping at 360°."""
    diff = abs(a - b)
    return min(diff, abs(diff - 360.0), abs(diff + 360.0))


def candidate_angles(prior_lines: Sequence[Edge]) -> list[float]:
    """Cardinal angles plus the perpendiculars of the last prior line."""
    angles = list(CARDINAL_ANGLES)
    if prior_lines:
        last = prior_lines[-1]
        direction = math.degrees(math.atan2(last.end.y - last.start.y, last.end.x - last.start.x))
        angles.append(normalise_angle(direction + 90.0))
        angles.append(normalise_angle(direction - 90.0))
    return angles


def snap_endpoint(
    start: PixelPoint,
    candidate_end: PixelPoint,
    prior_lines: Sequence[Edge] = (),
    snap_enabled: bool = True,
) -> PixelPoint:
    """Return the endpoint of a drag from *start*, snapped if within tolerance.

    Args:
        start: Fixed first endpoint.
        candidate_end: Raw pointer position.
        prior_lines: Committed lines; only the last one is consulted.
        snap_enabled: Operator toggle; ``False`` returns the raw point.
    """
    if not snap_enabled:
        return candidate_end

    dx = candidate_end.x - start.x
    dy = candidate_end.y - start.y
    abs_dx = abs(dx)
    abs_dy = abs(dy)
    if abs_dx < SNAP_MIN_DRAG_PX and abs_dy < SNAP_MIN_DRAG_PX:
        return candidate_end

    angle = normalise_angle(math.degrees(math.atan2(dy, dx)))

    closest = None
    min_diff = math.inf
    for candidate in candidate_angles(prior_lines):
        diff = angular_distance(angle, candidate)
        if diff < min_diff:
            min_diff = diff
            closest = candidate

    if min_diff > SNAP_TOLERANCE_DEG:
        horizontal_diff = min(abs(angle), abs(angle - 180.0))
        vertical_diff = min(abs(angle - 90.0), abs(angle - 270.0))
        if horizontal_diff < SNAP_TOLERANCE_DEG:
            if abs_dx > abs_dy:
                closest = 0.0 if dx > 0 else 180.0
        elif vertical_diff < SNAP_TOLERANCE_DEG:
            if abs_dy > abs_dx:
                closest = 90.0 if dy > 0 else 270.0
        else:
            return candidate_end

    length = math.hypot(dx, dy)
    radians = math.radians(closest)
    return PixelPoint(x=start.x + length * math.cos(radians), y=start.y + length * math.sin(radians))
