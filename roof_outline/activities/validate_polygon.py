"""Polygon validation activity — shape, plausibility, and drift checks.

``validate_polygon`` accepts or rejects a candidate against shape and
area rules, short-circuiting on the first failure:

1. The ring must contain at least 4 points (closed triangle minimum).
2. ``area_sq_ft`` must lie in ``[120, 50000]``: smaller candidates are
   slivers (antenna shadows, noise), larger ones are parcel-scale false
   positives.

``check_drift`` is run separately by the coordinator: background objects
(neighbouring roofs, parking structures) can pass the area rules yet be
geographically wrong, so the candidate centroid must sit near the
expected site coordinate.

Rejections are never raised; they are returned so that the caller can
drop the candidate and continue with the rest.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from roof_outline.core.constants import (
    DRIFT_ACCEPT_M,
    DRIFT_REJECT_M,
    MAX_ROOF_AREA_SQ_FT,
    MIN_RING_POINTS,
    MIN_ROOF_AREA_SQ_FT,
)
from roof_outline.models.geometry import GeoPoint
from roof_outline.models.roof import RoofPolygon
from roof_outline.utils.geodesy import centroid, distance_meters

logger = logging.getLogger("roof_outline.activities.validate_polygon")


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of ``validate_polygon``; ``reason`` is set only on rejection."""

    valid: bool
    reason: str = ""


class DriftVerdict(enum.Enum):
    ACCEPT = "accept"
    WARN = "warn"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class DriftCheck:
    """Outcome of ``check_drift``.

    Attributes:
        drift_m: Great-circle distance from the candidate centroid to the
            expected site coordinate, in metres.
        verdict: ``accept`` (<= 20 m), ``warn`` (<= 100 m) or ``reject``.
    """

    drift_m: float
    verdict: DriftVerdict

    @property
    def accepted(self) -> bool:
        return self.verdict is not DriftVerdict.REJECT


def validate_polygon(
    polygon: RoofPolygon,
    *,
    min_area_sq_ft: float = MIN_ROOF_AREA_SQ_FT,
    max_area_sq_ft: float = MAX_ROOF_AREA_SQ_FT,
) -> ValidationResult:
    """Check ring shape and area plausibility.

    Args:
        polygon: Candidate to check.
        min_area_sq_ft: Smallest plausible roof area.
        max_area_sq_ft: Largest plausible roof area.

    Returns:
        ``ValidationResult(valid=True)`` or a rejection with a reason.
    """
    if len(polygon.ring) < MIN_RING_POINTS:
        return ValidationResult(
            valid=False,
            reason=(
                f"Ring has {len(polygon.ring)} points; need at least {MIN_RING_POINTS} "
                "(3 vertices plus closing point)"
            ),
        )

    if polygon.area_sq_ft < min_area_sq_ft:
        return ValidationResult(
            valid=False,
            reason=f"Area too small: {polygon.area_sq_ft:.1f} sq ft (minimum {min_area_sq_ft:.0f})",
        )

    if polygon.area_sq_ft > max_area_sq_ft:
        return ValidationResult(
            valid=False,
            reason=f"Area too large: {polygon.area_sq_ft:.1f} sq ft (maximum {max_area_sq_ft:,.0f})",
        )

    return ValidationResult(valid=True)


def check_drift(
    polygon: RoofPolygon,
    expected: GeoPoint,
    *,
    accept_m: float = DRIFT_ACCEPT_M,
    reject_m: float = DRIFT_REJECT_M,
) -> DriftCheck:
    """Measure how far the candidate centroid lies from the expected site.

    Drift beyond *accept_m* but within *reject_m* is accepted with a
    logged warning.
    """
    drift = distance_meters(expected, centroid(polygon.ring))

    if drift <= accept_m:
        return DriftCheck(drift_m=drift, verdict=DriftVerdict.ACCEPT)

    if drift <= reject_m:
        logger.warning(
            "Centroid drift above accept threshold | polygon=%s | drift=%.1f m | threshold=%.0f m",
            polygon.id,
            drift,
            accept_m,
        )
        return DriftCheck(drift_m=drift, verdict=DriftVerdict.WARN)

    return DriftCheck(drift_m=drift, verdict=DriftVerdict.REJECT)
