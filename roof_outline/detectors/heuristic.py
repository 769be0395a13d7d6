"""Deterministic heuristic fallback for roof candidates.

Used when no AI detector produced a confident candidate.  It makes no
network call: a footprint family (rectangular, L-shaped, or an irregular
"complex" outline) and its proportions are derived from the bounding
box, centred on the site.

The generator is a pure function of the bounding box: a SHA-256 digest of
the rounded box seeds a private ``random.Random``, so the same site always
yields the same fallback polygon.

Fallback candidates carry confidences in the 0.72–0.78 band, below what a
genuine AI detection would report; callers must surface them to the
operator as lower-trust (``heuristic_fallback``).
"""

from __future__ import annotations

import hashlib
import logging
import math
import random
from typing import TYPE_CHECKING

from roof_outline.detectors.base import FallbackGenerator
from roof_outline.models.geometry import GeoPoint
from roof_outline.models.roof import RoofPolygon

if TYPE_CHECKING:
    from roof_outline.models.geometry import BoundingBox

logger = logging.getLogger("roof_outline.detectors.heuristic")

RECTANGULAR = "rectangular"
L_SHAPED = "l_shaped"
COMPLEX = "complex"

FAMILIES: tuple[str, ...] = (RECTANGULAR, L_SHAPED, COMPLEX)

FAMILY_CONFIDENCE: dict[str, float] = {
    RECTANGULAR: 0.75,
    L_SHAPED: 0.78,
    COMPLEX: 0.72,
}


def seed_for_bbox(bbox: BoundingBox) -> int:
    """Stable integer seed derived from the bounding box (7 decimal places)."""
    key = f"{bbox.west:.7f},{bbox.south:.7f},{bbox.east:.7f},{bbox.north:.7f}"
    return int.from_bytes(hashlib.sha256(key.encode("utf-8")).digest()[:8], "big")


class HeuristicFallback(FallbackGenerator):
    """Generate a single plausible footprint centred in the bounding box.

    Args:
        family: Force a footprint family instead of deriving it from the seed.
    """

    def __init__(self, family: str | None = None) -> None:
        if family is not None and family not in FAMILIES:
            msg = f"Unknown footprint family {family!r}; expected one of {FAMILIES}"
            raise ValueError(msg)
        self._family = family

    @property
    def name(self) -> str:
        return "heuristic"

    def generate(self, bbox: BoundingBox) -> list[RoofPolygon]:
        rng = random.Random(seed_for_bbox(bbox))
        family = self._family or rng.choice(FAMILIES)

        center = bbox.center
        if family == RECTANGULAR:
            offsets = _rectangular(rng)
        elif family == L_SHAPED:
            offsets = _l_shaped(rng)
        else:
            offsets = _complex(rng)

        vertices = [
            GeoPoint(
                lng=center.lng + dx * bbox.width_deg,
                lat=center.lat + dy * bbox.height_deg,
            )
            for dx, dy in offsets
        ]
        polygon = RoofPolygon.from_ring(
            "A",
            vertices,
            confidence=FAMILY_CONFIDENCE[family],
            reference_latitude=center.lat,
            source=self.name,
        )

        logger.info(
            "Heuristic footprint generated | family=%s | area=%.0f sq ft | confidence=%.2f",
            family,
            polygon.area_sq_ft,
            polygon.confidence,
        )
        return [polygon]


# ---------------------------------------------------------------------------
# Footprint families: offsets as fractions of the bbox width/height
# ---------------------------------------------------------------------------


def _rectangular(rng: random.Random) -> list[tuple[float, float]]:
    """Axis-aligned rectangle covering 30–70% of each bbox side."""
    half_w = (0.3 + rng.random() * 0.4) / 2
    half_h = (0.3 + rng.random() * 0.4) / 2
    return [(-half_w, -half_h), (half_w, -half_h), (half_w, half_h), (-half_w, half_h)]


def _l_shaped(rng: random.Random) -> list[tuple[float, float]]:
    """A main block with a narrower wing on one side."""
    scale = 0.85 + rng.random() * 0.3
    base_w = 0.25 * scale
    base_h = 0.15 * scale
    wing_h = 0.3 * scale
    return [
        (-base_w, -base_h),
        (base_w, -base_h),
        (base_w, base_h),
        (0.0, base_h),
        (0.0, wing_h),
        (-base_w, wing_h),
    ]


def _complex(rng: random.Random) -> list[tuple[float, float]]:
    """An irregular 6–8 vertex outline around the centre."""
    vertex_count = 6 + rng.randrange(3)
    offsets: list[tuple[float, float]] = []
    for i in range(vertex_count):
        angle = (i / vertex_count) * 2 * math.pi
        radius_x = 0.2 + rng.random() * 0.2
        radius_y = 0.2 + rng.random() * 0.2
        offsets.append((math.cos(angle) * radius_x, math.sin(angle) * radius_y))
    return offsets
