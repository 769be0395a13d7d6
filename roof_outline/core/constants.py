"""Shared pipeline constants — single source of truth.

Thresholds, precision margins, outcome names, and failure steps used by
the detectors, the validator, the coordinator and the editor.
"""

from __future__ import annotations

import enum

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

DEFAULT_OUTPUT_CONTAINER: str = "roof-outline"
"""Default blob container for ROI images, structure sets and drawings."""

# ---------------------------------------------------------------------------
# Detection thresholds
# ---------------------------------------------------------------------------

CONFIDENCE_THRESHOLD: float = 0.7
"""Minimum confidence for a candidate to survive and be ``included``."""

MIN_ROOF_AREA_SQ_FT: float = 120.0
"""Smaller candidates are slivers (antenna shadows, noise)."""

MAX_ROOF_AREA_SQ_FT: float = 50_000.0
"""Larger candidates are parcel-scale false positives."""

MIN_RING_POINTS: int = 4
"""Closed triangle minimum: three distinct vertices plus the closing point."""

DRIFT_ACCEPT_M: float = 20.0
"""Centroid drift accepted unconditionally."""

DRIFT_REJECT_M: float = 100.0
"""Centroid drift above which a candidate is rejected."""


class Precision(enum.Enum):
    """Precision tier controlling the bounding-box half-size in degrees."""

    HIGH = "high"
    STANDARD = "standard"

    @property
    def margin_deg(self) -> float:
        """Half-size of the bounding box (≈33 m for high, ≈55 m for standard)."""
        return PRECISION_MARGIN_DEG[self]


PRECISION_MARGIN_DEG: dict[Precision, float] = {
    Precision.HIGH: 0.0003,
    Precision.STANDARD: 0.0005,
}


class OutlineMethod(enum.Enum):
    """Overall outcome of the segmentation stage."""

    AI_SEGMENTATION = "ai_segmentation"
    HEURISTIC_FALLBACK = "heuristic_fallback"
    MANUAL_NEEDED = "manual_needed"


class FailureStep(enum.Enum):
    """Pipeline step reported in a failure payload."""

    CONFIG = "config"
    INPUT_VALIDATION = "input-validation"
    FETCH_IMAGE = "fetch-image"
    INFERENCE = "inference"
    POLYGON_VALIDATION = "polygon-validation"
    DRIFT_CHECK = "drift-check"
    PERSISTENCE = "persistence"


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

DEFAULT_PIXELS_PER_FOOT: float = 10.0
"""Scale used when the imagery carries no calibrated pixels-per-foot."""

SNAP_MIN_DRAG_PX: float = 5.0
"""Drags shorter than this on both axes have no meaningful direction."""

SNAP_TOLERANCE_DEG: float = 15.0

ENDPOINT_HIT_RADIUS_PX: float = 6.0
"""Pointer distance within which a press grabs an existing endpoint."""

ALIGN_MOVE_STEP_PX: float = 10.0
ALIGN_ROTATE_STEP_DEG: float = 1.0
ALIGN_REPEAT_INTERVAL_S: float = 0.1
"""Cadence of a press-and-hold alignment control."""
