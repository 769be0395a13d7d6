"""Segmentation orchestrator — try detectors in order, then fall back.

Produces one of three outcomes for an aerial image:

1. ``ai_segmentation`` — the first detector (in configured order) that
   returns at least one candidate with confidence >= threshold wins;
   sub-threshold candidates are discarded.
2. ``heuristic_fallback`` — no detector produced a confident candidate,
   so the offline fallback generator derives candidates from the
   bounding box.
3. ``manual_needed`` — nothing usable; the operator draws the roof.

Detectors are external, fallible services.  Every exception they raise
(``DetectorError`` for HTTP failures including a 404 model-absent
response, or anything unexpected) is caught, logged and recorded as a
failed attempt; the next detector is tried.  ``run`` itself never raises.

Detectors run sequentially: a later detector is only worth calling when
an earlier one failed.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from roof_outline.core.constants import CONFIDENCE_THRESHOLD, OutlineMethod

if TYPE_CHECKING:
    from collections.abc import Sequence

    from roof_outline.detectors.base import Detector, FallbackGenerator
    from roof_outline.models.geometry import BoundingBox
    from roof_outline.models.imagery import AerialImage
    from roof_outline.models.roof import RoofPolygon

logger = logging.getLogger("roof_outline.orchestrators.segmentation")


class AttemptOutcome(enum.Enum):
    ACCEPTED = "accepted"
    LOW_CONFIDENCE = "low_confidence"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DetectorAttempt:
    """Diagnostic record of one detector call.

    Attributes:
        detector: Detector name (model id).
        outcome: What happened.
        candidates: Number of candidates the detector returned.
        error: Error text when ``outcome`` is ``failed``.
    """

    detector: str
    outcome: AttemptOutcome
    candidates: int = 0
    error: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "detector": self.detector,
            "outcome": self.outcome.value,
            "candidates": self.candidates,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class SegmentationResult:
    """Outcome of a segmentation run."""

    method: OutlineMethod
    polygons: tuple[RoofPolygon, ...] = ()
    attempts: tuple[DetectorAttempt, ...] = field(default_factory=tuple)

    @property
    def needs_manual(self) -> bool:
        return self.method is OutlineMethod.MANUAL_NEEDED


class SegmentationOrchestrator:
    """Run the detector chain and the fallback for one image.

    Args:
        detectors: Detectors in priority order.
        fallback: Offline generator used when no detector succeeds;
            ``None`` disables the fallback.
        confidence_threshold: Minimum confidence of a kept AI candidate.
    """

    def __init__(
        self,
        detectors: Sequence[Detector],
        fallback: FallbackGenerator | None,
        *,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
    ) -> None:
        self._detectors = list(detectors)
        self._fallback = fallback
        self._threshold = confidence_threshold

    def run(self, image: AerialImage, bbox: BoundingBox) -> SegmentationResult:
        """Detect roof candidates in *image*; never raises."""
        attempts: list[DetectorAttempt] = []

        for detector in self._detectors:
            name = detector.name
            try:
                candidates = detector.infer(image)
            except Exception as exc:
                logger.warning("Detector failed | detector=%s | error=%s", name, exc)
                attempts.append(DetectorAttempt(name, AttemptOutcome.FAILED, error=str(exc)))
                continue

            if not candidates:
                logger.info("Detector returned no candidates | detector=%s", name)
                attempts.append(DetectorAttempt(name, AttemptOutcome.EMPTY))
                continue

            confident = [c for c in candidates if c.confidence >= self._threshold]
            if not confident:
                logger.info(
                    "Detector candidates below threshold | detector=%s | candidates=%d | threshold=%.2f",
                    name,
                    len(candidates),
                    self._threshold,
                )
                attempts.append(
                    DetectorAttempt(name, AttemptOutcome.LOW_CONFIDENCE, candidates=len(candidates))
                )
                continue

            attempts.append(DetectorAttempt(name, AttemptOutcome.ACCEPTED, candidates=len(candidates)))
            logger.info(
                "AI segmentation accepted | detector=%s | kept=%d | discarded=%d",
                name,
                len(confident),
                len(candidates) - len(confident),
            )
            return SegmentationResult(
                method=OutlineMethod.AI_SEGMENTATION,
                polygons=tuple(confident),
                attempts=tuple(attempts),
            )

        fallback = self.run_fallback(bbox)
        return SegmentationResult(
            method=fallback.method,
            polygons=fallback.polygons,
            attempts=tuple(attempts),
        )

    def run_fallback(self, bbox: BoundingBox) -> SegmentationResult:
        """Run only the offline fallback; ``manual_needed`` if it yields nothing."""
        if self._fallback is None:
            logger.info("No fallback configured | method=%s", OutlineMethod.MANUAL_NEEDED.value)
            return SegmentationResult(method=OutlineMethod.MANUAL_NEEDED)

        try:
            polygons = self._fallback.generate(bbox)
        except Exception as exc:
            logger.warning("Fallback failed | fallback=%s | error=%s", self._fallback.name, exc)
            return SegmentationResult(method=OutlineMethod.MANUAL_NEEDED)

        if not polygons:
            return SegmentationResult(method=OutlineMethod.MANUAL_NEEDED)

        logger.info(
            "Heuristic fallback used | fallback=%s | candidates=%d",
            self._fallback.name,
            len(polygons),
        )
        return SegmentationResult(method=OutlineMethod.HEURISTIC_FALLBACK, polygons=tuple(polygons))
