"""Detector and fallback abstract base classes.

The segmentation orchestrator interacts exclusively with these
interfaces; it never knows which inference engine is behind a detector.

- ``Detector.infer(image)`` turns an aerial image into zero or more
  candidate polygons with per-polygon confidence.  It may raise
  ``DetectorError`` (or anything else: detectors are external, fallible
  services and the orchestrator treats every exception as a failed
  attempt).
- ``FallbackGenerator.generate(bbox)`` produces candidates without any
  network call.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from roof_outline.core.constants import FailureStep
from roof_outline.core.exceptions import PipelineError

if TYPE_CHECKING:
    from roof_outline.models.geometry import BoundingBox
    from roof_outline.models.imagery import AerialImage
    from roof_outline.models.roof import RoofPolygon


class Detector(abc.ABC):
    """An automated roof detector (usually a remote ML model)."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Identifier used in logs and attempt records."""

    @abc.abstractmethod
    def infer(self, image: AerialImage) -> list[RoofPolygon]:
        """Detect roof candidates in *image*.

        Returns:
            Candidates with confidence set; may be empty.

        Raises:
            DetectorError: On network, model, or response-format failures.
        """


class FallbackGenerator(abc.ABC):
    """A deterministic, offline candidate generator."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Identifier used in logs."""

    @abc.abstractmethod
    def generate(self, bbox: BoundingBox) -> list[RoofPolygon]:
        """Generate candidates for the site inside *bbox*."""


class DetectorError(PipelineError):
    """A detector call failed.

    Attributes:
        detector: Name of the detector that failed.
        status_code: HTTP status of the failed call, if any.
    """

    default_stage = FailureStep.INFERENCE.value
    default_code = "DETECTOR_FAILED"

    def __init__(
        self,
        detector: str,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        self.detector = detector
        self.status_code = status_code
        super().__init__(message, retryable=retryable)

    @property
    def model_absent(self) -> bool:
        """True for a 404 (model not deployed); handled like any other failure."""
        return self.status_code == 404

    def __str__(self) -> str:
        return f"[{self.detector}] {self.message}"
