"""Roof detectors used by the segmentation orchestrator.

- ``Detector``: abstract automated detector (remote ML model).
- ``FallbackGenerator``: abstract offline candidate generator.
- ``HuggingFaceDetector``: hosted image-segmentation model.
- ``HeuristicFallback``: deterministic footprint generator.

``build_detectors`` turns ``OutlineConfig.hf_models`` into the ordered
detector chain.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from roof_outline.detectors.base import Detector, DetectorError, FallbackGenerator
from roof_outline.detectors.heuristic import HeuristicFallback
from roof_outline.detectors.huggingface import HuggingFaceDetector

if TYPE_CHECKING:
    from roof_outline.core.config import OutlineConfig

logger = logging.getLogger("roof_outline.detectors")


def build_detectors(config: OutlineConfig) -> list[Detector]:
    """Build the configured detector chain, in configured order."""
    detectors: list[Detector] = [
        HuggingFaceDetector(model, config.huggingface_token, timeout_s=config.http_timeout_s)
        for model in config.hf_models
    ]
    logger.debug("Detector chain built | models=%s", ",".join(config.hf_models) or "-")
    return detectors


__all__ = [
    "Detector",
    "DetectorError",
    "FallbackGenerator",
    "HeuristicFallback",
    "HuggingFaceDetector",
    "build_detectors",
]
