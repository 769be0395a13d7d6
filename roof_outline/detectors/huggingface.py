"""Hugging Face Inference API detector.

Sends the aerial image to a hosted image-segmentation model and turns
every roof-like segment into a candidate polygon:

1. ``POST https://api-inference.huggingface.co/models/{model}`` with the
   raw image bytes; the response is a JSON list of
   ``{"label", "score", "mask"}`` entries, ``mask`` being a base64 PNG.
2. Segments whose label mentions a roof, building or house are kept.
3. Each mask is decoded with ``rasterio`` (``MemoryFile``) and vectorised
   with ``rasterio.features.shapes`` using an affine transform built from
   the image bounds, so polygons come out directly in WGS 84.
4. The largest shape of each mask is simplified and oriented with
   ``shapely`` and becomes a ``RoofPolygon`` whose confidence is the
   segment score.

Any failure (network, HTTP status, payload format) raises
``DetectorError``.  A 404 means the model is not deployed on the hosted
API; it is reported like any other failure.
"""

from __future__ import annotations

import base64
import binascii
import logging
import string
from typing import TYPE_CHECKING, Any

import httpx
import numpy as np
from rasterio import features
from rasterio.io import MemoryFile
from rasterio.transform import from_bounds
from shapely.geometry import Polygon, shape
from shapely.geometry.polygon import orient

from roof_outline.detectors.base import Detector, DetectorError
from roof_outline.models.geometry import GeoPoint
from roof_outline.models.roof import RoofPolygon

if TYPE_CHECKING:
    from roof_outline.models.geometry import BoundingBox
    from roof_outline.models.imagery import AerialImage

logger = logging.getLogger("roof_outline.detectors.huggingface")

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models"

ROOF_LABEL_KEYWORDS: tuple[str, ...] = ("roof", "building", "house")

# Simplification tolerance as a fraction of the bbox width (~1 px at 1024 px)
_SIMPLIFY_FRACTION = 0.001


class HuggingFaceDetector(Detector):
    """Roof detector backed by one hosted segmentation model.

    Args:
        model: Model id, e.g. ``facebook/detr-resnet-50-panoptic``.
        token: Hugging Face API token.
        timeout_s: HTTP timeout per call.
        base_url: Inference endpoint root (overridable for tests).
    """

    def __init__(
        self,
        model: str,
        token: str,
        *,
        timeout_s: float = 30.0,
        base_url: str = HF_INFERENCE_URL,
    ) -> None:
        self._model = model
        self._token = token
        self._timeout_s = timeout_s
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return self._model

    def infer(self, image: AerialImage) -> list[RoofPolygon]:
        segments = self._request(image)

        polygons: list[RoofPolygon] = []
        for segment in segments:
            label = str(segment.get("label", ""))
            if not is_roof_label(label):
                continue

            mask = _decode_mask(self._model, segment.get("mask"))
            rings = mask_to_rings(mask, image.bounds)
            if not rings:
                continue

            confidence = min(max(float(segment.get("score", 0.0)), 0.0), 1.0)
            for ring in rings:
                polygons.append(
                    RoofPolygon.from_ring(
                        candidate_id(len(polygons)),
                        ring,
                        confidence=confidence,
                        source=self._model,
                    )
                )

        logger.info(
            "Segmentation complete | model=%s | segments=%d | candidates=%d",
            self._model,
            len(segments),
            len(polygons),
        )
        return polygons

    def _request(self, image: AerialImage) -> list[dict[str, Any]]:
        url = f"{self._base_url}/{self._model}"
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": image.content_type,
        }

        try:
            with httpx.Client(timeout=self._timeout_s) as client:
                response = client.post(url, content=image.content, headers=headers)
        except httpx.HTTPError as exc:
            msg = f"Inference request failed: {exc}"
            raise DetectorError(self._model, msg, retryable=True) from exc

        if response.status_code != 200:
            msg = f"Inference returned HTTP {response.status_code}"
            raise DetectorError(
                self._model,
                msg,
                status_code=response.status_code,
                retryable=response.status_code in {429, 503},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DetectorError(self._model, "Inference response is not JSON") from exc

        if not isinstance(payload, list):
            msg = f"Unexpected inference payload type: {type(payload).__name__}"
            raise DetectorError(self._model, msg)
        return [segment for segment in payload if isinstance(segment, dict)]


def is_roof_label(label: str) -> bool:
    lowered = label.lower()
    return any(keyword in lowered for keyword in ROOF_LABEL_KEYWORDS)


def candidate_id(index: int) -> str:
    """Operator-facing id: ``A``..``Z``, then ``AA``, ``AB``..."""
    letters = string.ascii_uppercase
    if index < len(letters):
        return letters[index]
    return candidate_id(index // len(letters) - 1) + letters[index % len(letters)]


def mask_to_rings(mask: np.ndarray, bounds: BoundingBox) -> list[list[GeoPoint]]:
    """Vectorise a binary mask into WGS 84 rings, largest shape only.

    Row 0 of *mask* is the northern edge of *bounds*.

    Returns:
        Zero or one ring (open; ``RoofPolygon.from_ring`` closes it).
    """
    if mask.ndim != 2 or not mask.any():
        return []

    height, width = mask.shape
    transform = from_bounds(bounds.west, bounds.south, bounds.east, bounds.north, width, height)
    binary = (mask > 0).astype(np.uint8)

    candidates: list[Polygon] = [
        shape(geometry)
        for geometry, value in features.shapes(binary, mask=binary.astype(bool), transform=transform)
        if value == 1
    ]
    if not candidates:
        return []

    largest = max(candidates, key=lambda polygon: polygon.area)
    simplified = largest.simplify(bounds.width_deg * _SIMPLIFY_FRACTION, preserve_topology=True)
    if simplified.is_empty or not isinstance(simplified, Polygon):
        return []

    exterior = orient(simplified, sign=1.0).exterior
    ring = [GeoPoint(lng=x, lat=y) for x, y in exterior.coords]
    return [ring[:-1]]


def _decode_mask(model: str, encoded: object) -> np.ndarray:
    """Decode a base64 PNG mask into a 2-D array (first band)."""
    if not isinstance(encoded, str) or not encoded:
        raise DetectorError(model, "Segment has no mask")

    try:
        raw = base64.b64decode(encoded)
    except (binascii.Error, ValueError) as exc:
        raise DetectorError(model, "Segment mask is not valid base64") from exc

    try:
        with MemoryFile(raw) as memfile, memfile.open() as dataset:
            return dataset.read(1)
    except Exception as exc:
        raise DetectorError(model, f"Segment mask could not be decoded: {exc}") from exc
