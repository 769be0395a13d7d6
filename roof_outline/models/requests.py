"""Typed request schemas for the two HTTP operations.

- ``OutlineRequest``: ``{site_id, precision}`` — run automated outlining.
- ``DrawingRequest``: ``{site_id, edges, transform, pixels_per_foot}`` —
  persist an operator drawing.

Both parse untrusted JSON bodies and raise ``ModelValidationError``
(step ``input-validation``) on anything malformed.
"""

from __future__ import annotations

from dataclasses import dataclass

from roof_outline.core.constants import Precision
from roof_outline.models._validation import ModelValidationError, check_min, check_non_empty
from roof_outline.models.drawing import IDENTITY_TRANSFORM, AlignmentTransform, Edge


@dataclass(frozen=True, slots=True)
class OutlineRequest:
    """Input of the acquisition coordinator.

    Attributes:
        site_id: Site to outline.
        precision: Bounding box tier; ``standard`` when omitted.
        correlation_id: Caller-supplied request id, echoed in errors.
    """

    site_id: str
    precision: Precision = Precision.STANDARD
    correlation_id: str = ""

    def __post_init__(self) -> None:
        check_non_empty("OutlineRequest", "site_id", self.site_id)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> OutlineRequest:
        site_id = data.get("site_id")
        if not isinstance(site_id, str):
            raise ModelValidationError("OutlineRequest", "site_id", site_id, "must be a string")

        raw_precision = data.get("precision") or Precision.STANDARD.value
        try:
            precision = Precision(str(raw_precision).lower())
        except ValueError as exc:
            raise ModelValidationError(
                "OutlineRequest",
                "precision",
                raw_precision,
                "must be 'high' or 'standard'",
            ) from exc

        return cls(
            site_id=site_id,
            precision=precision,
            correlation_id=str(data.get("correlation_id", "")),
        )


@dataclass(frozen=True, slots=True)
class DrawingRequest:
    """Input of the drawing save activity."""

    site_id: str
    edges: tuple[Edge, ...] = ()
    transform: AlignmentTransform = IDENTITY_TRANSFORM
    pixels_per_foot: float | None = None

    def __post_init__(self) -> None:
        check_non_empty("DrawingRequest", "site_id", self.site_id)
        if self.pixels_per_foot is not None:
            check_min("DrawingRequest", "pixels_per_foot", self.pixels_per_foot, 0.0)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> DrawingRequest:
        site_id = data.get("site_id")
        if not isinstance(site_id, str):
            raise ModelValidationError("DrawingRequest", "site_id", site_id, "must be a string")

        raw_scale = data.get("pixels_per_foot")
        try:
            pixels_per_foot = float(raw_scale) if raw_scale is not None else None  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ModelValidationError(
                "DrawingRequest", "pixels_per_foot", raw_scale, "must be a number"
            ) from exc

        raw_edges = data.get("edges") or []
        if not isinstance(raw_edges, list):
            raise ModelValidationError("DrawingRequest", "edges", raw_edges, "must be a list")
        edges = tuple(
            Edge.from_dict(item, pixels_per_foot=pixels_per_foot)
            for item in raw_edges
            if isinstance(item, dict)
        )

        raw_transform = data.get("transform")
        if raw_transform is not None and not isinstance(raw_transform, dict):
            raise ModelValidationError("DrawingRequest", "transform", raw_transform, "must be an object")

        return cls(
            site_id=site_id,
            edges=edges,
            transform=AlignmentTransform.from_dict(raw_transform),
            pixels_per_foot=pixels_per_foot,
        )
