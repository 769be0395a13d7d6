"""Data models and schemas.

Defines the data structures used throughout the service:
- GeoPoint / PixelPoint / BoundingBox: coordinate value types
- roof.RoofPolygon: a candidate roof outline with its measurements (import
  from the module directly; it depends on utils.geodesy)
- AerialImage / ProviderConfig: imagery returned by a provider
- Edge / AlignmentTransform: hand-drawn edges and the image-layer transform
- SiteRecord, StructureRecord, RoofSummary, DrawingRecord: persisted documents
- OutlineRequest / DrawingRequest: inbound request payloads
"""

from roof_outline.models._validation import ModelValidationError
from roof_outline.models.drawing import (
    IDENTITY_TRANSFORM,
    AlignmentTransform,
    Edge,
    EdgeType,
)
from roof_outline.models.geometry import BoundingBox, GeoPoint, PixelPoint
from roof_outline.models.imagery import AerialImage, ProviderConfig
from roof_outline.models.records import (
    DrawingRecord,
    RoofSummary,
    SiteRecord,
    StructureRecord,
    StructureSet,
)
from roof_outline.models.requests import DrawingRequest, OutlineRequest

__all__ = [
    "AerialImage",
    "AlignmentTransform",
    "BoundingBox",
    "DrawingRecord",
    "DrawingRequest",
    "Edge",
    "EdgeType",
    "GeoPoint",
    "IDENTITY_TRANSFORM",
    "ModelValidationError",
    "OutlineRequest",
    "PixelPoint",
    "ProviderConfig",
    "RoofSummary",
    "SiteRecord",
    "StructureRecord",
    "StructureSet",
]
