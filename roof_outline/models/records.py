"""Pydantic models for documents persisted by the structure store.

- ``SiteRecord``: the target site (read-only input to the pipeline).
- ``StructureRecord``: one persisted roof structure of a site's current set.
- ``StructureSet``: the structure records of a site, written as one document.
- ``RoofSummary``: per-site aggregate written alongside the structure set.
- ``DrawingRecord``: an operator-saved drawing (edges + alignment).

A drawing always stores its edges *and* the alignment transform in effect
at save time: pixel coordinates are only meaningful relative to a known
transform.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from roof_outline.core.constants import DEFAULT_PIXELS_PER_FOOT

STRUCTURE_SCHEMA_VERSION = "roof-structures-v1"
DRAWING_SCHEMA_VERSION = "roof-drawing-v1"


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SiteRecord(BaseModel):
    """A site whose roof should be outlined.

    Attributes:
        site_id: Host-application identifier (e.g. a quote request id).
        latitude: Expected roof location latitude.
        longitude: Expected roof location longitude.
        address: Free-form address, for logs only.
        pixels_per_foot: Calibrated imagery scale, if known.
    """

    site_id: str
    latitude: float | None = None
    longitude: float | None = None
    address: str = ""
    pixels_per_foot: float | None = None


class StructureRecord(BaseModel):
    """One roof structure of a site's current structure set."""

    site_id: str
    structure_id: str
    geometry: dict[str, Any] = Field(default_factory=dict)
    area_sq_ft: float = 0.0
    perimeter_ft: float = 0.0
    confidence: float = 0.0
    included: bool = False

    @classmethod
    def from_polygon(cls, site_id: str, polygon: object) -> StructureRecord:
        """Build a record from a ``RoofPolygon``."""
        from roof_outline.models.roof import RoofPolygon

        if not isinstance(polygon, RoofPolygon):
            msg = f"Expected RoofPolygon instance, got {type(polygon).__name__}"
            raise TypeError(msg)

        return cls(
            site_id=site_id,
            structure_id=polygon.id,
            geometry={"type": "Polygon", "coordinates": polygon.coordinates},
            area_sq_ft=polygon.area_sq_ft,
            perimeter_ft=polygon.perimeter_ft,
            confidence=polygon.confidence,
            included=polygon.included,
        )


class StructureSet(BaseModel):
    """The persisted structure set of a site; replaced wholesale on every run."""

    schema_version: str = Field(default=STRUCTURE_SCHEMA_VERSION, alias="$schema")
    site_id: str
    structures: list[StructureRecord] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def to_json(self, *, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent, by_alias=True)


class PolygonSummary(BaseModel):
    """Per-polygon line of the site aggregate."""

    id: str
    area_sq_ft: float
    confidence: float
    included: bool


class RoofSummary(BaseModel):
    """Per-site aggregate of the current structure set.

    Attributes:
        schema_version: Schema identifier for forward compatibility.
        site_id: Site the summary belongs to.
        total_area_sq_ft: Sum of the areas of *included* structures.
        polygons: Per-polygon summary.
        method: Detection method that produced the set.
        confidence_avg: Mean confidence over all structures.
        image_ref: Reference to the persisted source image.
        created_at: Write timestamp (ISO 8601, UTC).
    """

    schema_version: str = Field(default=STRUCTURE_SCHEMA_VERSION, alias="$schema")
    site_id: str
    total_area_sq_ft: float = 0.0
    polygons: list[PolygonSummary] = Field(default_factory=list)
    method: str = ""
    confidence_avg: float = 0.0
    image_ref: str = ""
    created_at: str = Field(default_factory=_utc_now_iso)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_records(
        cls,
        site_id: str,
        records: list[StructureRecord],
        *,
        method: str,
        image_ref: str = "",
    ) -> RoofSummary:
        included = [r for r in records if r.included]
        confidence_avg = sum(r.confidence for r in records) / len(records) if records else 0.0
        return cls(
            site_id=site_id,
            total_area_sq_ft=sum(r.area_sq_ft for r in included),
            polygons=[
                PolygonSummary(
                    id=r.structure_id,
                    area_sq_ft=r.area_sq_ft,
                    confidence=r.confidence,
                    included=r.included,
                )
                for r in records
            ],
            method=method,
            confidence_avg=confidence_avg,
            image_ref=image_ref,
        )

    def to_json(self, *, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent, by_alias=True)


class DrawingRecord(BaseModel):
    """An operator-saved drawing.

    Attributes:
        schema_version: Schema identifier for forward compatibility.
        site_id: Site the drawing belongs to.
        edges: Serialised edges (``Edge.to_dict``), in drawing order.
        transform: Alignment transform in effect at save time.
        pixels_per_foot: Scale the edge lengths were computed with.
        totals_ft: Total length per edge type.
        saved_at: Save timestamp (ISO 8601, UTC).
    """

    schema_version: str = Field(default=DRAWING_SCHEMA_VERSION, alias="$schema")
    site_id: str
    edges: list[dict[str, Any]] = Field(default_factory=list)
    transform: dict[str, float] = Field(default_factory=dict)
    pixels_per_foot: float = DEFAULT_PIXELS_PER_FOOT
    totals_ft: dict[str, float] = Field(default_factory=dict)
    saved_at: str = Field(default_factory=_utc_now_iso)

    model_config = {"populate_by_name": True}

    def to_json(self, *, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent, by_alias=True)
