"""In-process ``StructureStore`` for local runs and tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from roof_outline.storage.base import StructureStore
from roof_outline.utils.blob_paths import build_drawing_path, build_image_path

if TYPE_CHECKING:
    from roof_outline.models.imagery import AerialImage
    from roof_outline.models.records import DrawingRecord, RoofSummary, SiteRecord, StructureRecord

logger = logging.getLogger("roof_outline.storage.memory")


class InMemoryStructureStore(StructureStore):
    """Dictionary-backed store.

    Attributes:
        sites: Known sites by id.
        images: Image bytes by reference.
        structures: Current structure set per site.
        summaries: Current summary per site.
        drawings: Last saved drawing per site.
    """

    def __init__(self, sites: list[SiteRecord] | None = None) -> None:
        self.sites: dict[str, SiteRecord] = {s.site_id: s for s in sites or []}
        self.images: dict[str, bytes] = {}
        self.structures: dict[str, list[StructureRecord]] = {}
        self.summaries: dict[str, RoofSummary] = {}
        self.drawings: dict[str, DrawingRecord] = {}

    def get_site(self, site_id: str) -> SiteRecord | None:
        return self.sites.get(site_id)

    def save_image(self, site_id: str, image: AerialImage) -> str:
        ref = build_image_path(site_id, image.extension)
        self.images[ref] = image.content
        return ref

    def replace_structures(self, site_id: str, records: list[StructureRecord]) -> None:
        self.structures[site_id] = list(records)
        logger.debug("Structure set replaced | site=%s | count=%d", site_id, len(records))

    def save_summary(self, summary: RoofSummary) -> None:
        self.summaries[summary.site_id] = summary

    def save_drawing(self, drawing: DrawingRecord) -> str:
        self.drawings[drawing.site_id] = drawing
        return build_drawing_path(drawing.site_id)

    def get_drawing(self, site_id: str) -> DrawingRecord | None:
        return self.drawings.get(site_id)
