"""Azure Blob Storage ``StructureStore``.

Every document is a JSON blob at a deterministic path (see
``roof_outline.utils.blob_paths``) inside one output container.  Writes
use ``overwrite=True`` so that re-running detection or re-saving a
drawing replaces the previous document in place.

Site records are read from ``sites/{site-id}/site.json``; they are
written by the host application, never by this subsystem.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import ContentSettings
from pydantic import ValidationError as PydanticValidationError

from roof_outline.models.records import DrawingRecord, SiteRecord, StructureSet
from roof_outline.storage.base import StoreError, StructureStore
from roof_outline.utils.blob_paths import (
    build_drawing_path,
    build_image_path,
    build_site_path,
    build_structures_path,
    build_summary_path,
)

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient

    from roof_outline.models.imagery import AerialImage
    from roof_outline.models.records import RoofSummary, StructureRecord

logger = logging.getLogger("roof_outline.storage.blob")

JSON_CONTENT_TYPE = "application/json"


class BlobStructureStore(StructureStore):
    """Store documents in one Blob Storage container.

    Args:
        blob_service_client: An Azure ``BlobServiceClient``.
        container: Output container name.
    """

    def __init__(self, blob_service_client: BlobServiceClient, container: str) -> None:
        self._client = blob_service_client
        self._container = container

    def get_site(self, site_id: str) -> SiteRecord | None:
        raw = self._download(build_site_path(site_id))
        if raw is None:
            return None
        try:
            return SiteRecord.model_validate_json(raw)
        except PydanticValidationError as exc:
            msg = f"Site document for {site_id!r} is malformed: {exc}"
            raise StoreError(msg, code="STORE_READ_FAILED") from exc

    def save_image(self, site_id: str, image: AerialImage) -> str:
        path = build_image_path(site_id, image.extension)
        self._upload(path, image.content, image.content_type)
        return f"{self._container}/{path}"

    def replace_structures(self, site_id: str, records: list[StructureRecord]) -> None:
        document = StructureSet(site_id=site_id, structures=list(records))
        path = build_structures_path(site_id)
        self._upload(path, document.to_json().encode("utf-8"), JSON_CONTENT_TYPE)
        logger.info(
            "Structure set replaced | site=%s | count=%d | path=%s",
            site_id,
            len(records),
            path,
        )

    def save_summary(self, summary: RoofSummary) -> None:
        path = build_summary_path(summary.site_id)
        self._upload(path, summary.to_json().encode("utf-8"), JSON_CONTENT_TYPE)

    def save_drawing(self, drawing: DrawingRecord) -> str:
        path = build_drawing_path(drawing.site_id)
        self._upload(path, drawing.to_json().encode("utf-8"), JSON_CONTENT_TYPE)
        return f"{self._container}/{path}"

    def get_drawing(self, site_id: str) -> DrawingRecord | None:
        raw = self._download(build_drawing_path(site_id))
        if raw is None:
            return None
        try:
            return DrawingRecord.model_validate_json(raw)
        except PydanticValidationError as exc:
            msg = f"Drawing document for {site_id!r} is malformed: {exc}"
            raise StoreError(msg, code="STORE_READ_FAILED") from exc

    # ------------------------------------------------------------------
    # Blob helpers
    # ------------------------------------------------------------------

    def _upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            blob_client = self._client.get_blob_client(container=self._container, blob=path)
            blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except Exception as exc:
            msg = f"Failed to upload {path}: {exc}"
            raise StoreError(msg) from exc

    def _download(self, path: str) -> bytes | None:
        try:
            blob_client = self._client.get_blob_client(container=self._container, blob=path)
            return blob_client.download_blob().readall()
        except ResourceNotFoundError:
            return None
        except Exception as exc:
            msg = f"Failed to read {path}: {exc}"
            raise StoreError(msg, code="STORE_READ_FAILED") from exc
