"""Deterministic blob path generation for per-site roof documents.

Layout inside the output container::

    sites/{site-id}/site.json                      site record (read only)
    sites/{site-id}/roi/{YYYYMMDDTHHMMSSZ}.{ext}   source aerial images
    sites/{site-id}/structures.json                current structure set
    sites/{site-id}/summary.json                   site aggregate
    sites/{site-id}/drawing.json                   operator drawing

The structure set, summary and drawing live at fixed paths, so writing
them overwrites the previous version.  Images are timestamped so every
run keeps the picture its polygons were derived from.

Site ids are percent-encoded into a single path segment (``encode_site_id``).
The encoding is reversible, so distinct sites never share a document path.
File extensions are sanitised to lowercase slug form.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from urllib.parse import quote

SITES_PREFIX = "sites"
ROI_SEGMENT = "roi"
STRUCTURES_FILENAME = "structures.json"
SUMMARY_FILENAME = "summary.json"
DRAWING_FILENAME = "drawing.json"
SITE_FILENAME = "site.json"

_SLUG_RE = re.compile(r"[^a-z0-9-]+")


def sanitise_slug(value: str) -> str:
    """Convert a string to a path-safe slug.

    Falls back to ``"unknown"`` if nothing survives sanitisation.
    """
    slug = value.lower().strip().replace(" ", "-").replace("_", "-")
    slug = _SLUG_RE.sub("", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug if slug else "unknown"


def encode_site_id(site_id: str) -> str:
    """Encode a site id as one blob path segment, without loss.

    Letters, digits, ``-``, ``_`` and ``~`` pass through unchanged (case is
    kept); every other character is percent-encoded, ``.`` included, so
    that ``..`` cannot address a parent prefix.

    Raises:
        ValueError: If *site_id* is empty.
    """
    if not site_id:
        msg = "site_id must not be empty"
        raise ValueError(msg)
    return quote(site_id, safe="").replace(".", "%2E")


def site_prefix(site_id: str) -> str:
    return f"{SITES_PREFIX}/{encode_site_id(site_id)}"


def build_image_path(
    site_id: str,
    extension: str = "jpg",
    *,
    timestamp: datetime | None = None,
) -> str:
    """Blob path for a source aerial image.

    Format: ``sites/{site-id}/roi/{YYYYMMDDTHHMMSSZ}.{ext}``
    """
    ts = timestamp or datetime.now(UTC)
    ext = sanitise_slug(extension.lstrip("."))
    return f"{site_prefix(site_id)}/{ROI_SEGMENT}/{ts:%Y%m%dT%H%M%SZ}.{ext}"


def build_site_path(site_id: str) -> str:
    return f"{site_prefix(site_id)}/{SITE_FILENAME}"


def build_structures_path(site_id: str) -> str:
    return f"{site_prefix(site_id)}/{STRUCTURES_FILENAME}"


def build_summary_path(site_id: str) -> str:
    return f"{site_prefix(site_id)}/{SUMMARY_FILENAME}"


def build_drawing_path(site_id: str) -> str:
    return f"{site_prefix(site_id)}/{DRAWING_FILENAME}"
