"""Shared pytest fixtures for the roof outline test suite."""

from __future__ import annotations

import math
from collections.abc import Callable

import pytest

from roof_outline.core.config import OutlineConfig
from roof_outline.models.geometry import BoundingBox, GeoPoint
from roof_outline.models.imagery import AerialImage
from roof_outline.models.records import SiteRecord
from roof_outline.models.roof import RoofPolygon
from roof_outline.storage.memory import InMemoryStructureStore

SITE_ID = "quote-123"
SITE_LAT = 39.7392
SITE_LNG = -104.9903

_M_PER_DEG = 111_320.0
_FT_PER_M = 3.28084


def rectangle(
    center: GeoPoint,
    width_ft: float,
    height_ft: float,
    *,
    polygon_id: str = "A",
    confidence: float = 0.9,
    offset_east_m: float = 0.0,
    source: str = "",
) -> RoofPolygon:
    """Axis-aligned rectangle of the given size, optionally shifted east."""
    m_per_deg_lng = _M_PER_DEG * math.cos(math.radians(center.lat))
    half_w = width_ft / _FT_PER_M / m_per_deg_lng / 2
    half_h = height_ft / _FT_PER_M / _M_PER_DEG / 2
    lng = center.lng + offset_east_m / m_per_deg_lng
    vertices = [
        GeoPoint(lng=lng - half_w, lat=center.lat - half_h),
        GeoPoint(lng=lng + half_w, lat=center.lat - half_h),
        GeoPoint(lng=lng + half_w, lat=center.lat + half_h),
        GeoPoint(lng=lng - half_w, lat=center.lat + half_h),
    ]
    return RoofPolygon.from_ring(
        polygon_id,
        vertices,
        confidence=confidence,
        reference_latitude=center.lat,
        source=source,
    )


# ---------------------------------------------------------------------------
# Site fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def site_center() -> GeoPoint:
    return GeoPoint(lng=SITE_LNG, lat=SITE_LAT)


@pytest.fixture()
def site_bbox(site_center: GeoPoint) -> BoundingBox:
    """Standard-precision box around the site."""
    return BoundingBox.around(site_center, 0.0005)


@pytest.fixture()
def site_record() -> SiteRecord:
    return SiteRecord(
        site_id=SITE_ID,
        latitude=SITE_LAT,
        longitude=SITE_LNG,
        address="1437 Bannock St, Denver, CO",
    )


@pytest.fixture()
def memory_store(site_record: SiteRecord) -> InMemoryStructureStore:
    return InMemoryStructureStore([site_record])


@pytest.fixture()
def make_rectangle() -> Callable[..., RoofPolygon]:
    """Factory for rectangular roof candidates (see ``rectangle``)."""
    return rectangle


# ---------------------------------------------------------------------------
# Imagery and configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def aerial_image(site_bbox: BoundingBox) -> AerialImage:
    return AerialImage(
        content=b"\xff\xd8\xff\xe0fake-jpeg",
        content_type="image/jpeg",
        provider="nearmap",
        source_url="https://api.nearmap.test/tiles/v3/Vert/19/1/2.jpg",
        bounds=site_bbox,
        width=256,
        height=256,
    )


@pytest.fixture()
def configured() -> OutlineConfig:
    """Configuration with every credential present."""
    return OutlineConfig(
        huggingface_token="hf_test",
        nearmap_api_key="nm_test",
        mapbox_token="pk.test",
    )
