"""Nearmap adapter — high-resolution vertical imagery tiles.

Fetches the single Web Mercator tile (zoom 19) containing the site
coordinate from the Nearmap Tile API::

    GET https://api.nearmap.com/tiles/v3/Vert/{z}/{x}/{y}.jpg?apikey=...

The returned ``AerialImage.bounds`` is the tile's own ground extent,
computed from its x/y/z, not the requested bounding box.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import httpx

from roof_outline.models.geometry import BoundingBox
from roof_outline.models.imagery import AerialImage
from roof_outline.providers.base import ImageryProvider, ProviderAuthError, ProviderFetchError

if TYPE_CHECKING:
    from roof_outline.models.geometry import GeoPoint

logger = logging.getLogger("roof_outline.providers.nearmap")

NEARMAP_TILE_URL = "https://api.nearmap.com/tiles/v3/Vert"
TILE_ZOOM = 19
TILE_SIZE_PX = 256


def lat_lng_to_tile(lat: float, lng: float, zoom: int) -> tuple[int, int]:
    """Web Mercator (slippy map) tile indices containing a coordinate."""
    n = 2**zoom
    x = int((lng + 180.0) / 360.0 * n)
    lat_rad = math.radians(lat)
    y = int((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
    return min(max(x, 0), n - 1), min(max(y, 0), n - 1)


def tile_bounds(x: int, y: int, zoom: int) -> BoundingBox:
    """Ground extent of a slippy map tile."""
    n = 2**zoom

    def _lat(tile_y: int) -> float:
        return math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * tile_y / n))))

    return BoundingBox(
        west=x / n * 360.0 - 180.0,
        south=_lat(y + 1),
        east=(x + 1) / n * 360.0 - 180.0,
        north=_lat(y),
    )


class NearmapAdapter(ImageryProvider):
    """Nearmap vertical tile adapter."""

    def fetch(self, bbox: BoundingBox, center: GeoPoint) -> AerialImage:
        if not self.config.api_key:
            raise ProviderAuthError(self.name, "NEARMAP_API_KEY not configured")

        x, y = lat_lng_to_tile(center.lat, center.lng, TILE_ZOOM)
        base = (self.config.api_base_url or NEARMAP_TILE_URL).rstrip("/")
        url = f"{base}/{TILE_ZOOM}/{x}/{y}.jpg"

        try:
            with httpx.Client(timeout=self.config.timeout_s, follow_redirects=True) as client:
                response = client.get(url, params={"apikey": self.config.api_key})
        except httpx.HTTPError as exc:
            msg = f"Tile request failed: {exc}"
            raise ProviderFetchError(self.name, msg, retryable=True) from exc

        if response.status_code in {401, 403}:
            raise ProviderAuthError(self.name, f"Tile request rejected: HTTP {response.status_code}")
        if response.status_code != 200:
            msg = f"Tile request returned HTTP {response.status_code}"
            raise ProviderFetchError(self.name, msg, retryable=response.status_code >= 500)
        if not response.content:
            raise ProviderFetchError(self.name, "Tile response was empty")

        logger.info(
            "Nearmap tile fetched | z=%d | x=%d | y=%d | bytes=%d",
            TILE_ZOOM,
            x,
            y,
            len(response.content),
        )
        return AerialImage(
            content=response.content,
            content_type=response.headers.get("content-type", "image/jpeg"),
            provider=self.name,
            source_url=url,
            bounds=tile_bounds(x, y, TILE_ZOOM),
            width=TILE_SIZE_PX,
            height=TILE_SIZE_PX,
        )
