"""Mapbox adapter — general basemap fallback.

Requests a ``satellite-v9`` static image framed on the bounding box::

    GET https://api.mapbox.com/styles/v1/mapbox/satellite-v9/static/[w,s,e,n]/1024x1024

The image is framed on the requested box, so ``AerialImage.bounds`` is
the requested bounding box.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from roof_outline.models.imagery import AerialImage
from roof_outline.providers.base import ImageryProvider, ProviderAuthError, ProviderFetchError

if TYPE_CHECKING:
    from roof_outline.models.geometry import BoundingBox, GeoPoint

logger = logging.getLogger("roof_outline.providers.mapbox")

MAPBOX_STATIC_URL = "https://api.mapbox.com/styles/v1/mapbox/satellite-v9/static"
IMAGE_SIZE_PX = 1024


class MapboxAdapter(ImageryProvider):
    """Mapbox static satellite image adapter."""

    def fetch(self, bbox: BoundingBox, center: GeoPoint) -> AerialImage:
        if not self.config.api_key:
            raise ProviderAuthError(self.name, "MAPBOX_PUBLIC_TOKEN not configured")

        base = (self.config.api_base_url or MAPBOX_STATIC_URL).rstrip("/")
        frame = f"[{bbox.west},{bbox.south},{bbox.east},{bbox.north}]"
        url = f"{base}/{frame}/{IMAGE_SIZE_PX}x{IMAGE_SIZE_PX}"

        try:
            with httpx.Client(timeout=self.config.timeout_s, follow_redirects=True) as client:
                response = client.get(url, params={"access_token": self.config.api_key})
        except httpx.HTTPError as exc:
            msg = f"Static image request failed: {exc}"
            raise ProviderFetchError(self.name, msg, retryable=True) from exc

        if response.status_code in {401, 403}:
            raise ProviderAuthError(
                self.name, f"Static image request rejected: HTTP {response.status_code}"
            )
        if response.status_code != 200:
            msg = f"Static image request returned HTTP {response.status_code}"
            raise ProviderFetchError(self.name, msg, retryable=response.status_code >= 500)
        if not response.content:
            raise ProviderFetchError(self.name, "Static image response was empty")

        logger.info(
            "Mapbox static image fetched | center=%.6f,%.6f | bytes=%d",
            center.lat,
            center.lng,
            len(response.content),
        )
        return AerialImage(
            content=response.content,
            content_type=response.headers.get("content-type", "image/jpeg"),
            provider=self.name,
            source_url=url,
            bounds=bbox,
            width=IMAGE_SIZE_PX,
            height=IMAGE_SIZE_PX,
        )
