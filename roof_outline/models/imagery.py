"""Typed models for the imagery provider adapter layer.

- ``AerialImage``: raw image bytes plus the geographic bounds they cover.
- ``ProviderConfig``: configuration for a specific imagery provider.

Design notes:
- All models are frozen dataclasses for immutability.
- ``bounds`` is the footprint of the returned picture, which may differ
  from the requested bounding box (a map tile covers its own extent).
  Detectors map mask pixels through ``bounds``, never through the request.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from roof_outline.models._validation import check_min, check_non_empty
from roof_outline.models.geometry import BoundingBox


@dataclass(frozen=True, slots=True)
class AerialImage:
    """An aerial image fetched from a provider.

    Attributes:
        content: Raw encoded image bytes (JPEG/PNG).
        content_type: MIME type of ``content``.
        provider: Name of the provider that supplied the image.
        source_url: URL the image was fetched from, with credentials removed.
        bounds: Geographic extent covered by the image.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    content: bytes
    content_type: str
    provider: str
    source_url: str
    bounds: BoundingBox
    width: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        check_non_empty("AerialImage", "provider", self.provider)
        check_min("AerialImage", "size_bytes", len(self.content), 1)
        check_min("AerialImage", "width", self.width, 0)
        check_min("AerialImage", "height", self.height, 0)

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return "png" if self.content_type == "image/png" else "jpg"


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Configuration for a specific imagery provider.

    Attributes:
        name: Provider identifier (must match the adapter registry key).
        api_key: Credential for the provider's API ('' when unset).
        api_base_url: Base URL override for the provider's API.
        timeout_s: Timeout for each HTTP request.
        extra_params: Provider-specific configuration parameters.
    """

    name: str
    api_key: str = ""
    api_base_url: str = ""
    timeout_s: float = 30.0
    extra_params: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        check_non_empty("ProviderConfig", "name", self.name)
