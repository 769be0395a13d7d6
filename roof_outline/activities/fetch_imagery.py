"""Fetch imagery activity — best available aerial image for a site.

Tries the configured providers in preference order (Nearmap first for
its resolution, then Mapbox) and returns the first image obtained.
Each provider failure is logged and the next provider is tried; when
the chain is exhausted ``ImageFetchError`` is raised with the per-provider
errors attached.

No retries: a provider either answers within its timeout or the chain
moves on.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from roof_outline.core.constants import FailureStep
from roof_outline.core.exceptions import PipelineError
from roof_outline.providers.base import ProviderError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from roof_outline.models.geometry import BoundingBox, GeoPoint
    from roof_outline.models.imagery import AerialImage
    from roof_outline.providers.base import ImageryProvider

logger = logging.getLogger("roof_outline.activities.fetch_imagery")


class ImageFetchError(PipelineError):
    """No provider could supply an image.

    Attributes:
        errors: ``provider -> error text`` for each failed provider.
    """

    default_stage = FailureStep.FETCH_IMAGE.value
    default_code = "IMAGE_FETCH_FAILED"

    def __init__(self, message: str, *, errors: dict[str, str] | None = None) -> None:
        self.errors = dict(errors or {})
        super().__init__(message, retryable=True)

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["provider_errors"] = self.errors
        return payload


def fetch_best_image(
    providers: Sequence[ImageryProvider],
    bbox: BoundingBox,
    center: GeoPoint,
) -> AerialImage:
    """Return the first image any provider can supply.

    Args:
        providers: Adapters in preference order.
        bbox: Area the image must cover.
        center: Expected site coordinate.

    Raises:
        ImageFetchError: If no provider is configured or all of them fail.
    """
    if not providers:
        raise ImageFetchError("No aerial imagery provider configured")

    errors: dict[str, str] = {}
    for provider in providers:
        try:
            image = provider.fetch(bbox, center)
        except ProviderError as exc:
            logger.warning("Imagery provider failed | provider=%s | error=%s", provider.name, exc)
            errors[provider.name] = exc.message
            continue

        logger.info(
            "Imagery acquired | provider=%s | bytes=%d | size=%dx%d",
            image.provider,
            image.size_bytes,
            image.width,
            image.height,
        )
        return image

    summary = "; ".join(f"{name}: {error}" for name, error in errors.items())
    raise ImageFetchError(f"All imagery providers failed ({summary})", errors=errors)
