"""ImageryProvider abstract base class.

Defines the contract that every aerial imagery adapter must implement.
The coordinator interacts exclusively with this interface; it never
knows which concrete provider is behind it.

A provider has a single operation, ``fetch(bbox, center)``, returning an
``AerialImage`` whose ``bounds`` describe the ground extent actually
covered by the picture.  Providers are tried in configured order by
``roof_outline.activities.fetch_imagery.fetch_best_image``; an adapter
signals failure by raising a ``ProviderError``.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from roof_outline.core.constants import FailureStep
from roof_outline.core.exceptions import PipelineError

if TYPE_CHECKING:
    from roof_outline.models.geometry import BoundingBox, GeoPoint
    from roof_outline.models.imagery import AerialImage, ProviderConfig


class ImageryProvider(abc.ABC):
    """Abstract base class for aerial imagery adapters.

    The constructor receives a ``ProviderConfig`` carrying the credential,
    an optional base URL override and the HTTP timeout.

    Example usage::

        provider = get_provider("nearmap", config)
        image = provider.fetch(bbox, bbox.center)
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        """Return the provider name from configuration."""
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        """Return the provider configuration (read-only)."""
        return self._config

    @abc.abstractmethod
    def fetch(self, bbox: BoundingBox, center: GeoPoint) -> AerialImage:
        """Fetch an aerial image covering *bbox*.

        Args:
            bbox: Area the image must cover.
            center: Expected site coordinate (tile-based providers pick
                the tile containing it).

        Returns:
            The image with its covered ground ``bounds``.

        Raises:
            ProviderError: On missing credentials, HTTP or payload failures.
        """


# ---------------------------------------------------------------------------
# Provider exceptions
# ---------------------------------------------------------------------------


class ProviderError(PipelineError):
    """Base exception for imagery adapter errors.

    Attributes:
        provider: Name of the provider that raised the error.
        message: Human-readable error description.
        retryable: Whether the caller could retry the operation.
    """

    default_stage = FailureStep.FETCH_IMAGE.value
    default_code = "PROVIDER_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        retryable: bool = False,
    ) -> None:
        self.provider = provider
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class ProviderAuthError(ProviderError):
    """Missing credential, or the provider rejected it."""

    default_code = "PROVIDER_AUTH_FAILED"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=False)


class ProviderFetchError(ProviderError):
    """The image request failed or returned an unusable payload."""

    default_code = "PROVIDER_FETCH_FAILED"
