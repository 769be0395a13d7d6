"""Tests for the provider chain in fetch_best_image."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from roof_outline.activities.fetch_imagery import ImageFetchError, fetch_best_image
from roof_outline.providers.base import (
    ImageryProvider,
    ProviderAuthError,
    ProviderFetchError,
)


def _provider(name: str, *, image=None, error: Exception | None = None) -> MagicMock:
    provider = MagicMock(spec=ImageryProvider)
    provider.name = name
    if error is not None:
        provider.fetch.side_effect = error
    else:
        provider.fetch.return_value = image
    return provider


class TestFetchBestImage:
    def test_first_provider_wins(self, site_bbox, site_center, aerial_image) -> None:
        first = _provider("nearmap", image=aerial_image)
        second = _provider("mapbox", image=aerial_image)

        assert fetch_best_image([first, second], site_bbox, site_center) is aerial_image
        first.fetch.assert_called_once_with(site_bbox, site_center)
        second.fetch.assert_not_called()

    def test_falls_through_on_provider_error(self, site_bbox, site_center, aerial_image) -> None:
        failing = _provider("nearmap", error=ProviderAuthError("nearmap", "HTTP 403"))
        working = _provider("mapbox", image=aerial_image)
        assert fetch_best_image([failing, working], site_bbox, site_center) is aerial_image

    def test_all_failed(self, site_bbox, site_center) -> None:
        providers = [
            _provider("nearmap", error=ProviderFetchError("nearmap", "HTTP 500", retryable=True)),
            _provider("mapbox", error=ProviderAuthError("mapbox", "HTTP 401")),
        ]
        with pytest.raises(ImageFetchError) as exc_info:
            fetch_best_image(providers, site_bbox, site_center)

        err = exc_info.value
        assert err.errors == {"nearmap": "HTTP 500", "mapbox": "HTTP 401"}
        assert err.stage == "fetch-image"
        assert err.to_error_dict()["provider_errors"] == err.errors
        assert "nearmap: HTTP 500" in err.message

    def test_no_providers(self, site_bbox, site_center) -> None:
        with pytest.raises(ImageFetchError, match="No aerial imagery provider"):
            fetch_best_image([], site_bbox, site_center)

    def test_non_provider_errors_propagate(self, site_bbox, site_center) -> None:
        broken = _provider("nearmap", error=KeyError("bug"))
        with pytest.raises(KeyError):
            fetch_best_image([broken], site_bbox, site_center)
