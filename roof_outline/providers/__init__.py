"""Aerial imagery provider adapters.

Implements the provider-agnostic adapter pattern (Strategy pattern):
- ImageryProvider: Abstract base class defining the interface
- NearmapAdapter: Nearmap vertical tiles (preferred, high resolution)
- MapboxAdapter: Mapbox static satellite imagery (general fallback)

The provider chain is selected via configuration, enabling zero-code-change
provider switching.
"""

from roof_outline.providers.base import (
    ImageryProvider,
    ProviderAuthError,
    ProviderError,
    ProviderFetchError,
)
from roof_outline.providers.factory import (
    MAPBOX,
    NEARMAP,
    build_providers,
    get_provider,
    list_providers,
    register_provider,
)

__all__ = [
    "MAPBOX",
    "NEARMAP",
    "ImageryProvider",
    "ProviderAuthError",
    "ProviderError",
    "ProviderFetchError",
    "build_providers",
    "get_provider",
    "list_providers",
    "register_provider",
]
