"""Provider factory — selects imagery adapters by name.

The factory maintains a registry of known adapters. New adapters are
registered by adding an entry to ``_ADAPTER_REGISTRY``.

Usage::

    from roof_outline.providers.factory import get_provider

    provider = get_provider("nearmap", ProviderConfig(name="nearmap", api_key=key))
    image = provider.fetch(bbox, bbox.center)

The preferred chain is read from the ``IMAGERY_PROVIDERS`` environment
variable via ``OutlineConfig.imagery_providers``; ``build_providers``
turns it into configured adapter instances.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from roof_outline.models.imagery import ProviderConfig
from roof_outline.providers.base import ImageryProvider, ProviderError

if TYPE_CHECKING:
    from collections.abc import Callable

    from roof_outline.core.config import OutlineConfig

logger = logging.getLogger("roof_outline.providers.factory")

# ---------------------------------------------------------------------------
# Provider name constants
# ---------------------------------------------------------------------------

NEARMAP = "nearmap"
MAPBOX = "mapbox"

# ---------------------------------------------------------------------------
# Lazy-import adapter registry
# ---------------------------------------------------------------------------

# Each entry maps a provider name to a callable that returns the adapter
# *class*, imported only when that adapter is selected.

_ADAPTER_REGISTRY: dict[str, Callable[[], type[ImageryProvider]]] = {}


def _register_builtin_adapters() -> None:
    """Register the built-in adapters (called once, lazily)."""

    def _nearmap() -> type[ImageryProvider]:
        from roof_outline.providers.nearmap import NearmapAdapter

        return NearmapAdapter

    def _mapbox() -> type[ImageryProvider]:
        from roof_outline.providers.mapbox import MapboxAdapter

        return MapboxAdapter

    _ADAPTER_REGISTRY[NEARMAP] = _nearmap
    _ADAPTER_REGISTRY[MAPBOX] = _mapbox


def _ensure_registry() -> None:
    """Initialise the adapter registry once (idempotent)."""
    if not _ADAPTER_REGISTRY:
        _register_builtin_adapters()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_provider(
    name: str,
    loader: Callable[[], type[ImageryProvider]],
) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider name (e.g. ``"my_custom_provider"``).
        loader: A zero-argument callable that returns the adapter class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Provider name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _ADAPTER_REGISTRY[name] = loader
    logger.debug("Registered provider adapter | name=%s", name)


def get_provider(
    name: str,
    config: ProviderConfig | None = None,
) -> ImageryProvider:
    """Create and return an imagery provider instance.

    Args:
        name: Provider identifier (``"nearmap"``, ``"mapbox"``).
        config: Optional ``ProviderConfig``; defaults to one carrying only
            the provider name.

    Raises:
        ProviderError: If the named provider is not registered, or the
            config belongs to another provider.
    """
    _ensure_registry()

    loader = _ADAPTER_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(sorted(_ADAPTER_REGISTRY))
        msg = f"Unknown imagery provider: {name!r}. Available: {available}"
        raise ProviderError(provider=name, message=msg)

    adapter_cls = loader()

    if config is None:
        config = ProviderConfig(name=name)
    elif config.name != name:
        msg = f"ProviderConfig.name {config.name!r} does not match requested provider {name!r}"
        raise ProviderError(provider=name, message=msg)

    logger.debug("Creating imagery provider | name=%s", name)
    return adapter_cls(config)


def list_providers() -> list[str]:
    """Return the names of all registered provider adapters."""
    _ensure_registry()
    return sorted(_ADAPTER_REGISTRY)


def build_providers(config: OutlineConfig) -> list[ImageryProvider]:
    """Instantiate the configured provider chain, in preference order.

    Providers without a credential are skipped with a log line; unknown
    names raise ``ProviderError``.
    """
    providers: list[ImageryProvider] = []
    for name in config.imagery_providers:
        api_key = config.credential_for(name)
        if not api_key:
            logger.info("Imagery provider skipped | provider=%s | reason=no credential", name)
            continue
        providers.append(
            get_provider(
                name,
                ProviderConfig(name=name, api_key=api_key, timeout_s=config.http_timeout_s),
            )
        )
    return providers
