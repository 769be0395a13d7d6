"""Pipeline configuration loaded from environment variables.

Azure Functions app settings (or ``local.settings.json`` for local dev)
are the source of truth.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any numeric value
    is out of its valid range.  Missing credentials are checked separately
    by ``require_credentials()`` so that the coordinator can report them
    as a ``config`` step failure for the request that needs them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from roof_outline.core.constants import (
    CONFIDENCE_THRESHOLD,
    DEFAULT_OUTPUT_CONTAINER,
    DEFAULT_PIXELS_PER_FOOT,
    FailureStep,
)
from roof_outline.core.exceptions import PipelineError

DEFAULT_HF_MODELS: tuple[str, ...] = (
    "facebook/detr-resnet-50-panoptic",
    "nvidia/segformer-b5-finetuned-ade-640-640",
)
DEFAULT_IMAGERY_PROVIDERS: tuple[str, ...] = ("nearmap", "mapbox")


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of range or missing.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = FailureStep.CONFIG.value
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class OutlineConfig:
    """Immutable pipeline configuration.

    Attributes:
        huggingface_token: Bearer token for the Hugging Face inference API.
        hf_models: Ordered detector models; tried first to last.
        nearmap_api_key: Nearmap API key (preferred high-resolution imagery).
        mapbox_token: Mapbox access token (general basemap fallback).
        imagery_providers: Ordered imagery provider names.
        output_container: Blob container for images, structures and drawings.
        http_timeout_s: Timeout applied to every outbound HTTP call.
        confidence_threshold: Minimum candidate confidence.
        default_pixels_per_foot: Editor scale when imagery has no calibration.
    """

    huggingface_token: str = ""
    hf_models: tuple[str, ...] = DEFAULT_HF_MODELS
    nearmap_api_key: str = ""
    mapbox_token: str = ""
    imagery_providers: tuple[str, ...] = DEFAULT_IMAGERY_PROVIDERS
    output_container: str = DEFAULT_OUTPUT_CONTAINER
    http_timeout_s: float = 30.0
    confidence_threshold: float = CONFIDENCE_THRESHOLD
    default_pixels_per_foot: float = DEFAULT_PIXELS_PER_FOOT

    @classmethod
    def from_env(cls) -> OutlineConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a numeric value is out of range
                or a required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``HTTP_TIMEOUT_S=abc``).
        """
        config = cls(
            huggingface_token=os.getenv("HUGGINGFACE_API_TOKEN", ""),
            hf_models=_split_list(os.getenv("HF_MODELS"), DEFAULT_HF_MODELS),
            nearmap_api_key=os.getenv("NEARMAP_API_KEY", ""),
            mapbox_token=os.getenv("MAPBOX_PUBLIC_TOKEN", ""),
            imagery_providers=_split_list(
                os.getenv("IMAGERY_PROVIDERS"), DEFAULT_IMAGERY_PROVIDERS
            ),
            output_container=os.getenv("ROOF_OUTPUT_CONTAINER", DEFAULT_OUTPUT_CONTAINER),
            http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "30")),
            confidence_threshold=float(
                os.getenv("CONFIDENCE_THRESHOLD", str(CONFIDENCE_THRESHOLD))
            ),
            default_pixels_per_foot=float(
                os.getenv("DEFAULT_PIXELS_PER_FOOT", str(DEFAULT_PIXELS_PER_FOOT))
            ),
        )
        _validate(config)
        return config

    def credential_for(self, provider_name: str) -> str:
        """Return the credential configured for an imagery provider ('' if none)."""
        return {
            "nearmap": self.nearmap_api_key,
            "mapbox": self.mapbox_token,
        }.get(provider_name, "")

    def require_credentials(self) -> None:
        """Fail fast when the configured stages cannot authenticate.

        Raises:
            ConfigValidationError: If detector models are configured without
                a Hugging Face token, or no imagery provider has a credential.
        """
        if self.hf_models and not self.huggingface_token:
            raise ConfigValidationError(
                "HUGGINGFACE_API_TOKEN",
                "",
                "required when HF_MODELS is non-empty",
            )
        if not any(self.credential_for(name) for name in self.imagery_providers):
            raise ConfigValidationError(
                "IMAGERY_PROVIDERS",
                ",".join(self.imagery_providers),
                "no aerial imagery API keys configured",
            )


def _split_list(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated env value; ``None`` means *use the default*."""
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _validate(config: OutlineConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.http_timeout_s <= 0:
        raise ConfigValidationError(
            "HTTP_TIMEOUT_S",
            config.http_timeout_s,
            "must be > 0 (seconds)",
        )

    if not 0.0 <= config.confidence_threshold <= 1.0:
        raise ConfigValidationError(
            "CONFIDENCE_THRESHOLD",
            config.confidence_threshold,
            "must be between 0 and 1",
        )

    if config.default_pixels_per_foot <= 0:
        raise ConfigValidationError(
            "DEFAULT_PIXELS_PER_FOOT",
            config.default_pixels_per_foot,
            "must be > 0",
        )

    if not config.output_container:
        raise ConfigValidationError(
            "ROOF_OUTPUT_CONTAINER",
            config.output_container,
            "must not be empty",
        )
