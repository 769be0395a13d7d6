"""Thin ingress boundary helpers for Azure Functions entrypoints.

Centralises the transport concerns so that ``function_app.py`` contains
only trigger bindings and handoff:

- **deserialize_request_body** — normalises a JSON-string, bytes or dict
  request body to a plain dict.
- **get_blob_service_client** — creates an ``azure.storage.blob`` client
  from the ``AzureWebJobsStorage`` environment variable, failing fast
  with a structured error if unconfigured.
- **build_structure_store** — the Blob Storage store for a configuration.
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from roof_outline.core.constants import FailureStep
from roof_outline.core.exceptions import ContractError

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient

    from roof_outline.core.config import OutlineConfig
    from roof_outline.storage.blob import BlobStructureStore

logger = logging.getLogger("roof_outline.core.ingress")

_INPUT_STAGE = FailureStep.INPUT_VALIDATION.value


def deserialize_request_body(raw: bytes | str | dict[str, Any] | object) -> dict[str, Any]:
    """Normalise an HTTP request body to a plain dict.

    Raises:
        ContractError: If *raw* is not a JSON object.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw) if raw.strip() else {}
        except (json.JSONDecodeError, ValueError) as exc:
            msg = f"Request body is not valid JSON: {exc}"
            raise ContractError(msg, stage=_INPUT_STAGE, code="INVALID_JSON") from exc
        if not isinstance(parsed, dict):
            msg = f"Request body JSON must be an object, got {type(parsed).__name__}"
            raise ContractError(msg, stage=_INPUT_STAGE, code="INVALID_INPUT_TYPE")
        return parsed
    if isinstance(raw, dict):
        return raw
    msg = f"Unexpected request body type: {type(raw).__name__}"
    raise ContractError(msg, stage=_INPUT_STAGE, code="INVALID_INPUT_TYPE")


def get_blob_service_client() -> BlobServiceClient:
    """Create a ``BlobServiceClient`` from the ``AzureWebJobsStorage`` env var.

    Raises:
        ContractError: If the environment variable is not set.
    """
    from azure.storage.blob import BlobServiceClient

    connection_string = os.environ.get("AzureWebJobsStorage", "")  # noqa: SIM112
    if not connection_string:
        msg = "AzureWebJobsStorage environment variable is not set"
        raise ContractError(msg, stage=FailureStep.CONFIG.value, code="MISSING_CONNECTION_STRING")

    return BlobServiceClient.from_connection_string(connection_string)


def build_structure_store(config: OutlineConfig) -> BlobStructureStore:
    from roof_outline.storage.blob import BlobStructureStore

    store = BlobStructureStore(get_blob_service_client(), config.output_container)
    logger.debug("Structure store ready | container=%s", config.output_container)
    return store
