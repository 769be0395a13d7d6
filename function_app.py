"""Azure Functions entry point — Roof Outline Acquisition.

This module registers the HTTP functions using the Python v2 programming
model.

All business logic lives in the roof_outline package. This file is purely
the wiring layer between Azure Functions bindings and application code.
"""

from __future__ import annotations

import json
import logging

import azure.functions as func

from roof_outline.activities.save_drawing import save_drawing
from roof_outline.core.config import OutlineConfig
from roof_outline.core.constants import FailureStep
from roof_outline.core.exceptions import PipelineError
from roof_outline.core.ingress import build_structure_store, deserialize_request_body
from roof_outline.models.requests import DrawingRequest
from roof_outline.orchestrators.outline_pipeline import outline_roof
from roof_outline.storage.base import StructureStore

app = func.FunctionApp(http_auth_level=func.AuthLevel.FUNCTION)

logger = logging.getLogger("roof_outline.function_app")

_JSON = "application/json"


def _json_response(body: dict[str, object], status_code: int) -> func.HttpResponse:
    return func.HttpResponse(json.dumps(body), status_code=status_code, mimetype=_JSON)


def _error_response(exc: PipelineError, status_code: int) -> func.HttpResponse:
    body = {
        "success": False,
        "step": exc.stage,
        "message": exc.message,
        "details": exc.to_error_dict(),
    }
    return _json_response(body, status_code)


def _load_store() -> tuple[OutlineConfig, StructureStore]:
    """Configuration and structure store for the drawing routes.

    Raises:
        PipelineError: If the configuration is invalid or unparsable, or
            the store cannot be built.
    """
    try:
        config = OutlineConfig.from_env()
        return config, build_structure_store(config)
    except PipelineError:
        raise
    except ValueError as exc:
        msg = f"Configuration could not be parsed: {exc}"
        raise PipelineError(msg, stage=FailureStep.CONFIG.value, code="CONFIG_PARSE_FAILED") from exc


def outline_status_code(result: dict[str, object]) -> int:
    """HTTP status for a coordinator response."""
    if result.get("success"):
        return 200
    if result.get("step") == FailureStep.INPUT_VALIDATION.value:
        details = result.get("details")
        if isinstance(details, dict) and details.get("code") == "SITE_NOT_FOUND":
            return 404
        return 400
    return 500


# ---------------------------------------------------------------------------
# HTTP: automated outline
# ---------------------------------------------------------------------------


@app.function_name("roof_outline")
@app.route(route="roof/outline", methods=["POST"])
def roof_outline_http(req: func.HttpRequest) -> func.HttpResponse:
    """Run automated roof outlining for ``{site_id, precision}``.

    Always answers with the coordinator's JSON payload; ``manual_needed``
    is a 200 like any other success.
    """
    try:
        payload = deserialize_request_body(req.get_body())
    except PipelineError as exc:
        return _error_response(exc, 400)

    payload.setdefault("correlation_id", req.headers.get("x-correlation-id", ""))
    result = outline_roof(payload)

    logger.info(
        "Outline request handled | site=%s | success=%s | method=%s | step=%s",
        payload.get("site_id", ""),
        result.get("success"),
        result.get("method", "-"),
        result.get("step", "-"),
    )
    return _json_response(result, outline_status_code(result))


# ---------------------------------------------------------------------------
# HTTP: operator drawings
# ---------------------------------------------------------------------------


@app.function_name("roof_drawing_save")
@app.route(route="roof/drawing", methods=["POST"])
def roof_drawing_save_http(req: func.HttpRequest) -> func.HttpResponse:
    """Persist an operator drawing (edges + alignment transform)."""
    try:
        request = DrawingRequest.from_dict(deserialize_request_body(req.get_body()))
    except PipelineError as exc:
        return _error_response(exc, 400)

    try:
        config, store = _load_store()
        result = save_drawing(
            request.site_id,
            request.edges,
            request.transform,
            store=store,
            pixels_per_foot=request.pixels_per_foot or config.default_pixels_per_foot,
        )
    except PipelineError as exc:
        logger.warning("Drawing save failed | site=%s | code=%s", request.site_id, exc.code)
        return _error_response(exc, 500)

    return _json_response({"success": True, **result}, 200)


@app.function_name("roof_drawing_get")
@app.route(route="roof/drawing/{site_id}", methods=["GET"])
def roof_drawing_get_http(req: func.HttpRequest) -> func.HttpResponse:
    """Return the last saved drawing of a site."""
    site_id = req.route_params.get("site_id", "")
    if not site_id:
        return func.HttpResponse("Missing site_id", status_code=400)

    try:
        _config, store = _load_store()
        drawing = store.get_drawing(site_id)
    except PipelineError as exc:
        logger.warning("Drawing load failed | site=%s | code=%s", site_id, exc.code)
        return _error_response(exc, 500)

    if drawing is None:
        return func.HttpResponse("Drawing not found", status_code=404)
    return func.HttpResponse(drawing.to_json(), status_code=200, mimetype=_JSON)
