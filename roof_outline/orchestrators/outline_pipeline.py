"""Acquisition coordinator — one linear outlining run per site.

Steps, in order (the failure payload names the step that failed):

1. ``config``            — credentials for detectors and imagery.
2. ``input-validation``  — request schema, site lookup, site coordinates.
3. ``fetch-image``       — best image from the provider chain.
4. ``persistence``       — store the raw image the polygons derive from.
5. ``inference``         — segmentation orchestrator (never raises).
6. ``polygon-validation`` / ``drift-check`` — drop implausible candidates.
   If every candidate is rejected, the heuristic fallback is run once and
   validated the same way before giving up with ``manual_needed``.
7. ``persistence``       — replace the site's structure set and summary.

Responses are plain dicts, ready to serialise:

- success: ``{success, method, image_ref, bbox, features}``
- manual: same shape with ``method == "manual_needed"`` and no features;
  the previous structure set is left untouched.
- failure: ``{success: False, step, message, details}``.

Apart from lazily built collaborators, the coordinator keeps no state
between calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from roof_outline.activities.fetch_imagery import fetch_best_image
from roof_outline.activities.validate_polygon import check_drift, validate_polygon
from roof_outline.core.constants import FailureStep, OutlineMethod
from roof_outline.core.exceptions import PipelineError, ValidationError
from roof_outline.models.geometry import BoundingBox, GeoPoint
from roof_outline.models.records import RoofSummary, StructureRecord
from roof_outline.models.requests import OutlineRequest
from roof_outline.orchestrators.segmentation import SegmentationOrchestrator

if TYPE_CHECKING:
    from collections.abc import Sequence

    from roof_outline.core.config import OutlineConfig
    from roof_outline.models.records import SiteRecord
    from roof_outline.models.roof import RoofPolygon
    from roof_outline.providers.base import ImageryProvider
    from roof_outline.storage.base import StructureStore

logger = logging.getLogger("roof_outline.orchestrators.outline_pipeline")


class SiteNotFoundError(ValidationError):
    """The requested site does not exist."""

    default_code = "SITE_NOT_FOUND"


class RoofOutlineCoordinator:
    """Run automated outlining for one site at a time.

    Args:
        config: Pipeline configuration.
        store: Persistence for sites, images and structure sets.
        providers: Imagery chain; built from *config* when omitted.
        orchestrator: Segmentation orchestrator; built from *config* when
            omitted.
    """

    def __init__(
        self,
        config: OutlineConfig,
        store: StructureStore,
        *,
        providers: Sequence[ImageryProvider] | None = None,
        orchestrator: SegmentationOrchestrator | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._providers = list(providers) if providers is not None else None
        self._orchestrator = orchestrator

    def outline(self, request: OutlineRequest | dict[str, Any]) -> dict[str, Any]:
        """Outline the roof of a site; never raises."""
        step = FailureStep.CONFIG
        correlation_id = request.correlation_id if isinstance(request, OutlineRequest) else ""
        try:
            self._config.require_credentials()
            providers = self._resolve_providers()
            orchestrator = self._resolve_orchestrator()

            step = FailureStep.INPUT_VALIDATION
            if not isinstance(request, OutlineRequest):
                correlation_id = str(request.get("correlation_id", ""))
                request = OutlineRequest.from_dict(request)
            site = self._store.get_site(request.site_id)
            if site is None:
                raise SiteNotFoundError(f"Site not found: {request.site_id}")
            center = _site_center(site)
            bbox = BoundingBox.around(center, request.precision.margin_deg)

            logger.info(
                "Outline started | site=%s | precision=%s | center=%.6f,%.6f",
                request.site_id,
                request.precision.value,
                center.lat,
                center.lng,
            )

            step = FailureStep.FETCH_IMAGE
            image = fetch_best_image(providers, bbox, center)

            step = FailureStep.PERSISTENCE
            image_ref = self._store.save_image(request.site_id, image)

            step = FailureStep.INFERENCE
            result = orchestrator.run(image, bbox)
            method = result.method

            survivors: list[RoofPolygon] = []
            if not result.needs_manual:
                step = FailureStep.POLYGON_VALIDATION
                valid = _plausible(result.polygons)
                step = FailureStep.DRIFT_CHECK
                survivors = _near_site(valid, center)

            if not survivors and method is OutlineMethod.AI_SEGMENTATION:
                logger.info(
                    "All AI candidates rejected, trying fallback | site=%s",
                    request.site_id,
                )
                step = FailureStep.INFERENCE
                fallback = orchestrator.run_fallback(bbox)
                method = fallback.method
                if not fallback.needs_manual:
                    step = FailureStep.POLYGON_VALIDATION
                    valid = _plausible(fallback.polygons)
                    step = FailureStep.DRIFT_CHECK
                    survivors = _near_site(valid, center)

            if not survivors:
                logger.info("Manual outline needed | site=%s", request.site_id)
                return _respond(OutlineMethod.MANUAL_NEEDED, image_ref, bbox, [])

            step = FailureStep.PERSISTENCE
            self._persist(request.site_id, survivors, method, image_ref)

        except PipelineError as exc:
            if not exc.correlation_id:
                exc.correlation_id = correlation_id
            logger.warning(
                "Outline failed | step=%s | code=%s | error=%s",
                step.value,
                exc.code,
                exc.message,
            )
            return _failure(step.value, exc.message, exc.to_error_dict())
        except Exception as exc:
            logger.exception("Outline failed unexpectedly | step=%s", step.value)
            details = {
                "category": "permanent",
                "code": "UNEXPECTED_ERROR",
                "stage": step.value,
                "message": str(exc),
                "retryable": False,
                "correlation_id": correlation_id,
            }
            return _failure(step.value, str(exc), details)

        logger.info(
            "Outline complete | site=%s | method=%s | polygons=%d",
            request.site_id,
            method.value,
            len(survivors),
        )
        return _respond(method, image_ref, bbox, survivors)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _resolve_providers(self) -> list[ImageryProvider]:
        if self._providers is None:
            from roof_outline.providers.factory import build_providers

            self._providers = build_providers(self._config)
        return self._providers

    def _resolve_orchestrator(self) -> SegmentationOrchestrator:
        if self._orchestrator is None:
            from roof_outline.detectors import HeuristicFallback, build_detectors

            self._orchestrator = SegmentationOrchestrator(
                build_detectors(self._config),
                HeuristicFallback(),
                confidence_threshold=self._config.confidence_threshold,
            )
        return self._orchestrator

    def _persist(
        self,
        site_id: str,
        polygons: list[RoofPolygon],
        method: OutlineMethod,
        image_ref: str,
    ) -> None:
        records = [StructureRecord.from_polygon(site_id, polygon) for polygon in polygons]
        self._store.replace_structures(site_id, records)
        summary = RoofSummary.from_records(
            site_id,
            records,
            method=method.value,
            image_ref=image_ref,
        )
        self._store.save_summary(summary)
        logger.info(
            "Structures persisted | site=%s | count=%d | total_area=%.0f sq ft",
            site_id,
            len(records),
            summary.total_area_sq_ft,
        )


def outline_roof(
    payload: dict[str, Any],
    *,
    config: OutlineConfig | None = None,
    store: StructureStore | None = None,
) -> dict[str, Any]:
    """Host entry point: build the collaborators from the environment and run.

    Configuration and storage wiring failures become ``config`` step
    failures instead of exceptions.
    """
    try:
        if config is None:
            from roof_outline.core.config import OutlineConfig

            config = OutlineConfig.from_env()
        if store is None:
            from roof_outline.core.ingress import build_structure_store

            store = build_structure_store(config)
    except PipelineError as exc:
        logger.warning("Outline wiring failed | code=%s | error=%s", exc.code, exc.message)
        return _failure(FailureStep.CONFIG.value, exc.message, exc.to_error_dict())
    except ValueError as exc:
        return _failure(FailureStep.CONFIG.value, str(exc), {"code": "CONFIG_PARSE_FAILED"})

    return RoofOutlineCoordinator(config, store).outline(payload)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _plausible(polygons: Sequence[RoofPolygon]) -> list[RoofPolygon]:
    kept: list[RoofPolygon] = []
    for polygon in polygons:
        verdict = validate_polygon(polygon)
        if verdict.valid:
            kept.append(polygon)
        else:
            logger.info("Candidate rejected | polygon=%s | reason=%s", polygon.id, verdict.reason)
    return kept


def _near_site(polygons: Sequence[RoofPolygon], center: GeoPoint) -> list[RoofPolygon]:
    kept: list[RoofPolygon] = []
    for polygon in polygons:
        drift = check_drift(polygon, center)
        if drift.accepted:
            kept.append(polygon)
        else:
            logger.info(
                "Candidate rejected | polygon=%s | reason=centroid drift %.1f m",
                polygon.id,
                drift.drift_m,
            )
    return kept


def _site_center(site: SiteRecord) -> GeoPoint:
    if site.latitude is None or site.longitude is None:
        raise ValidationError(
            f"Site {site.site_id} has no coordinates",
            code="SITE_MISSING_COORDINATES",
        )
    return GeoPoint(lng=site.longitude, lat=site.latitude)


def _respond(
    method: OutlineMethod,
    image_ref: str,
    bbox: BoundingBox,
    polygons: list[RoofPolygon],
) -> dict[str, Any]:
    return {
        "success": True,
        "method": method.value,
        "image_ref": image_ref,
        "bbox": bbox.to_dict(),
        "features": [polygon.to_feature() for polygon in polygons],
    }


def _failure(step: str, message: str, details: dict[str, object]) -> dict[str, Any]:
    return {
        "success": False,
        "step": step,
        "message": message,
        "details": details,
    }
