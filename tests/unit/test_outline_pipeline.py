"""End-to-end tests for the acquisition coordinator.

Detectors, fallback and imagery providers are in-process fakes; storage is
the in-memory store.  No network access.
"""

from __future__ import annotations

import os
from unittest.mock import MagicMock, patch

import pytest

from roof_outline.core.config import OutlineConfig
from roof_outline.detectors.base import Detector, DetectorError, FallbackGenerator
from roof_outline.models.imagery import ProviderConfig
from roof_outline.models.records import SiteRecord, StructureRecord
from roof_outline.orchestrators.outline_pipeline import RoofOutlineCoordinator, outline_roof
from roof_outline.orchestrators.segmentation import SegmentationOrchestrator
from roof_outline.providers.base import ImageryProvider, ProviderFetchError
from roof_outline.storage.base import StoreError
from roof_outline.storage.memory import InMemoryStructureStore

SITE = "quote-123"


class FakeProvider(ImageryProvider):
    def __init__(self, image=None, error: Exception | None = None) -> None:
        super().__init__(ProviderConfig(name="fake"))
        self._image = image
        self._error = error

    def fetch(self, bbox, center):
        if self._error is not None:
            raise self._error
        return self._image


class FixedDetector(Detector):
    def __init__(self, polygons=None, error: Exception | None = None) -> None:
        self._polygons = polygons or []
        self._error = error

    @property
    def name(self) -> str:
        return "fixed-model"

    def infer(self, image):
        if self._error is not None:
            raise self._error
        return list(self._polygons)


class FixedFallback(FallbackGenerator):
    def __init__(self, polygons=None) -> None:
        self._polygons = polygons or []

    @property
    def name(self) -> str:
        return "fixed-fallback"

    def generate(self, bbox):
        return list(self._polygons)


class FailingStore(InMemoryStructureStore):
    def __init__(self, sites, *, fail_on: str) -> None:
        super().__init__(sites)
        self._fail_on = fail_on

    def save_image(self, site_id, image):
        if self._fail_on == "image":
            raise StoreError("container unavailable")
        return super().save_image(site_id, image)

    def replace_structures(self, site_id, records):
        if self._fail_on == "structures":
            raise StoreError("container unavailable")
        super().replace_structures(site_id, records)


def _coordinator(config, store, image, detectors=(), fallback=None) -> RoofOutlineCoordinator:
    return RoofOutlineCoordinator(
        config,
        store,
        providers=[FakeProvider(image)],
        orchestrator=SegmentationOrchestrator(list(detectors), fallback),
    )


# ---------------------------------------------------------------------------
# Successful outcomes
# ---------------------------------------------------------------------------


class TestSuccessfulOutline:
    def test_heuristic_fallback_after_detector_failures(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        roof = make_rectangle(site_center, 50, 40, confidence=0.75, offset_east_m=5)
        detectors = [
            FixedDetector(error=DetectorError("m1", "HTTP 404", status_code=404)),
            FixedDetector(error=DetectorError("m2", "HTTP 503", status_code=503)),
        ]
        coordinator = _coordinator(
            configured, memory_store, aerial_image, detectors, FixedFallback([roof])
        )

        result = coordinator.outline({"site_id": SITE, "precision": "high"})

        assert result["success"] is True
        assert result["method"] == "heuristic_fallback"
        assert len(result["features"]) == 1
        feature = result["features"][0]
        assert feature["properties"]["included"] is True
        assert feature["properties"]["area_sq_ft"] == pytest.approx(2000, rel=1e-3)
        assert feature["geometry"]["type"] == "Polygon"

    def test_persists_structures_and_summary(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        roof = make_rectangle(site_center, 50, 40, confidence=0.9)
        coordinator = _coordinator(configured, memory_store, aerial_image, [FixedDetector([roof])])

        result = coordinator.outline({"site_id": SITE})

        assert result["method"] == "ai_segmentation"
        assert [r.structure_id for r in memory_store.structures[SITE]] == ["A"]
        summary = memory_store.summaries[SITE]
        assert summary.method == "ai_segmentation"
        assert summary.total_area_sq_ft == pytest.approx(2000, rel=1e-3)
        assert summary.image_ref == result["image_ref"]
        assert result["image_ref"] in memory_store.images

    def test_bbox_follows_precision(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        roof = make_rectangle(site_center, 50, 40)
        coordinator = _coordinator(configured, memory_store, aerial_image, [FixedDetector([roof])])

        high = coordinator.outline({"site_id": SITE, "precision": "high"})["bbox"]
        standard = coordinator.outline({"site_id": SITE})["bbox"]

        assert high["east"] - high["west"] == pytest.approx(0.0006)
        assert standard["east"] - standard["west"] == pytest.approx(0.001)

    def test_rerun_replaces_structure_set(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        first = [
            make_rectangle(site_center, 50, 40, polygon_id="A"),
            make_rectangle(site_center, 30, 20, polygon_id="B"),
        ]
        _coordinator(configured, memory_store, aerial_image, [FixedDetector(first)]).outline(
            {"site_id": SITE}
        )
        second = [make_rectangle(site_center, 50, 40, polygon_id="A")]
        _coordinator(configured, memory_store, aerial_image, [FixedDetector(second)]).outline(
            {"site_id": SITE}
        )
        assert len(memory_store.structures[SITE]) == 1

    def test_fallback_after_all_ai_candidates_rejected(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        neighbour = make_rectangle(site_center, 50, 40, confidence=0.95, offset_east_m=150)
        roof = make_rectangle(site_center, 50, 40, confidence=0.78)
        coordinator = _coordinator(
            configured, memory_store, aerial_image, [FixedDetector([neighbour])], FixedFallback([roof])
        )

        result = coordinator.outline({"site_id": SITE})

        assert result["method"] == "heuristic_fallback"
        assert memory_store.summaries[SITE].method == "heuristic_fallback"

    def test_implausible_candidates_dropped(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        sliver = make_rectangle(site_center, 10, 5, polygon_id="A")
        roof = make_rectangle(site_center, 50, 40, polygon_id="B")
        coordinator = _coordinator(
            configured, memory_store, aerial_image, [FixedDetector([sliver, roof])]
        )
        result = coordinator.outline({"site_id": SITE})
        assert [f["id"] for f in result["features"]] == ["B"]


class TestManualNeeded:
    def test_nothing_usable(self, configured, memory_store, aerial_image) -> None:
        coordinator = _coordinator(configured, memory_store, aerial_image, [FixedDetector([])])
        result = coordinator.outline({"site_id": SITE})

        assert result["success"] is True
        assert result["method"] == "manual_needed"
        assert result["features"] == []
        assert result["image_ref"]

    def test_previous_structures_untouched(self, configured, memory_store, aerial_image) -> None:
        previous = [StructureRecord(site_id=SITE, structure_id="A", area_sq_ft=1500.0)]
        memory_store.structures[SITE] = previous

        _coordinator(configured, memory_store, aerial_image).outline({"site_id": SITE})

        assert memory_store.structures[SITE] == previous
        assert SITE not in memory_store.summaries

    def test_rejected_fallback_is_manual(
        self, configured, memory_store, aerial_image, site_center, make_rectangle
    ) -> None:
        too_big = make_rectangle(site_center, 300, 300, confidence=0.75)
        coordinator = _coordinator(
            configured, memory_store, aerial_image, [], FixedFallback([too_big])
        )
        assert coordinator.outline({"site_id": SITE})["method"] == "manual_needed"


# ---------------------------------------------------------------------------
# Failure payloads
# ---------------------------------------------------------------------------


class TestFailures:
    def test_missing_credentials_is_config_failure(self, memory_store, aerial_image) -> None:
        result = _coordinator(OutlineConfig(), memory_store, aerial_image).outline({"site_id": SITE})
        assert result["success"] is False
        assert result["step"] == "config"
        assert result["details"]["code"] == "CONFIG_VALIDATION_FAILED"

    def test_unknown_site(self, configured, memory_store, aerial_image) -> None:
        result = _coordinator(configured, memory_store, aerial_image).outline({"site_id": "nope"})
        assert result["step"] == "input-validation"
        assert result["details"]["code"] == "SITE_NOT_FOUND"

    def test_bad_precision(self, configured, memory_store, aerial_image) -> None:
        result = _coordinator(configured, memory_store, aerial_image).outline(
            {"site_id": SITE, "precision": "ultra"}
        )
        assert result["step"] == "input-validation"
        assert result["details"]["code"] == "MODEL_VALIDATION_FAILED"

    def test_missing_site_id(self, configured, memory_store, aerial_image) -> None:
        result = _coordinator(configured, memory_store, aerial_image).outline({})
        assert result["step"] == "input-validation"

    def test_site_without_coordinates(self, configured, aerial_image) -> None:
        store = InMemoryStructureStore([SiteRecord(site_id=SITE)])
        result = _coordinator(configured, store, aerial_image).outline({"site_id": SITE})
        assert result["step"] == "input-validation"
        assert result["details"]["code"] == "SITE_MISSING_COORDINATES"

    def test_all_providers_failed(self, configured, memory_store) -> None:
        coordinator = RoofOutlineCoordinator(
            configured,
            memory_store,
            providers=[FakeProvider(error=ProviderFetchError("fake", "HTTP 500"))],
            orchestrator=SegmentationOrchestrator([], None),
        )
        result = coordinator.outline({"site_id": SITE})
        assert result["step"] == "fetch-image"
        assert result["details"]["code"] == "IMAGE_FETCH_FAILED"
        assert result["details"]["provider_errors"] == {"fake": "HTTP 500"}

    def test_no_providers(self, configured, memory_store) -> None:
        coordinator = RoofOutlineCoordinator(
            configured, memory_store, providers=[], orchestrator=SegmentationOrchestrator([], None)
        )
        assert coordinator.outline({"site_id": SITE})["step"] == "fetch-image"

    def test_image_store_failure(self, configured, site_record, aerial_image) -> None:
        store = FailingStore([site_record], fail_on="image")
        result = _coordinator(configured, store, aerial_image).outline({"site_id": SITE})
        assert result["step"] == "persistence"
        assert result["details"]["code"] == "STORE_WRITE_FAILED"

    def test_structure_store_failure(
        self, configured, site_record, aerial_image, site_center, make_rectangle
    ) -> None:
        store = FailingStore([site_record], fail_on="structures")
        roof = make_rectangle(site_center, 50, 40)
        result = _coordinator(configured, store, aerial_image, [FixedDetector([roof])]).outline(
            {"site_id": SITE}
        )
        assert result["step"] == "persistence"

    def test_correlation_id_echoed(self, configured, memory_store, aerial_image) -> None:
        result = _coordinator(configured, memory_store, aerial_image).outline(
            {"site_id": "nope", "correlation_id": "req-42"}
        )
        assert result["details"]["correlation_id"] == "req-42"

    def test_unexpected_error_reports_current_step(
        self, configured, memory_store, aerial_image
    ) -> None:
        orchestrator = MagicMock(spec=SegmentationOrchestrator)
        orchestrator.run.side_effect = RuntimeError("out of memory")
        coordinator = RoofOutlineCoordinator(
            configured, memory_store, providers=[FakeProvider(aerial_image)], orchestrator=orchestrator
        )
        result = coordinator.outline({"site_id": SITE})
        assert result["step"] == "inference"
        assert result["details"]["code"] == "UNEXPECTED_ERROR"


class TestOutlineRoof:
    def test_missing_storage_connection(self) -> None:
        env = {"HUGGINGFACE_API_TOKEN": "hf", "NEARMAP_API_KEY": "nm"}
        with patch.dict(os.environ, env, clear=True):
            result = outline_roof({"site_id": SITE})
        assert result["success"] is False
        assert result["step"] == "config"
        assert result["details"]["code"] == "MISSING_CONNECTION_STRING"

    def test_unparseable_setting(self) -> None:
        with patch.dict(os.environ, {"HTTP_TIMEOUT_S": "soon"}, clear=True):
            result = outline_roof({"site_id": SITE})
        assert result["step"] == "config"
        assert result["details"]["code"] == "CONFIG_PARSE_FAILED"

    def test_explicit_collaborators(self, memory_store) -> None:
        result = outline_roof({"site_id": SITE}, config=OutlineConfig(), store=memory_store)
        assert result["step"] == "config"
