"""Tests for the drawing save activity."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from roof_outline.activities.save_drawing import save_drawing
from roof_outline.models.drawing import IDENTITY_TRANSFORM, AlignmentTransform, Edge, EdgeType
from roof_outline.models.geometry import PixelPoint
from roof_outline.storage.base import StoreError

SITE_ID = "quote-123"


def _edge(edge_id: str, length_px: float, edge_type: EdgeType, stale_length: float = 999.0) -> Edge:
    return Edge(
        id=edge_id,
        start=PixelPoint(0, 0),
        end=PixelPoint(length_px, 0),
        length_ft=stale_length,
        edge_type=edge_type,
    )


class TestSaveDrawing:
    def test_persists_edges_and_transform_together(self, memory_store) -> None:
        transform = AlignmentTransform(offset_x=10, offset_y=-20, rotation_degrees=1)
        result = save_drawing(
            SITE_ID,
            [_edge("e1", 100, EdgeType.EAVE), _edge("e2", 250, EdgeType.RIDGE)],
            transform,
            store=memory_store,
        )

        assert result["drawing_ref"] == "sites/quote-123/drawing.json"
        assert result["edge_count"] == 2

        record = memory_store.get_drawing(SITE_ID)
        assert record.transform == {"offset_x": 10, "offset_y": -20, "rotation_degrees": 1}
        assert [e["id"] for e in record.edges] == ["e1", "e2"]

    def test_lengths_recomputed_from_endpoints(self, memory_store) -> None:
        save_drawing(SITE_ID, [_edge("e1", 100, EdgeType.EAVE)], store=memory_store)

        record = memory_store.get_drawing(SITE_ID)
        assert record.edges[0]["length_ft"] == 10.0
        assert record.totals_ft == {"eave": 10.0}

    def test_custom_scale(self, memory_store) -> None:
        result = save_drawing(
            SITE_ID,
            [_edge("e1", 100, EdgeType.EAVE), _edge("e2", 60, EdgeType.EAVE)],
            store=memory_store,
            pixels_per_foot=20,
        )

        assert result["totals_ft"] == {"eave": 8.0}
        assert memory_store.get_drawing(SITE_ID).pixels_per_foot == 20

    @pytest.mark.parametrize("scale", [None, 0, -5])
    def test_invalid_scale_uses_default(self, memory_store, scale) -> None:
        result = save_drawing(
            SITE_ID, [_edge("e1", 100, EdgeType.HIP)], store=memory_store, pixels_per_foot=scale
        )
        assert result["totals_ft"] == {"hip": 10.0}

    def test_empty_drawing(self, memory_store) -> None:
        result = save_drawing(SITE_ID, [], IDENTITY_TRANSFORM, store=memory_store)

        assert result["edge_count"] == 0
        assert result["totals_ft"] == {}
        assert memory_store.get_drawing(SITE_ID).edges == []

    def test_resave_overwrites(self, memory_store) -> None:
        save_drawing(SITE_ID, [_edge("e1", 100, EdgeType.EAVE)], store=memory_store)
        save_drawing(SITE_ID, [_edge("e9", 50, EdgeType.WALL)], store=memory_store)

        assert [e["id"] for e in memory_store.get_drawing(SITE_ID).edges] == ["e9"]

    def test_store_failure_propagates(self) -> None:
        store = MagicMock()
        store.save_drawing.side_effect = StoreError("disk full")

        with pytest.raises(StoreError, match="disk full"):
            save_drawing(SITE_ID, [_edge("e1", 100, EdgeType.EAVE)], store=store)
