"""Save drawing activity — persist an operator drawing explicitly.

Builds a ``DrawingRecord`` from the editor's edges and the alignment
transform in effect, and writes it through the structure store.  Edges
and transform always travel together: pixel coordinates are meaningless
without the transform they were drawn against.

Lengths are recomputed from the endpoints with the drawing's scale, so a
stale ``length_ft`` coming from a client never reaches storage.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from roof_outline.core.constants import DEFAULT_PIXELS_PER_FOOT
from roof_outline.models.drawing import IDENTITY_TRANSFORM, AlignmentTransform, Edge, edge_totals
from roof_outline.models.records import DrawingRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from roof_outline.storage.base import StructureStore

logger = logging.getLogger("roof_outline.activities.save_drawing")


def save_drawing(
    site_id: str,
    edges: Iterable[Edge],
    transform: AlignmentTransform = IDENTITY_TRANSFORM,
    *,
    store: StructureStore,
    pixels_per_foot: float | None = None,
) -> dict[str, object]:
    """Persist a drawing and return a summary of what was written.

    Args:
        site_id: Site the drawing belongs to.
        edges: Committed edges, in drawing order.
        transform: Alignment transform in effect at save time.
        store: Destination store.
        pixels_per_foot: Drawing scale; the default scale when unset.

    Returns:
        ``{"drawing_ref", "edge_count", "totals_ft"}``.

    Raises:
        StoreError: If the write fails.
    """
    scale = pixels_per_foot if pixels_per_foot and pixels_per_foot > 0 else DEFAULT_PIXELS_PER_FOOT
    normalised = [
        Edge.between(e.start, e.end, pixels_per_foot=scale, edge_type=e.edge_type, edge_id=e.id)
        for e in edges
    ]
    totals = edge_totals(normalised)

    record = DrawingRecord(
        site_id=site_id,
        edges=[edge.to_dict() for edge in normalised],
        transform=transform.to_dict(),
        pixels_per_foot=scale,
        totals_ft=totals,
    )
    drawing_ref = store.save_drawing(record)

    logger.info(
        "Drawing saved | site=%s | edges=%d | ref=%s",
        site_id,
        len(normalised),
        drawing_ref,
    )
    return {
        "drawing_ref": drawing_ref,
        "edge_count": len(normalised),
        "totals_ft": totals,
    }
