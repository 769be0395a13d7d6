"""Interactive editor session — one per drawing surface.

A small state machine over pixel-space edges:

- ``IDLE``: no line in progress.  ``click`` fixes a start point and
  enters ``DRAWING``.
- ``DRAWING``: one endpoint fixed, the other tracks the pointer (snapped
  preview).  ``click`` commits a new edge through the snapping engine and
  returns to ``IDLE``; ``double_click`` or ``cancel_current_line``
  discards it.
- ``DRAGGING``: an existing endpoint follows the pointer until
  ``end_drag``.  The whole gesture is one history entry.

History is an arena of immutable line-list snapshots with a cursor.  Every
mutation truncates the snapshots after the cursor (no branching), appends
the new list and advances the cursor; undo/redo only move the cursor.

Invalid operations (completing a zero-length line, deleting with no
lines, undo at the start of history, ...) are no-ops.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from roof_outline.core.constants import DEFAULT_PIXELS_PER_FOOT, ENDPOINT_HIT_RADIUS_PX
from roof_outline.editor.snapping import snap_endpoint
from roof_outline.models.drawing import Edge, EdgeType, edge_totals, pixel_distance

if TYPE_CHECKING:
    from roof_outline.editor.frame import PixelFrame
    from roof_outline.models.geometry import PixelPoint
    from roof_outline.models.roof import RoofPolygon

logger = logging.getLogger("roof_outline.editor.session")

#: Focus targets in which keyboard shortcuts are ignored.
TEXT_ENTRY_TAGS = frozenset({"INPUT", "TEXTAREA", "SELECT"})

ChangeListener = Callable[[tuple[Edge, ...]], None]


class EditorState(enum.Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    DRAGGING = "dragging"


@dataclass(frozen=True, slots=True)
class InProgressLine:
    start: PixelPoint
    end: PixelPoint


@dataclass(frozen=True, slots=True)
class _Drag:
    edge_id: str
    which: str
    lines: tuple[Edge, ...]


class EditorSession:
    """Drawing state and linear undo/redo history for one surface.

    Args:
        pixels_per_foot: Scale used for every edge length.
        snap_enabled: Initial state of the snapping toggle.
        lines: Initial committed lines (history starts here).
        on_change: Called with the visible lines after every change.
    """

    def __init__(
        self,
        *,
        pixels_per_foot: float = DEFAULT_PIXELS_PER_FOOT,
        snap_enabled: bool = True,
        lines: Iterable[Edge] = (),
        on_change: ChangeListener | None = None,
    ) -> None:
        self.pixels_per_foot = pixels_per_foot
        self.snap_enabled = snap_enabled
        self.active_edge_type = EdgeType.UNLABELED
        self._history: list[tuple[Edge, ...]] = [tuple(lines)]
        self._cursor = 0
        self._in_progress: InProgressLine | None = None
        self._drag: _Drag | None = None
        self._on_change = on_change

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> EditorState:
        if self._drag is not None:
            return EditorState.DRAGGING
        if self._in_progress is not None:
            return EditorState.DRAWING
        return EditorState.IDLE

    @property
    def lines(self) -> tuple[Edge, ...]:
        """Visible lines; includes the uncommitted effect of a drag."""
        if self._drag is not None:
            return self._drag.lines
        return self._history[self._cursor]

    @property
    def committed_lines(self) -> tuple[Edge, ...]:
        return self._history[self._cursor]

    @property
    def in_progress(self) -> InProgressLine | None:
        return self._in_progress

    @property
    def can_undo(self) -> bool:
        return self._drag is None and self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._drag is None and self._cursor < len(self._history) - 1

    def edge_totals(self) -> dict[str, float]:
        """Total length per edge type of the visible lines."""
        return edge_totals(self.lines)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def click(self, point: PixelPoint) -> Edge | None:
        """Start a line, or complete the current one.

        Returns:
            The committed edge when a line was completed, else ``None``.
        """
        if self._drag is not None:
            return None

        if self._in_progress is None:
            self._in_progress = InProgressLine(start=point, end=point)
            return None

        start = self._in_progress.start
        end = snap_endpoint(start, point, self.committed_lines, self.snap_enabled)
        if pixel_distance(start, end) == 0:
            return None

        edge = Edge.between(
            start,
            end,
            pixels_per_foot=self.pixels_per_foot,
            edge_type=self.active_edge_type,
        )
        self._in_progress = None
        self._commit((*self.committed_lines, edge))
        logger.debug("Line added | id=%s | length=%.1f ft", edge.id, edge.length_ft)
        return edge

    def pointer_move(self, point: PixelPoint) -> None:
        """Track the pointer: preview the current line or move a dragged endpoint."""
        if self._drag is not None:
            drag = self._drag
            updated = tuple(
                edge.with_endpoint(drag.which, point, pixels_per_foot=self.pixels_per_foot)
                if edge.id == drag.edge_id
                else edge
                for edge in drag.lines
            )
            self._drag = replace(drag, lines=updated)
            self._notify()
            return

        if self._in_progress is not None:
            start = self._in_progress.start
            end = snap_endpoint(start, point, self.committed_lines, self.snap_enabled)
            self._in_progress = InProgressLine(start=start, end=end)

    def double_click(self) -> None:
        self.cancel_current_line()

    def cancel_current_line(self) -> None:
        if self._in_progress is not None:
            self._in_progress = None
            logger.debug("Line cancelled")

    def toggle_snap(self) -> bool:
        self.snap_enabled = not self.snap_enabled
        return self.snap_enabled

    # ------------------------------------------------------------------
    # Line list mutations
    # ------------------------------------------------------------------

    def add_line(self, edge: Edge) -> None:
        if self._drag is None:
            self._commit((*self.committed_lines, edge))

    def delete_last_line(self) -> None:
        if self._drag is None and self.committed_lines:
            self._commit(self.committed_lines[:-1])

    def delete_line(self, edge_id: str) -> None:
        if self._drag is not None:
            return
        remaining = tuple(edge for edge in self.committed_lines if edge.id != edge_id)
        if len(remaining) != len(self.committed_lines):
            self._commit(remaining)

    def clear_all(self) -> None:
        self.cancel_current_line()
        if self._drag is None and self.committed_lines:
            self._commit(())

    def set_edge_type(self, edge_id: str, edge_type: EdgeType) -> None:
        """Classify an existing line."""
        if self._drag is not None:
            return
        current = self.committed_lines
        updated = tuple(
            edge.with_edge_type(edge_type) if edge.id == edge_id else edge for edge in current
        )
        if updated != current:
            self._commit(updated)

    def load_lines(self, edges: Iterable[Edge]) -> None:
        """Replace all lines (e.g. seeding from a detected outline) as one step."""
        if self._drag is not None:
            return
        self.cancel_current_line()
        self._commit(tuple(edges))

    def load_polygon(self, polygon: RoofPolygon, frame: PixelFrame) -> None:
        """Seed the drawing with the sides of a detected polygon."""
        self.load_lines(frame.polygon_to_edges(polygon, pixels_per_foot=self.pixels_per_foot))

    # ------------------------------------------------------------------
    # Endpoint dragging
    # ------------------------------------------------------------------

    def press_endpoint(self, point: PixelPoint, radius: float = ENDPOINT_HIT_RADIUS_PX) -> bool:
        """Begin dragging the endpoint nearest *point*, if one is within *radius*.

        The most recently drawn line wins when endpoints overlap.
        """
        for edge in reversed(self.committed_lines):
            for which, endpoint in (("end", edge.end), ("start", edge.start)):
                if pixel_distance(endpoint, point) <= radius:
                    return self.begin_drag(edge.id, which)
        return False

    def begin_drag(self, edge_id: str, which: str) -> bool:
        if self._drag is not None or self._in_progress is not None:
            return False
        if which not in {"start", "end"}:
            return False
        if not any(edge.id == edge_id for edge in self.committed_lines):
            return False
        self._drag = _Drag(edge_id=edge_id, which=which, lines=self.committed_lines)
        return True

    def end_drag(self) -> None:
        """Finish the drag; its net effect becomes a single history entry."""
        if self._drag is None:
            return
        dragged = self._drag.lines
        self._drag = None
        if dragged != self.committed_lines:
            self._commit(dragged)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._cursor -= 1
        self._notify()
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._cursor += 1
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key(self, key: str, target_tag: str = "") -> bool:
        """Apply a keyboard shortcut; returns whether it was consumed.

        ``Delete`` removes the last line and ``Escape`` cancels the current
        one.  Both are ignored while focus is in a text entry control.
        """
        if target_tag.upper() in TEXT_ENTRY_TAGS:
            return False
        if key == "Delete":
            had_lines = bool(self.committed_lines)
            self.delete_last_line()
            return had_lines
        if key == "Escape":
            was_drawing = self._in_progress is not None
            self.cancel_current_line()
            return was_drawing
        return False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, lines: tuple[Edge, ...]) -> None:
        del self._history[self._cursor + 1 :]
        self._history.append(lines)
        self._cursor += 1
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.lines)
