"""Imagery alignment controller.

Moves and rotates the base image layer under a fixed drawing surface so
that it lines up with the overlay grid.  The resulting
``AlignmentTransform`` is a rendering concern of the image layer only; it
is never applied to editor pixel coordinates.

Single-step controls move by 10 px or rotate by 1°.  Press-and-hold
controls go through ``start_continuous``: the step runs once immediately,
then every 100 ms on a background repeater until ``stop_continuous``
(pointer release) or ``close`` (surface teardown).  Only one repeater
exists at a time.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from roof_outline.core.constants import (
    ALIGN_MOVE_STEP_PX,
    ALIGN_REPEAT_INTERVAL_S,
    ALIGN_ROTATE_STEP_DEG,
)
from roof_outline.models.drawing import IDENTITY_TRANSFORM, AlignmentTransform

logger = logging.getLogger("roof_outline.editor.alignment")

TransformListener = Callable[[AlignmentTransform], None]

#: Named single-step controls (screen coordinates, y grows downwards).
CONTROLS: tuple[str, ...] = ("left", "right", "up", "down", "rotate_ccw", "rotate_cw")


class _Repeater(threading.Thread):
    """Call *action* every *interval_s* seconds until cancelled."""

    def __init__(
        self,
        action: Callable[[], object],
        interval_s: float,
        on_abort: Callable[[_Repeater], None],
    ) -> None:
        super().__init__(name="alignment-repeater", daemon=True)
        self._action = action
        self._interval_s = interval_s
        self._on_abort = on_abort
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def run(self) -> None:
        while not self._cancelled.wait(self._interval_s):
            try:
                self._action()
            except Exception:
                logger.exception("Continuous alignment action failed; stopping repeater")
                self._on_abort(self)
                return


class AlignmentController:
    """Owns the alignment transform of one drawing surface.

    Args:
        transform: Initial transform (e.g. loaded with a saved drawing).
        move_step_px: Offset applied by one directional step.
        rotate_step_deg: Rotation applied by one rotate step.
        repeat_interval_s: Cadence of press-and-hold repetition.
    """

    def __init__(
        self,
        transform: AlignmentTransform = IDENTITY_TRANSFORM,
        *,
        move_step_px: float = ALIGN_MOVE_STEP_PX,
        rotate_step_deg: float = ALIGN_ROTATE_STEP_DEG,
        repeat_interval_s: float = ALIGN_REPEAT_INTERVAL_S,
    ) -> None:
        self._transform = transform
        self._move_step = move_step_px
        self._rotate_step = rotate_step_deg
        self._interval_s = repeat_interval_s
        self._listeners: list[TransformListener] = []
        self._lock = threading.Lock()
        self._repeater: _Repeater | None = None

    @property
    def transform(self) -> AlignmentTransform:
        with self._lock:
            return self._transform

    @property
    def is_repeating(self) -> bool:
        return self._repeater is not None

    def add_listener(self, listener: TransformListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TransformListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Single steps
    # ------------------------------------------------------------------

    def move_by(self, dx: float, dy: float) -> AlignmentTransform:
        return self._update(lambda t: t.moved(dx, dy))

    def rotate_by(self, d_deg: float) -> AlignmentTransform:
        return self._update(lambda t: t.rotated(d_deg))

    def reset(self) -> AlignmentTransform:
        return self._update(lambda _t: IDENTITY_TRANSFORM)

    def step(self, control: str) -> AlignmentTransform:
        """Apply one step of a named control (see ``CONTROLS``)."""
        return self.action_for(control)()

    def action_for(self, control: str) -> Callable[[], AlignmentTransform]:
        """Zero-argument callable performing one step of *control*.

        Raises:
            ValueError: If *control* is unknown.
        """
        move = self._move_step
        rotate = self._rotate_step
        actions: dict[str, Callable[[], AlignmentTransform]] = {
            "left": lambda: self.move_by(-move, 0.0),
            "right": lambda: self.move_by(move, 0.0),
            "up": lambda: self.move_by(0.0, -move),
            "down": lambda: self.move_by(0.0, move),
            "rotate_ccw": lambda: self.rotate_by(-rotate),
            "rotate_cw": lambda: self.rotate_by(rotate),
        }
        try:
            return actions[control]
        except KeyError:
            msg = f"Unknown alignment control {control!r}; expected one of {CONTROLS}"
            raise ValueError(msg) from None

    # ------------------------------------------------------------------
    # Press and hold
    # ------------------------------------------------------------------

    def start_continuous(self, action: str | Callable[[], object]) -> None:
        """Run *action* now, then repeatedly until ``stop_continuous``.

        *action* is a control name or a zero-argument callable.  A repeater
        that is already running is stopped first.
        """
        callback = self.action_for(action) if isinstance(action, str) else action
        self.stop_continuous()
        callback()
        repeater = _Repeater(callback, self._interval_s, self._repeater_aborted)
        self._repeater = repeater
        repeater.start()

    def stop_continuous(self) -> None:
        repeater = self._repeater
        if repeater is None:
            return
        self._repeater = None
        repeater.cancel()
        if repeater is not threading.current_thread():
            repeater.join(timeout=max(self._interval_s * 2, 0.5))

    def _repeater_aborted(self, repeater: _Repeater) -> None:
        if self._repeater is repeater:
            self._repeater = None

    def close(self) -> None:
        """Tear down: cancel any repeater and drop listeners."""
        self.stop_continuous()
        self._listeners.clear()

    def __enter__(self) -> AlignmentController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _update(
        self,
        change: Callable[[AlignmentTransform], AlignmentTransform],
    ) -> AlignmentTransform:
        with self._lock:
            self._transform = change(self._transform)
            updated = self._transform
        for listener in list(self._listeners):
            listener(updated)
        return updated
