"""Tests for the imagery alignment controller."""

from __future__ import annotations

import threading
import time

import pytest

from roof_outline.editor.alignment import AlignmentController
from roof_outline.models.drawing import IDENTITY_TRANSFORM, AlignmentTransform


class TestSingleSteps:
    @pytest.mark.parametrize(
        ("control", "expected"),
        [
            ("left", AlignmentTransform(offset_x=-10)),
            ("right", AlignmentTransform(offset_x=10)),
            ("up", AlignmentTransform(offset_y=-10)),
            ("down", AlignmentTransform(offset_y=10)),
            ("rotate_ccw", AlignmentTransform(rotation_degrees=-1)),
            ("rotate_cw", AlignmentTransform(rotation_degrees=1)),
        ],
    )
    def test_step(self, control: str, expected: AlignmentTransform) -> None:
        controller = AlignmentController()
        assert controller.step(control) == expected
        assert controller.transform == expected

    def test_steps_accumulate(self) -> None:
        controller = AlignmentController()
        controller.step("right")
        controller.step("right")
        controller.step("rotate_cw")
        assert controller.transform == AlignmentTransform(offset_x=20, rotation_degrees=1)

    def test_reset(self) -> None:
        controller = AlignmentController(AlignmentTransform(offset_x=5, rotation_degrees=3))
        assert controller.reset() == IDENTITY_TRANSFORM
        assert controller.transform.is_identity

    def test_custom_step_sizes(self) -> None:
        controller = AlignmentController(move_step_px=2, rotate_step_deg=0.5)
        controller.step("down")
        controller.step("rotate_cw")
        assert controller.transform == AlignmentTransform(offset_y=2, rotation_degrees=0.5)

    def test_unknown_control(self) -> None:
        with pytest.raises(ValueError, match="Unknown alignment control"):
            AlignmentController().step("spin")


class TestListeners:
    def test_listener_receives_updates(self) -> None:
        seen: list[AlignmentTransform] = []
        controller = AlignmentController()
        controller.add_listener(seen.append)
        controller.move_by(3, 4)
        controller.rotate_by(2)
        assert seen == [
            AlignmentTransform(offset_x=3, offset_y=4),
            AlignmentTransform(offset_x=3, offset_y=4, rotation_degrees=2),
        ]

    def test_remove_listener(self) -> None:
        seen: list[AlignmentTransform] = []
        controller = AlignmentController()
        controller.add_listener(seen.append)
        controller.remove_listener(seen.append)
        controller.step("left")
        assert seen == []


class TestContinuous:
    def test_press_and_hold_repeats_until_release(self) -> None:
        controller = AlignmentController(repeat_interval_s=0.01)
        calls = 0
        repeated = threading.Event()

        def listener(_transform: AlignmentTransform) -> None:
            nonlocal calls
            calls += 1
            if calls >= 3:
                repeated.set()

        controller.add_listener(listener)
        controller.start_continuous("right")
        assert controller.is_repeating
        assert repeated.wait(timeout=2.0)
        controller.stop_continuous()

        assert not controller.is_repeating
        settled = controller.transform
        assert settled.offset_x >= 30
        assert controller.transform == settled

    def test_first_step_is_immediate(self) -> None:
        controller = AlignmentController(repeat_interval_s=10)
        controller.start_continuous("rotate_cw")
        try:
            assert controller.transform.rotation_degrees == 1
        finally:
            controller.stop_continuous()

    def test_single_repeater(self) -> None:
        controller = AlignmentController(repeat_interval_s=10)
        controller.start_continuous("left")
        first = controller._repeater
        controller.start_continuous("right")
        try:
            assert controller._repeater is not first
            assert not first.is_alive()
        finally:
            controller.close()

    def test_callable_action(self) -> None:
        controller = AlignmentController(repeat_interval_s=10)
        hits: list[int] = []
        controller.start_continuous(lambda: hits.append(1))
        controller.stop_continuous()
        assert hits == [1]

    def test_stop_without_start(self) -> None:
        AlignmentController().stop_continuous()

    def test_close_stops_and_detaches(self) -> None:
        seen: list[AlignmentTransform] = []
        with AlignmentController(repeat_interval_s=10) as controller:
            controller.add_listener(seen.append)
            controller.start_continuous("up")
        assert not controller.is_repeating
        controller.step("down")
        assert len(seen) == 1

    def test_failing_action_stops_repeating(self) -> None:
        controller = AlignmentController(repeat_interval_s=0.01)
        calls: list[int] = []

        def flaky() -> None:
            calls.append(1)
            if len(calls) > 1:
                raise RuntimeError("surface gone")

        controller.start_continuous(flaky)
        deadline = time.monotonic() + 2.0
        while controller.is_repeating and time.monotonic() < deadline:
            time.sleep(0.01)

        assert not controller.is_repeating
        assert len(calls) == 2
        controller.stop_continuous()
