"""Tests for the overlay drag/scale state machine."""

import pytest

from photostrip.transform import (
    IDENTITY,
    MAX_SCALE,
    MIN_SCALE,
    OverlayTransform,
    TransformTracker,
    clamp_scale,
)


def _tracker(**kwargs):
    tracker = TransformTracker(**kwargs)
    tracker.overlay_present = True
    return tracker


class TestDrag:
    def test_begin_requires_overlay(self):
        tracker = TransformTracker()
        assert tracker.begin(10, 10) is False
        assert not tracker.dragging
        tracker.update(50, 50)
        assert tracker.transform == IDENTITY

    def test_update_applies_delta_from_anchor(self):
        tracker = _tracker()
        assert tracker.begin(100, 100) is True
        tracker.update(130, 90)
        assert tracker.transform == OverlayTransform(30, -10, 1.0)
        # Deltas are measured from the anchor, not the last update.
        tracker.update(105, 110)
        assert tracker.transform == OverlayTransform(5, 10, 1.0)

    def test_second_drag_continues_from_previous_position(self):
        tracker = _tracker()
        tracker.begin(0, 0)
        tracker.update(20, 20)
        tracker.end()
        tracker.begin(500, 500)
        tracker.update(510, 490)
        assert tracker.transform == OverlayTransform(30, 10, 1.0)

    def test_drag_keeps_scale(self):
        tracker = _tracker()
        tracker.set_scale(1.5)
        tracker.begin(0, 0)
        tracker.update(4, 4)
        assert tracker.transform.scale == 1.5

    def test_update_without_drag_is_noop(self):
        tracker = _tracker()
        tracker.update(99, 99)
        assert tracker.transform == IDENTITY

    def test_end_is_idempotent(self):
        tracker = _tracker()
        tracker.end()
        tracker.begin(1, 1)
        tracker.end()
        tracker.end()
        assert not tracker.dragging
        tracker.update(50, 50)
        assert tracker.transform == IDENTITY


class TestScale:
    def test_clamps_high(self):
        tracker = _tracker()
        assert tracker.set_scale(3.0) == 2.0
        assert tracker.transform.scale == MAX_SCALE

    def test_clamps_negative(self):
        tracker = _tracker()
        assert tracker.set_scale(-1) == 0.5
        assert tracker.transform.scale == MIN_SCALE

    def test_in_range_unchanged(self):
        assert clamp_scale(1.3) == 1.3

    def test_scale_during_drag(self):
        tracker = _tracker()
        tracker.begin(0, 0)
        tracker.set_scale(0.8)
        assert tracker.dragging
        assert tracker.transform.scale == 0.8

    def test_works_without_overlay(self):
        tracker = TransformTracker()
        tracker.set_scale(1.2)
        assert tracker.transform.scale == 1.2


class TestSnapshot:
    def test_snapshot_is_unaffected_by_later_moves(self):
        tracker = _tracker()
        tracker.begin(0, 0)
        tracker.update(10, 10)
        snap = tracker.snapshot()
        tracker.update(80, 80)
        assert snap == OverlayTransform(10, 10, 1.0)

    def test_snapshot_is_frozen(self):
        with pytest.raises(AttributeError):
            IDENTITY.scale = 2.0


class TestContainerWidth:
    def test_resize_rescales_translation(self):
        tracker = _tracker(container_width=400)
        tracker.begin(0, 0)
        tracker.update(40, -20)
        tracker.end()
        tracker.set_container_width(800)
        assert tracker.transform == OverlayTransform(80, -40, 1.0)
        assert tracker.container_width == 800

    def test_first_width_does_not_rescale(self):
        tracker = _tracker()
        tracker.begin(0, 0)
        tracker.update(40, 40)
        tracker.set_container_width(300)
        assert tracker.transform.translate_x == 40

    def test_resize_ends_drag(self):
        tracker = _tracker(container_width=400)
        tracker.begin(0, 0)
        tracker.set_container_width(200)
        assert not tracker.dragging

    def test_invalid_width(self):
        with pytest.raises(ValueError, match="Container width"):
            TransformTracker().set_container_width(0)


class TestReset:
    def test_reset_returns_identity_and_drops_drag(self):
        tracker = _tracker()
        tracker.set_scale(2.0)
        tracker.begin(0, 0)
        tracker.update(5, 5)
        tracker.reset()
        assert tracker.transform == IDENTITY
        assert not tracker.dragging

    def test_preview_css(self):
        tracker = _tracker()
        tracker.begin(0, 0)
        tracker.update(12, -3.5)
        tracker.set_scale(1.25)
        assert tracker.preview_css() == "translate(12px, -3.5px) scale(1.25)"
