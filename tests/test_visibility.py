"""Tests for on-screen hysteresis and suspicion."""

import pytest

from ocr_tracking.geometry import BoundingBox
from ocr_tracking.types import TrackedText
from ocr_tracking.visibility import force_off_screen, is_box_on_screen, update_visibility

ON_SCREEN = BoundingBox(0.1, 0.1, 0.2, 0.05)
OFF_SCREEN = BoundingBox(1.5, 0.1, 0.2, 0.05)


def make_tracked(box: BoundingBox, **kwargs) -> TrackedText:
    return TrackedText(
        id=1,
        text="Hello",
        bounding_box=box,
        smoothed_box=box,
        confidence=0.9,
        last_seen=0.0,
        detected_at=0.0,
        source_language="en",
        **kwargs,
    )


@pytest.mark.unit
class TestIsBoxOnScreen:
    """Tests for the visible-area check."""

    def test_inside(self):
        assert is_box_on_screen(ON_SCREEN, -0.05)

    def test_outside(self):
        assert not is_box_on_screen(OFF_SCREEN, 0.0)

    def test_partially_visible(self):
        """A quarter of the box inside the contracted screen still counts."""
        assert is_box_on_screen(BoundingBox(0.9, 0.5, 0.2, 0.1), -0.05)

    def test_sliver_is_not_visible(self):
        assert not is_box_on_screen(BoundingBox(0.96, 0.5, 0.2, 0.1), -0.05)

    def test_margin_matters(self):
        box = BoundingBox(0.97, 0.5, 0.2, 0.1)
        assert is_box_on_screen(box, 0.0)
        assert not is_box_on_screen(box, -0.05)


@pytest.mark.unit
class TestUpdateVisibility:
    """Tests for the hysteresis state."""

    def test_single_off_screen_reading_flips(self):
        tracked = make_tracked(OFF_SCREEN)
        update_visibility(tracked, margin=-0.05, now=0.0)
        assert not tracked.is_on_screen
        assert tracked.consecutive_off_screen_frames == 1
        assert tracked.suspicion_level == pytest.approx(0.1)

    def test_single_on_screen_reading_flips_back(self):
        tracked = make_tracked(ON_SCREEN, is_on_screen=False, suspicion_level=0.8)
        update_visibility(tracked, margin=-0.05, now=0.0)
        assert tracked.is_on_screen
        assert tracked.suspicion_level == 0.0
        assert tracked.consecutive_off_screen_frames == 0

    def test_suspicion_grows_with_frames(self):
        tracked = make_tracked(OFF_SCREEN)
        for _ in range(4):
            update_visibility(tracked, margin=-0.05, now=0.0)
        assert tracked.suspicion_level == pytest.approx(0.4)

    def test_suspicion_grows_with_time(self):
        """Two seconds without a match is full suspicion."""
        tracked = make_tracked(OFF_SCREEN)
        update_visibility(tracked, margin=-0.05, now=1.0)
        assert tracked.suspicion_level == pytest.approx(0.5)
        update_visibility(tracked, margin=-0.05, now=5.0)
        assert tracked.suspicion_level == 1.0

    def test_long_unmatched_in_bounds(self):
        """In-bounds texts unmatched for over 30 frames accrue suspicion."""
        tracked = make_tracked(ON_SCREEN, frames_since_last_seen=40)
        update_visibility(tracked, margin=-0.05, now=0.0)
        assert tracked.is_on_screen
        assert tracked.suspicion_level == pytest.approx(0.3)

    def test_force_off_screen(self):
        tracked = make_tracked(ON_SCREEN)
        force_off_screen(tracked)
        assert not tracked.is_on_screen
        assert tracked.suspicion_level == 1.0
