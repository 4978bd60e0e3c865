"""On-screen/off-screen hysteresis and fade-out suspicion."""

from ocr_tracking.config import (
    AGING_SUSPICION_FRAMES,
    AGING_SUSPICION_PER_FRAME,
    MIN_VISIBLE_FRACTION,
    OFF_SCREEN_FLIP_FRAMES,
    ON_SCREEN_FLIP_FRAMES,
    SUSPICION_FULL_SECONDS,
    SUSPICION_PER_FRAME,
)
from ocr_tracking.geometry import BoundingBox
from ocr_tracking.types import TrackedText


def is_box_on_screen(box: BoundingBox, margin: float = 0.0) -> bool:
    """Check if enough of a box lies inside the screen rect.

    Args:
        box: Box in normalized coordinates
        margin: Growth of the screen rect per side (negative contracts it)

    Returns:
        True if at least 10% of the box area is inside the region
    """
    return box.visible_fraction(BoundingBox.screen(margin)) >= MIN_VISIBLE_FRACTION


def update_visibility(tracked: TrackedText, margin: float, now: float):
    """Feed one visibility reading of the smoothed box into the hysteresis.

    Off-screen readings raise `suspicion_level` from both the off-screen
    streak and the time since the text was last matched; an on-screen
    reading resets it. Texts that stay in bounds but go unmatched for a long
    time accrue suspicion as well.
    """
    if is_box_on_screen(tracked.smoothed_box, margin):
        tracked.consecutive_on_screen_frames += 1
        tracked.consecutive_off_screen_frames = 0
        if not tracked.is_on_screen and tracked.consecutive_on_screen_frames >= ON_SCREEN_FLIP_FRAMES:
            tracked.is_on_screen = True
        tracked.suspicion_level = 0.0
    else:
        tracked.consecutive_off_screen_frames += 1
        tracked.consecutive_on_screen_frames = 0
        if tracked.is_on_screen and tracked.consecutive_off_screen_frames >= OFF_SCREEN_FLIP_FRAMES:
            tracked.is_on_screen = False
        frame_suspicion = tracked.consecutive_off_screen_frames * SUSPICION_PER_FRAME
        time_suspicion = max(0.0, now - tracked.last_seen) / SUSPICION_FULL_SECONDS
        tracked.suspicion_level = min(1.0, max(frame_suspicion, time_suspicion))

    if tracked.frames_since_last_seen > AGING_SUSPICION_FRAMES:
        aging = (tracked.frames_since_last_seen - AGING_SUSPICION_FRAMES) * AGING_SUSPICION_PER_FRAME
        tracked.suspicion_level = min(1.0, max(tracked.suspicion_level, aging))


def force_off_screen(tracked: TrackedText):
    """Treat a text OCR stopped detecting as having left the view."""
    tracked.is_on_screen = False
    tracked.consecutive_on_screen_frames = 0
    tracked.consecutive_off_screen_frames += 1
    tracked.suspicion_level = 1.0
