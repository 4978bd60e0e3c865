"""Pytest configuration and shared fixtures."""

import pytest

from ocr_tracking.geometry import BoundingBox
from ocr_tracking.models import Observation
from ocr_tracking.tracker import TextTracker


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    """Clock starting at t=0."""
    return FakeClock()


@pytest.fixture
def make_obs():
    """Factory for observations with a default box."""

    def _make(
        text: str,
        confidence: float = 0.9,
        box: tuple[float, float, float, float] = (0.1, 0.1, 0.2, 0.05),
        language: str | None = None,
        is_vertical: bool = False,
    ) -> Observation:
        return Observation(
            text=text,
            confidence=confidence,
            bounding_box=BoundingBox(*box),
            language=language,
            is_vertical=is_vertical,
        )

    return _make


@pytest.fixture
def tracker(clock):
    """Standard-mode tracker on the fake clock."""
    return TextTracker(clock=clock)


@pytest.fixture
def step(clock):
    """Advance the clock one frame (0.1 s) and run a tracker update."""

    def _step(tracker: TextTracker, observations, dt: float = 0.1):
        clock.advance(dt)
        return tracker.update(observations)

    return _step
