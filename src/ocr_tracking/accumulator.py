"""Rolling window of recent readings for one tracked text."""

import time
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from ocr_tracking.config import ACCUMULATOR_MAX_OBSERVATIONS, ACCUMULATOR_WINDOW_SECONDS
from ocr_tracking.recovery import fuse_candidates


@dataclass(frozen=True)
class TimedReading:
    """One OCR reading with the time it was recorded."""

    text: str
    confidence: float
    timestamp: float


class TemporalAccumulator:
    """Bounded, time-windowed buffer of readings producing a fused text.

    Keeps at most `max_observations` readings, none older than
    `window_seconds`.
    """

    def __init__(
        self,
        max_observations: int = ACCUMULATOR_MAX_OBSERVATIONS,
        window_seconds: float = ACCUMULATOR_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_observations = max_observations
        self.window_seconds = window_seconds
        self._clock = clock
        self._readings: deque[TimedReading] = deque()

    def _evict(self, now: float):
        """Drop readings outside the window, then the oldest excess ones."""
        cutoff = now - self.window_seconds
        while self._readings and self._readings[0].timestamp < cutoff:
            self._readings.popleft()
        while len(self._readings) > self.max_observations:
            self._readings.popleft()

    def add_observation(self, text: str, confidence: float):
        """Record a reading at the current clock time."""
        now = self._clock()
        self._readings.append(TimedReading(text=text, confidence=confidence, timestamp=now))
        self._evict(now)

    def get_best_text(self) -> str | None:
        """Fuse the readings still inside the window."""
        self._evict(self._clock())
        return fuse_candidates((reading.text, reading.confidence) for reading in self._readings)

    def readings(self) -> list[TimedReading]:
        """Readings currently held, oldest first."""
        return list(self._readings)

    def clear(self):
        self._readings.clear()

    def __iter__(self) -> Iterator[TimedReading]:
        return iter(self._readings)

    def __len__(self) -> int:
        return len(self._readings)

    def __deepcopy__(self, memo: dict) -> "TemporalAccumulator":
        # Snapshots share the clock; readings are immutable.
        clone = TemporalAccumulator(self.max_observations, self.window_seconds, clock=self._clock)
        clone._readings = deque(self._readings)
        return clone
