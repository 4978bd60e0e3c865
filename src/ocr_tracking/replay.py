"""Offline replay of recorded observation feeds.

A feed is a JSONL file with one frame per line:

    {"timestamp": 0.0, "observations": [{"text": "Hello", "confidence": 0.9,
      "bounding_box": {"x": 0.1, "y": 0.1, "width": 0.2, "height": 0.05}}]}

`timestamp` is optional; frames without one are spaced at 1 / fps.
"""

import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ocr_tracking.models import Frame
from ocr_tracking.tracker import TextTracker

logger = logging.getLogger(__name__)

_translations_adapter = TypeAdapter(dict[str, str])


class ReplayClock:
    """Clock driven by recorded frame timestamps."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def load_frames(path: Path) -> list[Frame]:
    """Load recorded frames from a JSONL file.

    Raises:
        ValueError: If a line is not a valid frame (with its line number)
    """
    frames = []
    with open(path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                frames.append(Frame.model_validate_json(line))
            except ValidationError as e:
                raise ValueError(f"{path.name}:{line_number}: {e}") from e
    return frames


def load_translations(path: Path) -> dict[str, str]:
    """Load a {source text: translation} JSON object."""
    return _translations_adapter.validate_json(path.read_bytes())


def replay_frames(
    tracker: TextTracker,
    clock: ReplayClock,
    frames: list[Frame],
    translations: Mapping[str, str] | None = None,
    fps: float = 30.0,
) -> int:
    """Feed recorded frames through a tracker.

    With `translations`, each frame's translation requests are answered from
    the mapping as if by a translation service; texts missing from it count
    as failed requests.

    Args:
        tracker: Tracker built with `clock`
        clock: Clock the tracker reads
        frames: Recorded frames in order
        translations: Canned translation results
        fps: Frame rate for frames without timestamps

    Returns:
        Number of frames processed
    """
    for index, frame in enumerate(frames):
        clock.now = frame.timestamp if frame.timestamp is not None else index / fps
        tracker.update(frame.observations)

        if translations is None:
            continue

        requested = [text for batch in tracker.translation_batches() for text in batch.texts]
        if not requested:
            continue
        tracker.mark_translating(requested)

        answered = {text: translations[text] for text in requested if text in translations}
        missing = [text for text in requested if text not in translations]
        if answered:
            tracker.update_translations(answered)
        if missing:
            tracker.mark_translation_failed(missing)

    logger.debug(f"Replayed {len(frames)} frames")
    return len(frames)
