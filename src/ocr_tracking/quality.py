"""Quality scoring, displayability and translation validation."""

import logging
import re

from ocr_tracking.charset import has_cjk, has_korean
from ocr_tracking.config import (
    MAX_NOISE_COUNT,
    QUALITY_HISTORY_WEIGHT,
    QUALITY_STABLE_DELTA,
)
from ocr_tracking.types import TrackedText

logger = logging.getLogger(__name__)

NOISE_PATTERNS = (
    re.compile("[•·]{2,}"),
    re.compile("[¥$£€]{2,}"),
)
NUMERIC_ONLY_RE = re.compile(r"^[0-9\s.,]+$")

REPLACEMENT_CHARS = ("\uffff", "\ufffd")


def _symbol_ratio(text: str) -> float:
    """Share of characters that are neither alphanumeric nor whitespace."""
    if not text:
        return 0.0
    symbols = sum(1 for char in text if not char.isalnum() and not char.isspace())
    return symbols / len(text)


def calculate_quality_score(text: str, confidence: float, translation: str | None = None) -> float:
    """Score how much a reading looks like real, useful text.

    Args:
        text: Current text
        confidence: OCR confidence [0-1]
        translation: Applied translation, if any

    Returns:
        Score clamped to [0, 1]
    """
    score = 0.0
    is_korean = has_korean(text)

    if any(marker in text for marker in REPLACEMENT_CHARS):
        score -= 0.5

    score += confidence * 0.3

    # Length
    if is_korean:
        if len(text) >= 1:
            score += 0.2
    elif 3 <= len(text) <= 100:
        score += 0.2
    elif len(text) >= 2:
        score += 0.1

    # Symbol noise
    ratio = _symbol_ratio(text)
    if ratio < 0.15:
        score += 0.2
    elif ratio < 0.25:
        score += 0.1
    else:
        score -= 0.3

    if any(pattern.search(text) for pattern in NOISE_PATTERNS):
        score -= 0.2

    if translation:
        score += 0.3

    if is_korean:
        score += 0.2
    elif has_cjk(text):
        score += 0.1

    return max(0.0, min(1.0, score))


def should_display(tracked: TrackedText) -> bool:
    """Decide whether a tracked text is worth showing.

    Uses the best translation, confidence and text seen so far so a single
    weak frame does not hide an established text.
    """
    if tracked.noise_count >= MAX_NOISE_COUNT:
        return False

    if tracked.best_translation:
        return True
    if tracked.quality_score > 0.5 and tracked.stable_frames >= 2:
        return True
    if tracked.best_confidence > 0.7 and len(tracked.best_text) >= 2:
        return True
    if has_korean(tracked.best_text) and tracked.best_confidence > 0.3:
        return True
    if has_cjk(tracked.best_text) and tracked.best_confidence > 0.4:
        return True
    return False


def update_quality(tracked: TrackedText, initial: bool = False):
    """Recompute the smoothed quality score and displayability in place.

    Args:
        tracked: Tracked text to update
        initial: Take the new score as-is instead of smoothing it
    """
    new_score = calculate_quality_score(tracked.text, tracked.confidence, tracked.translation)

    if initial:
        smoothed = new_score
    else:
        smoothed = tracked.quality_score * QUALITY_HISTORY_WEIGHT + new_score * (1 - QUALITY_HISTORY_WEIGHT)
    smoothed = max(0.0, min(1.0, smoothed))

    if abs(new_score - smoothed) < QUALITY_STABLE_DELTA:
        tracked.stable_frames += 1
    else:
        tracked.stable_frames = 0
    tracked.quality_score = smoothed

    displayable = should_display(tracked)
    if displayable != tracked.is_displayable and not initial:
        logger.info(f"Text {tracked.id} '{tracked.text}' displayable={displayable} (quality {smoothed:.2f})")
    tracked.is_displayable = displayable


def is_valid_translation(source: str, translation: str) -> bool:
    """Reject translation results that are empty, echoed or garbage.

    Args:
        source: Text that was translated
        translation: Result returned by the translation service

    Returns:
        True if the translation can be applied
    """
    result = translation.strip()
    if not result:
        return False
    if result == source.strip():
        return False

    letters = sum(1 for char in result if char.isalpha())
    if letters < len(result) / 3:
        return False

    if len(result) > len(source) * 10 and len(result) > 100:
        return False

    if NUMERIC_ONLY_RE.match(result):
        return False

    return True
