"""Selection and batching of tracked texts for the translation service."""

from collections.abc import Iterable

from ocr_tracking.config import MAX_TRANSLATION_ATTEMPTS, MIN_TRANSLATION_CONFIDENCE
from ocr_tracking.models import TranslationBatch
from ocr_tracking.similarity import normalize_for_matching
from ocr_tracking.types import TrackedText


def _primary_subtag(language: str) -> str:
    return language.replace("_", "-").split("-")[0].lower()


def same_language(a: str, b: str) -> bool:
    """Compare language codes by primary subtag ("en-US" equals "en")."""
    return _primary_subtag(a) == _primary_subtag(b)


def needs_translation(tracked: TrackedText) -> bool:
    """Check if a tracked text should be sent for translation.

    Excludes texts that are already translated, failed, low confidence,
    out of attempts, or currently waiting on a request.
    """
    return (
        tracked.translation is None
        and not tracked.translation_failed
        and tracked.confidence > MIN_TRANSLATION_CONFIDENCE
        and tracked.translation_attempts < MAX_TRANSLATION_ATTEMPTS
        and tracked.translation_started_at is None
    )


def build_translation_batches(tracked_texts: Iterable[TrackedText], target_language: str) -> list[TranslationBatch]:
    """Group untranslated texts into one batch per source language.

    Texts are normalized the same way translation results are matched back,
    de-duplicated, and skipped when the source already is the target
    language.

    Args:
        tracked_texts: Current tracked set
        target_language: Language to translate into

    Returns:
        Batches in order of first appearance of each source language
    """
    grouped: dict[str, list[str]] = {}

    for tracked in tracked_texts:
        if not needs_translation(tracked):
            continue
        if same_language(tracked.source_language, target_language):
            continue

        key = normalize_for_matching(tracked.text)
        if not key:
            continue

        texts = grouped.setdefault(tracked.source_language, [])
        if key not in texts:
            texts.append(key)

    return [
        TranslationBatch(source_language=language, target_language=target_language, texts=texts)
        for language, texts in grouped.items()
    ]
