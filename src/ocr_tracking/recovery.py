"""OCR text cleanup, rule-based recovery and multi-candidate fusion.

Recovery runs script-specific correction tables (see `ocr_tracking.rules`)
over a raw OCR string, cleans the result and validates it. When validation
fails an aggressive pass keeps only plain text characters. Fusion combines
several readings of the same text, either by picking the most confident one
when they agree or by confidence-weighted character voting when they don't.
"""

import logging
from collections.abc import Iterable

from ocr_tracking.charset import count_kana, count_korean, detect_scripts, has_cjk
from ocr_tracking.config import MIN_CJK_TEXT_LENGTH, MIN_TEXT_LENGTH
from ocr_tracking.rules import (
    CLEANUP_RULES,
    HANGUL_TO_KANA,
    JAPANESE_RULES,
    KANA_TO_HANGUL,
    KOREAN_JAMO_CONFUSIONS,
    KOREAN_RULES,
    LATIN_KEEP_RE,
    LATIN_RULES,
    NOISE_MARKERS_RE,
    apply_literal_rules,
    apply_pattern_rules,
)
from ocr_tracking.similarity import are_texts_similar

logger = logging.getLogger(__name__)

# Latin text must be at least this share letters (spaces excluded).
MIN_LETTER_RATIO = 0.5


def clean_text(text: str) -> str | None:
    """Strip OCR noise markers and normalize whitespace.

    Args:
        text: Raw OCR text

    Returns:
        Cleaned text, or None if it is shorter than the minimum length
        (1 character for CJK text, 2 otherwise)
    """
    cleaned = apply_pattern_rules(text, CLEANUP_RULES).strip()
    min_length = MIN_CJK_TEXT_LENGTH if has_cjk(cleaned) else MIN_TEXT_LENGTH
    if len(cleaned) < min_length:
        return None
    return cleaned


def has_ocr_errors(text: str) -> bool:
    """True if text contains a replacement character or a bullet run."""
    return NOISE_MARKERS_RE.search(text) is not None


def is_plausible_text(text: str, is_cjk: bool) -> bool:
    """Check that recovered text still looks like real text.

    CJK text needs at least one CJK character. Latin text needs a letter,
    must not be a run of single-character tokens or a single repeated
    character, and must be mostly letters.
    """
    if is_cjk:
        return has_cjk(text)

    if not any(char.isalpha() for char in text):
        return False

    tokens = text.split()
    if len(tokens) > 2 and all(len(token) == 1 for token in tokens):
        return False

    compact = text.replace(" ", "")
    if len(compact) >= 3 and len(set(compact)) == 1:
        return False

    letters = sum(1 for char in compact if char.isalpha())
    return letters / len(compact) >= MIN_LETTER_RATIO


def _fix_cross_script(text: str) -> str:
    """Rewrite misread Hangul/kana toward whichever script dominates."""
    if count_korean(text) > count_kana(text):
        return apply_literal_rules(text, KANA_TO_HANGUL)
    return apply_literal_rules(text, HANGUL_TO_KANA)


def _aggressive_recovery(text: str, is_cjk: bool) -> str | None:
    """Last-resort cleanup keeping only plain text characters."""
    if is_cjk:
        recovered = apply_pattern_rules(text, CLEANUP_RULES)
    else:
        recovered = LATIN_KEEP_RE.sub("", text)
    recovered = " ".join(recovered.split())

    min_length = MIN_CJK_TEXT_LENGTH if is_cjk else MIN_TEXT_LENGTH
    if len(recovered) < min_length or not is_plausible_text(recovered, is_cjk):
        return None
    return recovered


def recover_text(text: str) -> str | None:
    """Apply script-specific corrections, then clean and validate.

    Args:
        text: Raw OCR text

    Returns:
        Corrected text, or None if nothing usable survives
    """
    profile = detect_scripts(text)
    processed = text

    if profile.has_japanese:
        processed = apply_pattern_rules(processed, JAPANESE_RULES)
    if profile.has_korean:
        processed = apply_pattern_rules(processed, KOREAN_RULES)
        processed = apply_literal_rules(processed, KOREAN_JAMO_CONFUSIONS)
    if profile.is_mixed_cjk:
        processed = _fix_cross_script(processed)
    if not profile.is_cjk:
        processed = apply_pattern_rules(processed, LATIN_RULES)

    cleaned = clean_text(processed)
    if cleaned is not None and is_plausible_text(cleaned, profile.is_cjk):
        return cleaned

    recovered = _aggressive_recovery(processed, profile.is_cjk)
    if recovered is None:
        logger.debug(f"Discarded unrecoverable OCR text: {text!r}")
    return recovered


def character_level_voting(candidates: Iterable[tuple[str, float]]) -> str | None:
    """Build a string position by position from confidence-weighted votes.

    Each candidate votes for its character at every position with its
    confidence as weight. Ties go to the character seen first.

    Args:
        candidates: (text, confidence) pairs

    Returns:
        Voted text with surrounding whitespace stripped, or None if empty
    """
    candidates = list(candidates)
    if not candidates:
        return None

    max_length = max(len(text) for text, _ in candidates)
    result = []
    for position in range(max_length):
        votes: dict[str, float] = {}
        for text, confidence in candidates:
            if position < len(text):
                char = text[position]
                votes[char] = votes.get(char, 0.0) + confidence
        if votes:
            result.append(max(votes, key=votes.__getitem__))

    voted = "".join(result).strip()
    return voted or None


def fuse_candidates(candidates: Iterable[tuple[str, float]]) -> str | None:
    """Fuse several readings of the same text into one.

    A single candidate goes through `recover_text`. Otherwise candidates are
    cleaned; when all cleaned texts agree, the most confident one wins, and
    when they disagree the result comes from character voting.

    Args:
        candidates: (text, confidence) pairs, oldest first

    Returns:
        Fused text, or None if no candidate yields usable text
    """
    candidates = list(candidates)
    if not candidates:
        return None
    if len(candidates) == 1:
        return recover_text(candidates[0][0])

    cleaned = []
    for text, confidence in candidates:
        cleaned_text = clean_text(text)
        if cleaned_text is not None:
            cleaned.append((cleaned_text, confidence))

    if not cleaned:
        best_text, _ = max(candidates, key=lambda candidate: candidate[1])
        return recover_text(best_text)

    if are_texts_similar([text for text, _ in cleaned]):
        best_text, _ = max(cleaned, key=lambda candidate: candidate[1])
        return best_text

    return character_level_voting(cleaned)
