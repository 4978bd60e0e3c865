"""Text similarity measures used for matching and fusion."""

import re

import Levenshtein

from ocr_tracking.config import SIMILAR_CANDIDATE_THRESHOLD

REPLACEMENT_CHARS_RE = re.compile(r"[\uffff\ufffd]+")
BULLET_RUN_RE = re.compile("[•·]{2,}")
# Keep letters, digits, whitespace, common punctuation and "|" (book titles).
NON_TEXT_RE = re.compile(r"[^\w\s.,!?:;()\-|]|_")
MULTI_SPACE_RE = re.compile(r"\s{2,}")


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert/delete/substitute cost 1)."""
    return Levenshtein.distance(a, b)


def text_similarity(a: str, b: str) -> float:
    """Normalized edit similarity.

    Computed as 1 - levenshtein(a, b) / max(len(a), len(b)). Symmetric, and
    1.0 for identical strings (two empty strings included).

    Args:
        a: First text
        b: Second text

    Returns:
        Similarity in [0, 1]
    """
    if a == b:
        return 1.0

    longest = max(len(a), len(b))
    return 1.0 - levenshtein(a, b) / longest


def are_texts_similar(texts: list[str], threshold: float = SIMILAR_CANDIDATE_THRESHOLD) -> bool:
    """Check that every pair of texts reaches the similarity threshold.

    Args:
        texts: Texts to compare
        threshold: Minimum pairwise similarity

    Returns:
        True if all pairs are similar (trivially true for fewer than 2 texts)
    """
    for i in range(len(texts)):
        for j in range(i + 1, len(texts)):
            if text_similarity(texts[i], texts[j]) < threshold:
                return False
    return True


def normalize_for_matching(text: str) -> str:
    """Normalize text before comparing it with translation keys.

    Removes replacement markers and bullet runs, turns other symbols into
    spaces and collapses whitespace. Translation requests are built from the
    same normalization so request keys and tracked texts line up.
    """
    cleaned = REPLACEMENT_CHARS_RE.sub("", text)
    cleaned = BULLET_RUN_RE.sub("", cleaned)
    cleaned = NON_TEXT_RE.sub(" ", cleaned)
    cleaned = MULTI_SPACE_RE.sub(" ", cleaned)
    return cleaned.strip()
