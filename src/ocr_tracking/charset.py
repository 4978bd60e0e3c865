"""Script detection using Unicode ranges.

Tracking thresholds depend on the script of a text: Korean and Japanese OCR
returns lower confidences and less consistent boxes than Latin text, so most
callers only need the yes/no predicates below.
"""

from dataclasses import dataclass


def is_in_ranges(code: int, ranges: list[tuple[int, int]]) -> bool:
    """Check if Unicode code point is in any of the given ranges.

    Args:
        code: Unicode code point
        ranges: List of (start, end) tuples (inclusive)

    Returns:
        True if code is in any range
    """
    return any(start <= code <= end for start, end in ranges)


def is_hangul_syllable(code: int) -> bool:
    """Check if character is a precomposed Hangul syllable."""
    return 0xAC00 <= code <= 0xD7A3


def is_korean_char(code: int) -> bool:
    """Check if character is Korean (Hangul).

    Includes: Hangul Syllables, Hangul Compatibility Jamo, Hangul Jamo
    """
    ranges = [
        (0xAC00, 0xD7A3),  # Hangul Syllables
        (0x3131, 0x318E),  # Hangul Compatibility Jamo
        (0x1100, 0x11FF),  # Hangul Jamo
    ]
    return is_in_ranges(code, ranges)


def is_compatibility_jamo(code: int) -> bool:
    """Check if character is a standalone (compatibility) Hangul jamo."""
    return 0x3131 <= code <= 0x318E


def is_hiragana_char(code: int) -> bool:
    """Check if character is Hiragana."""
    return 0x3040 <= code <= 0x309F


def is_katakana_char(code: int) -> bool:
    """Check if character is Katakana."""
    return 0x30A0 <= code <= 0x30FF


def is_kana_char(code: int) -> bool:
    """Check if character is Hiragana or Katakana."""
    return is_hiragana_char(code) or is_katakana_char(code)


def is_kanji_char(code: int) -> bool:
    """Check if character is a CJK Unified Ideograph."""
    return 0x4E00 <= code <= 0x9FAF


def is_japanese_char(code: int) -> bool:
    """Check if character is kana or a CJK ideograph."""
    return is_kana_char(code) or is_kanji_char(code)


def is_cjk_char(code: int) -> bool:
    """Check if character belongs to any Chinese/Japanese/Korean script.

    Hangul syllables are included; standalone jamo are not, so that jamo-only
    noise does not qualify a string as CJK text.
    """
    return is_japanese_char(code) or is_hangul_syllable(code)


def is_latin_char(code: int) -> bool:
    """Check if character is a Latin letter (Basic Latin through Extended-B)."""
    ranges = [
        (0x0041, 0x005A),  # A-Z
        (0x0061, 0x007A),  # a-z
        (0x00C0, 0x00FF),  # Latin-1 Supplement (accented chars)
        (0x0100, 0x017F),  # Latin Extended-A
        (0x0180, 0x024F),  # Latin Extended-B
    ]
    return is_in_ranges(code, ranges)


def has_korean(text: str) -> bool:
    """Text contains a Hangul syllable."""
    return any(is_hangul_syllable(ord(char)) for char in text)


def has_japanese(text: str) -> bool:
    """Text contains kana or CJK ideographs."""
    return any(is_japanese_char(ord(char)) for char in text)


def has_cjk(text: str) -> bool:
    """Text contains any CJK character."""
    return any(is_cjk_char(ord(char)) for char in text)


def count_korean(text: str) -> int:
    """Number of Hangul syllables and compatibility jamo."""
    return sum(1 for char in text if is_hangul_syllable(ord(char)) or is_compatibility_jamo(ord(char)))


def count_kana(text: str) -> int:
    """Number of Hiragana and Katakana characters."""
    return sum(1 for char in text if is_kana_char(ord(char)))


@dataclass
class ScriptProfile:
    """Scripts present in a text."""

    has_korean: bool = False
    has_japanese: bool = False
    has_latin: bool = False

    @property
    def is_cjk(self) -> bool:
        return self.has_korean or self.has_japanese

    @property
    def is_mixed_cjk(self) -> bool:
        return self.has_korean and self.has_japanese


def detect_scripts(text: str) -> ScriptProfile:
    """Detect which scripts occur in text.

    Korean detection here includes compatibility jamo, because recovery rules
    target jamo-level misreadings.

    Args:
        text: Text to analyze

    Returns:
        ScriptProfile with one flag per script
    """
    profile = ScriptProfile()

    for char in text:
        code = ord(char)
        if is_hangul_syllable(code) or is_compatibility_jamo(code):
            profile.has_korean = True
        elif is_japanese_char(code):
            profile.has_japanese = True
        elif is_latin_char(code):
            profile.has_latin = True

    return profile


FRENCH_MARKED_CHARS = frozenset("àâéèêëîïôùûçœæÀÂÉÈÊËÎÏÔÙÛÇŒÆ")
FRENCH_FUNCTION_WORDS = frozenset({"le", "la", "les", "de", "et", "un", "une", "pour", "avec", "dans", "sur"})


def detect_language(text: str) -> str:
    """Guess the source language of a text from its script.

    Priority: Korean, Japanese kana, French markers, CJK ideographs (Chinese),
    then English.

    Args:
        text: Text to analyze

    Returns:
        BCP-47 style language code ("ko", "ja", "fr", "zh" or "en")
    """
    if any(is_hangul_syllable(ord(char)) for char in text):
        return "ko"
    if any(is_kana_char(ord(char)) for char in text):
        return "ja"
    if any(char in FRENCH_MARKED_CHARS for char in text):
        return "fr"
    if any(is_kanji_char(ord(char)) for char in text):
        return "zh"

    words = set(text.lower().split())
    if words & FRENCH_FUNCTION_WORDS:
        return "fr"

    return "en"
