"""Ordered correction tables for OCR text recovery.

Every table is a tuple of (pattern, replacement) pairs applied strictly in
order. Literal tables use plain substring replacement; pattern tables are
compiled regular expressions whose replacement may be a template string or a
callable. Order matters: longer fixes come before the shorter fixes they
contain.
"""

import re
from typing import Callable, Final, Union

Replacement = Union[str, Callable[[re.Match[str]], str]]
PatternRule = tuple[re.Pattern[str], Replacement]
LiteralRule = tuple[str, str]

KANJI: Final[str] = "一-龯"


def apply_literal_rules(text: str, rules: tuple[LiteralRule, ...]) -> str:
    """Apply substring replacements in order."""
    for old, new in rules:
        text = text.replace(old, new)
    return text


def apply_pattern_rules(text: str, rules: tuple[PatternRule, ...]) -> str:
    """Apply regex substitutions in order."""
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


def _joined(word: str) -> re.Pattern[str]:
    """Pattern matching `word` with whitespace wedged between its characters."""
    return re.compile(r"[\s\u3000]+".join(re.escape(char) for char in word))


# =============================================================================
# Noise Cleanup (all scripts)
# =============================================================================

CLEANUP_RULES: Final[tuple[PatternRule, ...]] = (
    (re.compile(r"[\uffff\ufffd]+"), ""),  # broken-character markers
    (re.compile(r"[•·]{2,}"), ""),  # bullet / middle-dot runs
    (re.compile(r"([A-Za-z])[•·]([A-Za-z])"), r"\1\2"),  # single bullet inside a word
    (re.compile(r"\s+"), " "),  # collapse whitespace
    (re.compile(r"^[•·\s]+|[•·\s]+$"), ""),  # bullets/spaces at the ends
)

NOISE_MARKERS_RE: Final[re.Pattern[str]] = re.compile(r"[\uffff\ufffd]|[•·]{2,}")


# =============================================================================
# Japanese
# =============================================================================

_DAKUTEN_BASES = "かきくけこさしすせそたちつてとはひふへほ"
_HANDAKUTEN_BASES = "はひふへほ"


def _voiced(base: str, offset: int) -> str:
    return chr(ord(base) + offset)


def _katakana(hiragana: str) -> str:
    return "".join(chr(ord(char) + 0x60) for char in hiragana)


# Precomposed forms: voiced = base + 1, semi-voiced = base + 2.
DAKUTEN_MAP: Final[dict[str, str]] = {
    **{base: _voiced(base, 1) for base in _DAKUTEN_BASES},
    **{_katakana(base): _voiced(_katakana(base), 1) for base in _DAKUTEN_BASES},
    "う": "ゔ",
    "ウ": "ヴ",
}
HANDAKUTEN_MAP: Final[dict[str, str]] = {
    **{base: _voiced(base, 2) for base in _HANDAKUTEN_BASES},
    **{_katakana(base): _voiced(_katakana(base), 2) for base in _HANDAKUTEN_BASES},
}

# Spaced-out endings OCR splits at glyph boundaries.
JAPANESE_WORD_FIXES: Final[tuple[str, ...]] = (
    "です",
    "ます",
    "した",
    "ある",
    "いる",
    "ない",
    "てい",
    "こと",
    "もの",
)

# Katakana glyphs read in place of look-alike kanji inside a kanji run.
KANA_KANJI_CONFUSIONS: Final[tuple[LiteralRule, ...]] = (
    ("ロ", "口"),
    ("エ", "工"),
    ("カ", "力"),
    ("ニ", "二"),
    ("ー", "一"),
    ("ト", "卜"),
)

JAPANESE_RULES: Final[tuple[PatternRule, ...]] = (
    (
        re.compile(f"([{''.join(DAKUTEN_MAP)}])" + r"[\s\u3000]*[\u309b\u3099]"),
        lambda m: DAKUTEN_MAP[m.group(1)],
    ),
    (
        re.compile(f"([{''.join(HANDAKUTEN_MAP)}])" + r"[\s\u3000]*[\u309c\u309a]"),
        lambda m: HANDAKUTEN_MAP[m.group(1)],
    ),
    *((_joined(word), word) for word in JAPANESE_WORD_FIXES),
    *(
        (re.compile(f"(?<=[{KANJI}]){re.escape(kana)}(?=[{KANJI}])"), kanji)
        for kana, kanji in KANA_KANJI_CONFUSIONS
    ),
)


# =============================================================================
# Korean
# =============================================================================

# Longest first so "있 습 니 다" is not half-joined by "습 니 다".
KOREAN_WORD_FIXES: Final[tuple[str, ...]] = (
    "있습니다",
    "없습니다",
    "했습니다",
    "습니다",
    "입니다",
    "합니다",
    "됩니다",
    "이에요",
    "예요",
    "어요",
)

# Standalone jamo confusions (compatibility jamo only appear when OCR splits
# a syllable, so these never touch well-formed syllables).
KOREAN_JAMO_CONFUSIONS: Final[tuple[LiteralRule, ...]] = (
    ("ㅁ", "ㅇ"),
    ("ㅂ", "ㅍ"),
    ("ㅈ", "ㅊ"),
    ("ㄷ", "ㄹ"),
    ("ㅏ", "ㅑ"),
    ("ㅓ", "ㅕ"),
    ("ㅗ", "ㅛ"),
    ("ㅜ", "ㅠ"),
)

KOREAN_RULES: Final[tuple[PatternRule, ...]] = tuple((_joined(word), word) for word in KOREAN_WORD_FIXES)


# =============================================================================
# Korean / Japanese cross-script confusions
# =============================================================================

# Applied when Hangul dominates: kana that are really Hangul.
KANA_TO_HANGUL: Final[tuple[LiteralRule, ...]] = (
    ("ス", "스"),
    ("ト", "트"),
    ("ロ", "로"),
    ("リ", "리"),
    ("か", "가"),
    ("な", "나"),
    ("た", "다"),
    ("ら", "라"),
    ("ま", "마"),
    ("さ", "사"),
    ("あ", "아"),
    ("は", "하"),
    ("の", "ㅇ"),
    ("て", "ㄷ"),
    ("と", "ㅌ"),
    ("も", "ㅁ"),
)

# Applied when kana dominate: Hangul that is really kana.
HANGUL_TO_KANA: Final[tuple[LiteralRule, ...]] = (
    ("가", "か"),
    ("나", "な"),
    ("다", "た"),
    ("라", "ら"),
    ("마", "ま"),
    ("사", "さ"),
    ("아", "あ"),
    ("자", "じゃ"),
    ("하", "は"),
    ("스", "ス"),
    ("트", "ト"),
    ("로", "ロ"),
    ("리", "リ"),
    ("ㅇ", "の"),
    ("ㄷ", "て"),
    ("ㅌ", "と"),
    ("ㅁ", "も"),
)


# =============================================================================
# Latin
# =============================================================================

# Whole-word fixes for I/l confusions seen in real captures.
ENGLISH_WORD_FIXES: Final[tuple[LiteralRule, ...]] = (
    ("GIow", "Glow"),
    ("haraIe", "harale"),
    ("cIean", "clean"),
    ("cIear", "clear"),
    ("beautifuI", "beautiful"),
    ("naturaI", "natural"),
    ("speciaI", "special"),
    ("originaI", "original"),
    ("finaI", "final"),
    ("totaI", "total"),
    ("IocaI", "local"),
    ("gIobaI", "global"),
    ("normaI", "normal"),
    ("reaI", "real"),
    ("ideaI", "ideal"),
    ("JUbl", "JUNG"),
    ("Jubl", "Jung"),
    ("FIAU", "FRAU"),
    ("FlAU", "FRAU"),
)

LATIN_RULES: Final[tuple[PatternRule, ...]] = (
    *((re.compile(rf"\b{re.escape(old)}\b"), new) for old, new in ENGLISH_WORD_FIXES),
    (re.compile(r"(?<=[a-z])I(?=[a-z])"), "l"),  # haIf -> half
    (re.compile(r"(?<=[a-z])I\b"), "l"),  # speciaI -> special
    (re.compile(r"(?<=[a-z])0(?=[a-z])"), "o"),  # c0de -> code
    (re.compile(r"\b0(?=[A-Z]+\b)"), "O"),  # 0F -> OF
    (re.compile(r"(?<=[A-Z])0(?=[A-Z]*\b)"), "O"),  # T0, FR0M, Y0U
    (re.compile(r"\bl(?=[A-Z]+\b)"), "I"),  # lN -> IN
    (re.compile(r"(?<=[A-Z])l(?=[A-Z])"), "I"),  # THlS, WlTH
)

# Characters kept by the aggressive Latin recovery pass.
LATIN_KEEP_RE: Final[re.Pattern[str]] = re.compile(r"[^\w\s,.!?\-'\"]|_")
