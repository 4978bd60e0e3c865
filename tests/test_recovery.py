"""Tests for OCR text cleanup, recovery and candidate fusion."""

import pytest

from ocr_tracking.recovery import (
    character_level_voting,
    clean_text,
    fuse_candidates,
    has_ocr_errors,
    is_plausible_text,
    recover_text,
)


@pytest.mark.unit
class TestCleanText:
    """Tests for noise cleanup."""

    def test_plain_text_unchanged(self):
        assert clean_text("Hello") == "Hello"

    def test_replacement_markers_removed(self):
        assert clean_text("He\ufffdllo") == "Hello"
        assert clean_text("He\uffffllo") == "Hello"

    def test_bullet_runs_removed(self):
        assert clean_text("••Sale••") == "Sale"

    def test_single_bullet_inside_word(self):
        assert clean_text("Ca·fe") == "Cafe"

    def test_whitespace_collapsed(self):
        assert clean_text("  a   b  ") == "a b"

    def test_latin_minimum_length(self):
        """Latin text needs two characters."""
        assert clean_text("A") is None
        assert clean_text("") is None

    def test_cjk_minimum_length(self):
        """A single CJK character is a valid text."""
        assert clean_text("한") == "한"
        assert clean_text("字") == "字"

    def test_does_not_substitute_letters(self):
        """Cleanup never rewrites letters; that is recovery's job."""
        assert clean_text("GIow") == "GIow"


@pytest.mark.unit
class TestRecoverLatin:
    """Tests for Latin confusion rules."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("GIow", "Glow"),
            ("speciaI", "special"),
            ("haIf", "half"),
            ("c0de", "code"),
            ("T0", "TO"),
            ("0F", "OF"),
            ("FR0M", "FROM"),
            ("lN", "IN"),
            ("THlS", "THIS"),
            ("WlTH", "WITH"),
            ("FlAU", "FRAU"),
        ],
    )
    def test_confusions(self, raw, expected):
        assert recover_text(raw) == expected

    def test_clean_text_passes_through(self):
        assert recover_text("Hello World") == "Hello World"

    def test_symbols_only_rejected(self):
        assert recover_text("$$$") is None

    def test_single_character_tokens_rejected(self):
        assert recover_text("a b c d") is None

    def test_repeated_character_rejected(self):
        assert recover_text("eeee") is None

    def test_aggressive_pass_strips_symbols(self):
        """Text that is mostly symbols keeps its letters."""
        assert recover_text("Hello@@@@@@") == "Hello"


@pytest.mark.unit
class TestRecoverCJK:
    """Tests for Japanese and Korean rules."""

    def test_separated_dakuten_rejoined(self):
        assert recover_text("\u306f\u309b") == "\u3070"  # ha + dakuten -> ba

    def test_separated_handakuten_rejoined(self):
        assert recover_text("\u30d8\u309c") == "\u30da"  # katakana he + handakuten -> pe

    def test_japanese_ending_spacing(self):
        assert recover_text("そうで　す") == "そうです"

    def test_katakana_inside_kanji_run(self):
        assert recover_text("東\u30ed西") == "東\u53e3西"  # katakana ro -> kanji mouth

    def test_korean_spaced_ending(self):
        assert recover_text("습 니 다") == "습니다"
        assert recover_text("있 습 니 다") == "있습니다"

    def test_cross_script_toward_japanese(self):
        """A stray Hangul syllable in Japanese text becomes kana."""
        assert recover_text("こんにちは 가") == "こんにちは か"

    def test_cross_script_toward_korean(self):
        """A stray katakana in Korean text becomes Hangul."""
        assert recover_text("테ス트입니다") == "테스트입니다"

    def test_cjk_text_without_cjk_rejected(self):
        """Jamo-only text is not accepted as CJK text."""
        assert recover_text("ㅋㅋ") is None


@pytest.mark.unit
class TestPlausibleText:
    """Tests for recovered-text validation."""

    def test_latin(self):
        assert is_plausible_text("Hello", is_cjk=False)
        assert not is_plausible_text("12345", is_cjk=False)
        assert not is_plausible_text("a1234", is_cjk=False)

    def test_cjk(self):
        assert is_plausible_text("出口", is_cjk=True)
        assert not is_plausible_text("Exit", is_cjk=True)


@pytest.mark.unit
class TestFuseCandidates:
    """Tests for multi-candidate fusion."""

    def test_empty(self):
        assert fuse_candidates([]) is None

    @pytest.mark.parametrize("text", ["GIow", "Hello", "습 니 다", "$$$"])
    def test_single_candidate_equals_recover(self, text):
        assert fuse_candidates([(text, 0.5)]) == recover_text(text)

    def test_glow(self):
        """A misread I loses to the more confident l."""
        assert fuse_candidates([("GIow", 0.6), ("Glow", 0.9)]) == "Glow"

    def test_similar_candidates_pick_most_confident(self):
        candidates = [("Hello", 0.7), ("Hello", 0.9), ("HeIlo", 0.5)]
        assert fuse_candidates(candidates) == "Hello"

    def test_dissimilar_candidates_vote(self):
        assert fuse_candidates([("Hello", 0.9), ("Help", 0.1)]) == "Hello"

    def test_nothing_survives_cleaning(self):
        """Falls back to recovering the most confident raw candidate."""
        assert fuse_candidates([("a", 0.5), ("b", 0.9)]) is None

    def test_noisy_candidates_cleaned(self):
        assert fuse_candidates([("He\ufffdllo", 0.5), ("Hello", 0.9)]) == "Hello"


@pytest.mark.unit
class TestCharacterVoting:
    """Tests for confidence-weighted voting."""

    def test_weights_add_up(self):
        """Two weaker votes beat one stronger vote."""
        assert character_level_voting([("ab", 0.4), ("cd", 0.3), ("cd", 0.3)]) == "cd"

    def test_tie_goes_to_first(self):
        assert character_level_voting([("ab", 0.5), ("cd", 0.5)]) == "ab"

    def test_votes_up_to_longest(self):
        assert character_level_voting([("abc", 0.9), ("a", 0.9)]) == "abc"

    def test_result_trimmed(self):
        assert character_level_voting([(" ab ", 0.9)]) == "ab"

    def test_empty(self):
        assert character_level_voting([]) is None


@pytest.mark.unit
class TestHasOcrErrors:
    """Tests for error marker detection."""

    def test_markers(self):
        assert has_ocr_errors("Hel\ufffdlo")
        assert has_ocr_errors("a••b")

    def test_clean(self):
        assert not has_ocr_errors("Hello")
        assert not has_ocr_errors("a·b")
