"""Tests for text similarity."""

import pytest

from ocr_tracking.similarity import (
    are_texts_similar,
    levenshtein,
    normalize_for_matching,
    text_similarity,
)


@pytest.mark.unit
class TestTextSimilarity:
    """Tests for normalized edit similarity."""

    @pytest.mark.parametrize("text", ["a", "Hello", "こんにちは", "안녕하세요"])
    def test_identical(self, text):
        assert text_similarity(text, text) == 1.0

    def test_empty_strings(self):
        assert text_similarity("", "") == 1.0
        assert text_similarity("", "abc") == 0.0

    def test_one_substitution(self):
        """One edit in four characters leaves 0.75."""
        assert levenshtein("GIow", "Glow") == 1
        assert text_similarity("GIow", "Glow") == pytest.approx(0.75)

    def test_symmetric(self):
        pairs = [("kitten", "sitting"), ("Hello", "Help"), ("Exit", "出口")]
        for a, b in pairs:
            assert text_similarity(a, b) == pytest.approx(text_similarity(b, a))

    def test_unrelated(self):
        assert text_similarity("abc", "xyz") == 0.0


@pytest.mark.unit
class TestAreTextsSimilar:
    """Tests for pairwise similarity checks."""

    def test_fewer_than_two(self):
        assert are_texts_similar([])
        assert are_texts_similar(["only"])

    def test_all_close(self):
        assert are_texts_similar(["Hello", "Hello", "HeIlo"])

    def test_one_outlier(self):
        assert not are_texts_similar(["Hello", "Hello", "World"])


@pytest.mark.unit
class TestNormalizeForMatching:
    """Tests for translation key normalization."""

    def test_symbols_become_spaces(self):
        assert normalize_for_matching("Sale ★ 50%") == "Sale 50"

    def test_bullet_runs_removed(self):
        assert normalize_for_matching("a••b") == "ab"

    def test_replacement_markers_removed(self):
        assert normalize_for_matching("Hel\ufffdlo") == "Hello"

    def test_keeps_punctuation(self):
        assert normalize_for_matching("  Hello,  world!  ") == "Hello, world!"
