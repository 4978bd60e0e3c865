"""Tests for quality scoring, displayability and translation validation."""

import pytest

from ocr_tracking.geometry import BoundingBox
from ocr_tracking.quality import (
    calculate_quality_score,
    is_valid_translation,
    should_display,
    update_quality,
)
from ocr_tracking.types import TrackedText


def make_tracked(text: str, confidence: float, **kwargs) -> TrackedText:
    box = BoundingBox(0.1, 0.1, 0.2, 0.05)
    return TrackedText(
        id=1,
        text=text,
        bounding_box=box,
        smoothed_box=box,
        confidence=confidence,
        last_seen=0.0,
        detected_at=0.0,
        source_language="en",
        best_text=text,
        best_confidence=confidence,
        **kwargs,
    )


@pytest.mark.unit
class TestQualityScore:
    """Tests for the additive quality score."""

    def test_latin_word(self):
        """Confidence, length and clean-symbol credit."""
        assert calculate_quality_score("Hello", 0.9) == pytest.approx(0.27 + 0.2 + 0.2)

    def test_translation_bonus(self):
        assert calculate_quality_score("Hello", 0.9, "Bonjour") == pytest.approx(0.97)

    def test_korean_bonus(self):
        assert calculate_quality_score("안녕", 0.5) == pytest.approx(0.15 + 0.2 + 0.2 + 0.2)

    def test_japanese_bonus(self):
        assert calculate_quality_score("こんにちは", 0.5) == pytest.approx(0.15 + 0.2 + 0.2 + 0.1)

    def test_short_latin(self):
        assert calculate_quality_score("Hi", 0.0) == pytest.approx(0.1 + 0.2)

    def test_noise_clamped_to_zero(self):
        assert calculate_quality_score("$$$$", 0.0) == 0.0
        assert calculate_quality_score("\ufffd\ufffd", 1.0) == 0.0

    def test_clamped_to_one(self):
        assert calculate_quality_score("안녕", 1.0, "Hi") == 1.0

    @pytest.mark.parametrize("text", ["", "a", "•••", "Hello World", "안녕하세요", "x" * 200, "$1.00 ¥¥"])
    @pytest.mark.parametrize("confidence", [0.0, 0.5, 1.0])
    def test_always_in_range(self, text, confidence):
        assert 0.0 <= calculate_quality_score(text, confidence) <= 1.0


@pytest.mark.unit
class TestUpdateQuality:
    """Tests for smoothed quality updates."""

    def test_initial_takes_new_score(self):
        tracked = make_tracked("Hello", 0.9)
        update_quality(tracked, initial=True)
        assert tracked.quality_score == pytest.approx(0.67)
        assert tracked.stable_frames == 1

    def test_steady_score_counts_stable_frames(self):
        tracked = make_tracked("Hello", 0.9)
        update_quality(tracked, initial=True)
        update_quality(tracked)
        update_quality(tracked)
        assert tracked.stable_frames == 3

    def test_smoothing_weights(self):
        """New score gets 30% weight."""
        tracked = make_tracked("Hello", 0.9, quality_score=0.0)
        update_quality(tracked)
        assert tracked.quality_score == pytest.approx(0.3 * 0.67)
        assert tracked.stable_frames == 0

    def test_sets_displayable(self):
        tracked = make_tracked("Hello", 0.9)
        update_quality(tracked, initial=True)
        assert tracked.is_displayable


@pytest.mark.unit
class TestShouldDisplay:
    """Tests for displayability rules."""

    def test_translation(self):
        assert should_display(make_tracked("x", 0.1, best_translation="Hi"))

    def test_confident_latin(self):
        assert should_display(make_tracked("Hi", 0.8))

    def test_weak_latin(self):
        assert not should_display(make_tracked("Hi", 0.5))

    def test_stable_quality(self):
        assert should_display(make_tracked("Hi", 0.5, quality_score=0.6, stable_frames=2))
        assert not should_display(make_tracked("Hi", 0.5, quality_score=0.6, stable_frames=1))

    def test_korean_threshold(self):
        assert should_display(make_tracked("한", 0.35))

    def test_other_cjk_threshold(self):
        assert not should_display(make_tracked("字", 0.35))
        assert should_display(make_tracked("字", 0.45))

    def test_noise_forces_hidden(self):
        assert not should_display(make_tracked("Hello", 0.95, best_translation="Hi", noise_count=5))


@pytest.mark.unit
class TestIsValidTranslation:
    """Tests for translation result validation."""

    def test_valid(self):
        assert is_valid_translation("こんにちは", "Hello")
        assert is_valid_translation("猫", "cat")

    def test_empty(self):
        assert not is_valid_translation("Hola", "")
        assert not is_valid_translation("Hola", "   ")

    def test_identical_to_source(self):
        assert not is_valid_translation("Hello", "Hello")

    def test_too_few_letters(self):
        assert not is_valid_translation("Hola", "!!?!")
        assert not is_valid_translation("Hola", "a1234")

    def test_numeric_only(self):
        assert not is_valid_translation("十二", "12 34")
        assert not is_valid_translation("百", "100.00")

    def test_unreasonably_long(self):
        assert not is_valid_translation("abc", "word " * 30)

    def test_long_but_proportionate(self):
        source = "x" * 20
        assert is_valid_translation(source, "word " * 30)
