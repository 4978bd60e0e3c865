"""Tests for tracking policies and settings."""

import pytest
from pydantic import ValidationError

from ocr_tracking.config import (
    AR_POLICY,
    STANDARD_POLICY,
    SceneMotion,
    TrackerSettings,
    TrackingMode,
    TrackingPolicy,
    policy_for_mode,
)


@pytest.mark.unit
class TestPolicies:
    """Tests for mode presets."""

    def test_standard_preset(self):
        policy = policy_for_mode("standard")
        assert policy is STANDARD_POLICY
        assert policy.min_frames_for(is_cjk=False) == 2
        assert policy.min_frames_for(is_cjk=True) == 1
        assert policy.pending_timeout_for(is_cjk=False) == pytest.approx(1.5)
        assert policy.pending_timeout_for(is_cjk=True) == pytest.approx(2.25)
        assert policy.screen_margin == pytest.approx(-0.05)

    def test_ar_preset(self):
        policy = policy_for_mode(TrackingMode.AR)
        assert policy is AR_POLICY
        assert policy.pending_timeout_for(is_cjk=False) == pytest.approx(2.0)
        assert policy.off_screen_removal_frames is None
        assert not policy.predict_motion
        assert policy.screen_margin == 0.0

    def test_overrides(self):
        policy = policy_for_mode("ar", max_tracked=5)
        assert policy.max_tracked == 5
        assert policy.mode == TrackingMode.AR
        assert AR_POLICY.max_tracked == 15

    def test_latin_promotion_needs_two_sightings(self):
        with pytest.raises(ValidationError):
            TrackingPolicy(min_frames_latin=1)

    def test_policies_are_frozen(self):
        with pytest.raises(ValidationError):
            STANDARD_POLICY.max_tracked = 3

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            policy_for_mode("vr")


@pytest.mark.unit
class TestSceneMotion:
    """Tests for scene persistence multipliers."""

    def test_multipliers(self):
        assert SceneMotion.TRANSITIONING.persistence_multiplier == pytest.approx(0.2)
        assert SceneMotion.MOVING.persistence_multiplier == pytest.approx(0.8)
        assert SceneMotion.STABLE.persistence_multiplier == pytest.approx(1.2)


@pytest.mark.unit
class TestTrackerSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OCR_TRACKING_MODE", raising=False)
        settings = TrackerSettings(_env_file=None)
        assert settings.mode == TrackingMode.STANDARD
        assert settings.translation_cache_size == 100
        assert settings.target_language == "en"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("OCR_TRACKING_MODE", "ar")
        monkeypatch.setenv("OCR_TRACKING_MAX_TRACKED", "8")
        settings = TrackerSettings(_env_file=None)
        policy = settings.policy()
        assert policy.mode == TrackingMode.AR
        assert policy.max_tracked == 8
