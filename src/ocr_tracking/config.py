"""Configuration constants and tracking policies.

Thresholds are empirically tuned policy constants. Their relative ordering is
what the tracker relies on (reject gate < match score < pivot similarity <
similar-candidate bound); the exact values can be overridden per tracker
through `TrackingPolicy` or the OCR_TRACKING_* environment variables.
"""

from enum import Enum
from functools import lru_cache
from typing import Final

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# Candidate Fusion Configuration
# =============================================================================

# Candidates at or above this pairwise similarity are treated as one reading.
SIMILAR_CANDIDATE_THRESHOLD: Final[float] = 0.8

# Minimum cleaned length for Latin and CJK text.
MIN_TEXT_LENGTH: Final[int] = 2
MIN_CJK_TEXT_LENGTH: Final[int] = 1

# Temporal accumulator window.
ACCUMULATOR_MAX_OBSERVATIONS: Final[int] = 5
ACCUMULATOR_WINDOW_SECONDS: Final[float] = 1.0


# =============================================================================
# Matching Configuration
# =============================================================================

# Weights of text similarity and IoU in the match score.
MATCH_TEXT_WEIGHT: Final[float] = 0.7
MATCH_IOU_WEIGHT: Final[float] = 0.3

# Match score must exceed this to associate an observation with an identity.
MATCH_SCORE_THRESHOLD: Final[float] = 0.5

# Below this text similarity the match score is forced to 0.
MATCH_REJECT_SIMILARITY: Final[float] = 0.3

# Below this similarity a matched observation is a content pivot.
PIVOT_SIMILARITY: Final[float] = 0.7

# Fuzzy threshold for matching translation results back to identities.
TRANSLATION_FUZZY_SIMILARITY: Final[float] = 0.8


# =============================================================================
# Quality Configuration
# =============================================================================

# Weight of the previous score when smoothing quality (new score gets the rest).
QUALITY_HISTORY_WEIGHT: Final[float] = 0.7

# Score changes below this count as a stable frame.
QUALITY_STABLE_DELTA: Final[float] = 0.1

# Identities marked as noise this many times are never displayed.
MAX_NOISE_COUNT: Final[int] = 5

# Translation requests per identity before it is marked failed.
MAX_TRANSLATION_ATTEMPTS: Final[int] = 3

# Minimum OCR confidence for an identity to be sent for translation.
MIN_TRANSLATION_CONFIDENCE: Final[float] = 0.3

# Failed identities are dropped once unmatched for more than this many frames.
FAILED_REMOVAL_FRAMES: Final[int] = 5


# =============================================================================
# Visibility Configuration
# =============================================================================

# Minimum fraction of a box inside the screen region to count as visible.
MIN_VISIBLE_FRACTION: Final[float] = 0.1

# Suspicion added per consecutive off-screen frame.
SUSPICION_PER_FRAME: Final[float] = 0.1

# Seconds since last match until time-based suspicion saturates.
SUSPICION_FULL_SECONDS: Final[float] = 2.0

# Unmatched frames before in-bounds identities start accruing suspicion.
AGING_SUSPICION_FRAMES: Final[int] = 30
AGING_SUSPICION_PER_FRAME: Final[float] = 0.03

# Consecutive readings needed to flip visibility.
OFF_SCREEN_FLIP_FRAMES: Final[int] = 1
ON_SCREEN_FLIP_FRAMES: Final[int] = 1


# =============================================================================
# Tracker Capacity
# =============================================================================

MAX_TRACKED_TEXTS: Final[int] = 15

# Observations reaching the pending stage in one frame above this are logged.
NOISE_FLOOD_WARNING: Final[int] = 30

# Expansion of tracked regions reported for OCR masking.
TRACKED_REGION_EXPANSION: Final[float] = 0.05
TRACKED_REGION_MIN_CONFIDENCE: Final[float] = 0.5


class TrackingMode(str, Enum):
    """Tracking presentation mode."""

    STANDARD = "standard"
    AR = "ar"


class SceneMotion(str, Enum):
    """Scene classification published by an external scene-change detector."""

    TRANSITIONING = "transitioning"
    MOVING = "moving"
    STABLE = "stable"

    @property
    def persistence_multiplier(self) -> float:
        """Scale factor applied to removal thresholds."""
        return SCENE_PERSISTENCE_MULTIPLIERS[self]


SCENE_PERSISTENCE_MULTIPLIERS: Final[dict[SceneMotion, float]] = {
    SceneMotion.TRANSITIONING: 0.2,
    SceneMotion.MOVING: 0.8,
    SceneMotion.STABLE: 1.2,
}


class TrackingPolicy(BaseModel):
    """Mode-dependent tracker constants.

    Use `policy_for_mode` for the presets; pass keyword overrides to tune a
    single value without restating the rest.
    """

    model_config = ConfigDict(frozen=True)

    mode: TrackingMode = TrackingMode.STANDARD

    # Promotion
    min_frames_latin: int = Field(default=2, ge=2)
    min_frames_cjk: int = Field(default=1, ge=1)
    pending_timeout_seconds: float = Field(default=1.5, gt=0)
    cjk_pending_timeout_factor: float = 1.5

    # Removal
    base_removal_frames: int = Field(default=8, ge=1)
    base_max_age_seconds: float = Field(default=3.0, gt=0)
    on_screen_persistence_factor: float = 1.2
    high_quality_threshold: float = 0.7
    high_quality_bonus: float = 1.2
    off_screen_removal_frames: int | None = 3
    off_screen_max_age_seconds: float | None = 0.15
    missed_frames_before_off_screen: int | None = 2

    # Smoothing
    smoothing_base_latin: float = 0.75
    smoothing_base_cjk: float = 0.65
    predict_motion: bool = True
    velocity_damping: float = 0.7
    momentum_factor: float = 0.25
    sticky_threshold_latin: float = 0.01
    sticky_threshold_cjk: float = 0.015

    # Visibility
    screen_margin: float = -0.05

    max_tracked: int = Field(default=MAX_TRACKED_TEXTS, ge=1)

    def min_frames_for(self, is_cjk: bool) -> int:
        """Sightings required before a pending text is promoted."""
        return self.min_frames_cjk if is_cjk else self.min_frames_latin

    def pending_timeout_for(self, is_cjk: bool) -> float:
        """Seconds a pending text survives without being seen again."""
        if is_cjk:
            return self.pending_timeout_seconds * self.cjk_pending_timeout_factor
        return self.pending_timeout_seconds


STANDARD_POLICY: Final[TrackingPolicy] = TrackingPolicy()

AR_POLICY: Final[TrackingPolicy] = TrackingPolicy(
    mode=TrackingMode.AR,
    pending_timeout_seconds=2.0,
    base_removal_frames=10,
    base_max_age_seconds=4.0,
    on_screen_persistence_factor=1.5,
    high_quality_bonus=1.0,
    off_screen_removal_frames=None,
    off_screen_max_age_seconds=None,
    missed_frames_before_off_screen=None,
    smoothing_base_latin=0.65,
    smoothing_base_cjk=0.6,
    predict_motion=False,
    screen_margin=0.0,
)


def policy_for_mode(mode: TrackingMode | str, **overrides) -> TrackingPolicy:
    """Get the preset policy for a mode, optionally overriding fields.

    Args:
        mode: Tracking mode or its string value
        **overrides: TrackingPolicy fields to replace

    Returns:
        TrackingPolicy for the mode
    """
    mode = TrackingMode(mode)
    base = AR_POLICY if mode == TrackingMode.AR else STANDARD_POLICY
    if not overrides:
        return base
    return base.model_copy(update=overrides)


class TrackerSettings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OCR_TRACKING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    mode: TrackingMode = TrackingMode.STANDARD
    max_tracked: int = MAX_TRACKED_TEXTS
    translation_cache_size: int = 100
    target_language: str = "en"
    log_level: str = "INFO"

    def policy(self) -> TrackingPolicy:
        """Build the tracking policy described by these settings."""
        return policy_for_mode(self.mode, max_tracked=self.max_tracked)


@lru_cache
def get_settings() -> TrackerSettings:
    """Get cached settings instance."""
    return TrackerSettings()
