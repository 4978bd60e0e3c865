"""Type definitions for text tracking.

Mutable per-identity state kept by the tracker. External input uses the
pydantic models in `ocr_tracking.models` instead.
"""

from dataclasses import dataclass, field

from ocr_tracking.accumulator import TemporalAccumulator
from ocr_tracking.geometry import BoundingBox
from ocr_tracking.state import DetectionState


@dataclass
class PendingText:
    """Observation waiting for enough sightings to be tracked."""

    text: str
    bounding_box: BoundingBox
    confidence: float
    first_seen: float
    last_seen: float
    frames_seen: int = 1
    language: str | None = None
    is_cjk: bool = False
    is_vertical: bool = False
    orientation: float = 0.0


@dataclass
class TrackedText:
    """A confirmed text identity, updated once per frame.

    `bounding_box` is the latest raw detection; `smoothed_box` is the filtered
    box for display. `anchor_box` is the detection the smoothed box last
    moved toward; sub-threshold jitter is measured against it so slow drift
    adds up. `text_history` holds the recent readings fused into `text`.
    `best_*` fields keep the highest-confidence reading and the best
    translation seen so far.
    """

    id: int
    text: str
    bounding_box: BoundingBox
    smoothed_box: BoundingBox
    confidence: float
    last_seen: float
    detected_at: float
    source_language: str
    is_cjk: bool = False

    # Translation
    translation: str | None = None
    translation_failed: bool = False
    translation_attempts: int = 0
    translation_started_at: float | None = None
    detection_state: DetectionState = DetectionState.DETECTED
    is_placeholder: bool = True

    # Quality
    quality_score: float = 0.0
    stable_frames: int = 0
    noise_count: int = 0
    best_text: str = ""
    best_confidence: float = 0.0
    best_translation: str | None = None
    is_displayable: bool = False
    text_history: TemporalAccumulator = field(default_factory=TemporalAccumulator)
    fused_text: str | None = None

    # Visibility
    is_on_screen: bool = True
    consecutive_on_screen_frames: int = 0
    consecutive_off_screen_frames: int = 0
    suspicion_level: float = 0.0
    frames_since_last_seen: int = 0

    # Motion
    predicted_box: BoundingBox | None = None
    anchor_box: BoundingBox | None = None
    velocity_x: float = 0.0
    velocity_y: float = 0.0

    # Orientation
    is_vertical_text: bool = False
    text_orientation: float = 0.0
