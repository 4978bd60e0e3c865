"""Temporal tracking and fusion of noisy per-frame OCR detections."""

from importlib.metadata import PackageNotFoundError, version

from ocr_tracking.cache import TranslationCache
from ocr_tracking.config import SceneMotion, TrackingMode, TrackingPolicy, policy_for_mode
from ocr_tracking.geometry import BoundingBox
from ocr_tracking.models import Observation, TranslationBatch
from ocr_tracking.recovery import clean_text, fuse_candidates, recover_text
from ocr_tracking.similarity import text_similarity
from ocr_tracking.state import DetectionState
from ocr_tracking.tracker import TextTracker, calculate_match_score
from ocr_tracking.types import PendingText, TrackedText

try:
    __version__ = version("ocr-tracking")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    "__version__",
    "BoundingBox",
    "DetectionState",
    "Observation",
    "PendingText",
    "SceneMotion",
    "TextTracker",
    "TrackedText",
    "TrackingMode",
    "TrackingPolicy",
    "TranslationBatch",
    "TranslationCache",
    "calculate_match_score",
    "clean_text",
    "fuse_candidates",
    "policy_for_mode",
    "recover_text",
    "text_similarity",
]
