"""Frame-to-frame text tracking.

`TextTracker` turns per-frame OCR observations into stable text identities:

1. Match each tracked text to its best observation (text similarity + IoU).
2. Update matched texts (fusion, pivot detection, box smoothing, quality,
   visibility); age unmatched ones and remove those past their thresholds.
3. Suppress duplicates among the leftover observations and register the rest
   as pending texts.
4. Promote pending texts with enough sightings, then enforce capacity.

Translation results arrive separately through `update_translations`. One
lock serializes frame updates, translation updates and `clear()`.
"""

import copy
import logging
import math
import time
from collections.abc import Callable, Iterable, Mapping
from threading import Lock

from ocr_tracking.accumulator import TemporalAccumulator
from ocr_tracking.cache import TranslationCache
from ocr_tracking.charset import detect_language, has_cjk, has_japanese, has_korean
from ocr_tracking.config import (
    FAILED_REMOVAL_FRAMES,
    MATCH_IOU_WEIGHT,
    MATCH_REJECT_SIMILARITY,
    MATCH_SCORE_THRESHOLD,
    MATCH_TEXT_WEIGHT,
    MAX_TRANSLATION_ATTEMPTS,
    MIN_TEXT_LENGTH,
    NOISE_FLOOD_WARNING,
    PIVOT_SIMILARITY,
    STANDARD_POLICY,
    TRACKED_REGION_EXPANSION,
    TRACKED_REGION_MIN_CONFIDENCE,
    TRANSLATION_FUZZY_SIMILARITY,
    SceneMotion,
    TrackingMode,
    TrackingPolicy,
    policy_for_mode,
)
from ocr_tracking.geometry import BoundingBox
from ocr_tracking.models import Observation, TranslationBatch
from ocr_tracking.quality import is_valid_translation, update_quality
from ocr_tracking.recovery import has_ocr_errors
from ocr_tracking.similarity import normalize_for_matching, text_similarity
from ocr_tracking.state import DetectionState, TranslationEvent, apply_event, next_state
from ocr_tracking.translation import build_translation_batches, needs_translation
from ocr_tracking.types import PendingText, TrackedText
from ocr_tracking.visibility import force_off_screen, update_visibility

logger = logging.getLogger(__name__)

# Japanese text this many times taller than wide is treated as vertical.
VERTICAL_ASPECT_RATIO = 2.0


def calculate_match_score(tracked: TrackedText, observation: Observation) -> float:
    """Score how well an observation continues a tracked text.

    Weighted sum of text similarity (0.7) and box IoU (0.3). Forced to 0 when
    the texts are too different, however much the boxes overlap.

    Args:
        tracked: Existing tracked text
        observation: Candidate observation

    Returns:
        Match score in [0, 1]
    """
    similarity = text_similarity(tracked.text, observation.text.strip())
    if similarity < MATCH_REJECT_SIMILARITY:
        return 0.0
    iou = tracked.bounding_box.iou(observation.bounding_box)
    return similarity * MATCH_TEXT_WEIGHT + iou * MATCH_IOU_WEIGHT


def smoothing_factor(movement: float, base: float) -> float:
    """Blend factor toward the new box for a given frame-to-frame movement.

    Large moves follow the detection closely; near-still boxes barely move so
    OCR jitter is filtered out.
    """
    if movement > 0.1:
        return min(0.95, base + 0.2)
    if movement > 0.05:
        return min(0.9, base + 0.1)
    if movement > 0.02:
        return base
    return max(0.3, base - 0.3)


def is_duplicate(tracked: TrackedText, text: str, box: BoundingBox, is_cjk: bool) -> bool:
    """Check if an unmatched observation repeats an existing tracked text.

    The same text at a non-overlapping position is a separate instance.
    """
    iou = tracked.bounding_box.iou(box)
    if tracked.text == text and iou == 0:
        return False

    similarity = text_similarity(tracked.text, text)
    cjk = is_cjk or tracked.is_cjk
    korean = has_korean(text) or has_korean(tracked.text)

    if cjk:
        if iou > 0.4 and similarity > 0.6:
            return True
        if iou > 0.2 and similarity > 0.85:
            return True
    else:
        if iou > 0.5 and similarity > 0.7:
            return True
        if iou > 0.3 and similarity > 0.85:
            return True

    if similarity > 0.95 and iou > 0.1:
        return True

    return similarity > (0.75 if korean else 0.9) and iou > 0.3


def is_pending_match(pending: PendingText, text: str, box: BoundingBox, is_cjk: bool) -> bool:
    """Check if an observation is a repeat sighting of a pending text."""
    cjk = is_cjk or pending.is_cjk
    similarity = text_similarity(pending.text, text)
    iou = pending.bounding_box.iou(box)
    if cjk:
        return similarity > 0.75 and iou > 0.4
    return similarity > 0.85 and iou > 0.5


class TextTracker:
    """Maintains the set of tracked texts across frames.

    Args:
        policy: Mode-dependent constants (defaults to the Standard preset)
        cache: Translation cache shared across trackers; a private one is
            created when omitted
        clock: Time source in seconds
        on_update: Called with a snapshot after every frame and translation
            update, outside the tracker lock
        persistence_multiplier: Scene-dependent scale for removal thresholds
        target_language: Default target for translation batches
    """

    def __init__(
        self,
        policy: TrackingPolicy | None = None,
        cache: TranslationCache | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_update: Callable[[list[TrackedText]], None] | None = None,
        persistence_multiplier: float = 1.0,
        target_language: str = "en",
    ):
        self.policy = policy or STANDARD_POLICY
        self.cache = cache if cache is not None else TranslationCache()
        self.on_update = on_update
        self.persistence_multiplier = persistence_multiplier
        self.target_language = target_language
        self._clock = clock
        self._lock = Lock()
        self._tracked: list[TrackedText] = []
        self._pending: list[PendingText] = []
        self._matched_ids: set[int] = set()
        self._next_id = 1

    # -------------------------------------------------------------------------
    # Frame processing
    # -------------------------------------------------------------------------

    def update(self, observations: Iterable[Observation]) -> list[TrackedText]:
        """Process one frame of observations.

        Args:
            observations: OCR detections of the frame

        Returns:
            Snapshot of the tracked set after the frame
        """
        observations = list(observations)
        with self._lock:
            now = self._clock()
            self._process_frame(observations, now)
            snapshot = copy.deepcopy(self._tracked)

        if self.on_update is not None:
            self.on_update(snapshot)
        return snapshot

    def _process_frame(self, observations: list[Observation], now: float):
        matched = [False] * len(observations)
        self._matched_ids = set()
        removed: list[TrackedText] = []

        for tracked in self._tracked:
            best_index = None
            best_score = MATCH_SCORE_THRESHOLD
            for index, observation in enumerate(observations):
                if matched[index]:
                    continue
                score = calculate_match_score(tracked, observation)
                if score > best_score:
                    best_index = index
                    best_score = score

            if best_index is not None:
                matched[best_index] = True
                self._apply_match(tracked, observations[best_index], now)
            elif self._age(tracked, now):
                removed.append(tracked)

        for tracked in removed:
            self._tracked.remove(tracked)

        unmatched = [observation for index, observation in enumerate(observations) if not matched[index]]
        self._expire_pending(now)
        self._register_pending(unmatched, now)
        self._promote_pending(now)
        self._enforce_capacity()

    def _apply_match(self, tracked: TrackedText, observation: Observation, now: float):
        text = observation.text.strip()

        if text_similarity(tracked.text, text) < PIVOT_SIMILARITY:
            self._pivot(tracked, text, observation)
        else:
            tracked.text_history.add_observation(text, observation.confidence)
            fused = tracked.text_history.get_best_text()
            tracked.fused_text = fused
            if fused is not None and len(fused) >= MIN_TEXT_LENGTH and not has_ocr_errors(fused):
                tracked.text = fused
            else:
                tracked.text = text

        tracked.confidence = observation.confidence
        if observation.confidence >= tracked.best_confidence:
            tracked.best_confidence = observation.confidence
            tracked.best_text = tracked.text

        self._smooth_box(tracked, observation.bounding_box)
        tracked.bounding_box = observation.bounding_box
        tracked.last_seen = now
        tracked.frames_since_last_seen = 0
        self._matched_ids.add(tracked.id)

        update_quality(tracked)
        update_visibility(tracked, self.policy.screen_margin, now)

    def _pivot(self, tracked: TrackedText, text: str, observation: Observation):
        """Restart a tracked text whose content changed."""
        logger.info(f"Text {tracked.id} changed content: '{tracked.text}' -> '{text}'")

        tracked.text = text
        tracked.text_history.clear()
        tracked.text_history.add_observation(text, observation.confidence)
        tracked.fused_text = None

        tracked.translation = None
        tracked.best_translation = None
        tracked.translation_failed = False
        tracked.translation_attempts = 0
        tracked.translation_started_at = None
        tracked.is_placeholder = True
        tracked.detection_state = apply_event(tracked.detection_state, TranslationEvent.PIVOT)

        tracked.best_text = text
        tracked.best_confidence = observation.confidence
        tracked.is_cjk = has_cjk(text)
        tracked.source_language = observation.language or detect_language(text)

        cached = self.cache.get(text)
        if cached is not None:
            self._accept_translation(tracked, text, cached)

    def _predict(self, tracked: TrackedText) -> BoundingBox:
        box = tracked.smoothed_box
        return BoundingBox(
            x=box.x + tracked.velocity_x,
            y=box.y + tracked.velocity_y,
            width=box.width,
            height=box.height,
        )

    def _smooth_box(self, tracked: TrackedText, new_box: BoundingBox):
        policy = self.policy
        anchor = tracked.anchor_box or tracked.bounding_box
        movement = anchor.origin_distance(new_box)
        base = policy.smoothing_base_cjk if tracked.is_cjk else policy.smoothing_base_latin

        if policy.predict_motion:
            sticky = policy.sticky_threshold_cjk if tracked.is_cjk else policy.sticky_threshold_latin
            if movement < sticky:
                # Anchor stays put so slow drift accumulates past the threshold.
                tracked.predicted_box = self._predict(tracked)
                return

            damping = policy.velocity_damping
            tracked.velocity_x = tracked.velocity_x * damping + (new_box.x - anchor.x) * (1 - damping)
            tracked.velocity_y = tracked.velocity_y * damping + (new_box.y - anchor.y) * (1 - damping)

        tracked.smoothed_box = tracked.smoothed_box.blend(new_box, smoothing_factor(movement, base))
        tracked.anchor_box = new_box
        if policy.predict_motion:
            tracked.predicted_box = self._predict(tracked)

    def _age(self, tracked: TrackedText, now: float) -> bool:
        """Age an unmatched tracked text.

        Returns:
            True if the text should be removed
        """
        policy = self.policy
        tracked.frames_since_last_seen += 1

        missed = policy.missed_frames_before_off_screen
        if missed is not None and tracked.frames_since_last_seen >= missed:
            force_off_screen(tracked)
        else:
            update_visibility(tracked, policy.screen_margin, now)

        if self._should_remove(tracked, now):
            logger.debug(
                f"Removing text {tracked.id} '{tracked.text}' after {tracked.frames_since_last_seen} missed frames "
                f"(on_screen={tracked.is_on_screen})"
            )
            return True

        if policy.predict_motion and tracked.predicted_box is not None:
            tracked.smoothed_box = tracked.smoothed_box.blend(tracked.predicted_box, policy.momentum_factor)
            tracked.velocity_x *= policy.velocity_damping
            tracked.velocity_y *= policy.velocity_damping
            tracked.predicted_box = self._predict(tracked)

        return False

    def _should_remove(self, tracked: TrackedText, now: float) -> bool:
        policy = self.policy
        multiplier = self.persistence_multiplier
        frames = tracked.frames_since_last_seen
        age = now - tracked.last_seen

        if tracked.translation_failed and frames > FAILED_REMOVAL_FRAMES:
            return True

        if tracked.is_on_screen:
            bonus = policy.high_quality_bonus if tracked.quality_score > policy.high_quality_threshold else 1.0
            scale = policy.on_screen_persistence_factor * bonus * multiplier
            frame_limit = max(1, int(policy.base_removal_frames * scale))
            age_limit = policy.base_max_age_seconds * scale
        elif policy.off_screen_removal_frames is not None:
            frame_limit = max(1, policy.off_screen_removal_frames)
            age_limit = policy.off_screen_max_age_seconds if policy.off_screen_max_age_seconds is not None else math.inf
        else:
            if frames > int(multiplier):
                return True
            frame_limit = max(1, int(policy.base_removal_frames * multiplier))
            age_limit = policy.base_max_age_seconds * multiplier

        return frames >= frame_limit or age >= age_limit

    # -------------------------------------------------------------------------
    # Pending texts
    # -------------------------------------------------------------------------

    def _expire_pending(self, now: float):
        kept = []
        for pending in self._pending:
            if now - pending.last_seen > self.policy.pending_timeout_for(pending.is_cjk):
                logger.debug(f"Pending text '{pending.text}' expired after {pending.frames_seen} sightings")
            else:
                kept.append(pending)
        self._pending = kept

    def _register_pending(self, observations: list[Observation], now: float):
        refreshed: set[int] = set()
        registered = 0

        for observation in observations:
            text = observation.text.strip()
            if not text:
                continue
            box = observation.bounding_box
            is_cjk = has_cjk(text)

            if any(is_duplicate(tracked, text, box, is_cjk) for tracked in self._tracked):
                continue

            pending = next((p for p in self._pending if is_pending_match(p, text, box, is_cjk)), None)
            if pending is not None:
                # One sighting per pending entry per frame.
                if id(pending) in refreshed:
                    continue
                pending.frames_seen += 1
                pending.last_seen = now
                pending.bounding_box = box
                if observation.confidence >= pending.confidence:
                    pending.text = text
                    pending.confidence = observation.confidence
                refreshed.add(id(pending))
            else:
                pending = PendingText(
                    text=text,
                    bounding_box=box,
                    confidence=observation.confidence,
                    first_seen=now,
                    last_seen=now,
                    language=observation.language,
                    is_cjk=is_cjk,
                    is_vertical=observation.is_vertical,
                    orientation=observation.orientation,
                )
                self._pending.append(pending)
                refreshed.add(id(pending))
            registered += 1

        if registered > NOISE_FLOOD_WARNING:
            logger.warning(f"{registered} unmatched observations in one frame, OCR output may be noisy")

    def _promote_pending(self, now: float):
        remaining = []
        for pending in self._pending:
            if pending.frames_seen >= self.policy.min_frames_for(pending.is_cjk):
                self._tracked.append(self._promote(pending, now))
            else:
                remaining.append(pending)
        self._pending = remaining

    def _promote(self, pending: PendingText, now: float) -> TrackedText:
        box = pending.bounding_box
        tracked = TrackedText(
            id=self._next_id,
            text=pending.text,
            bounding_box=box,
            smoothed_box=box,
            confidence=pending.confidence,
            last_seen=now,
            detected_at=now,
            source_language=pending.language or detect_language(pending.text),
            is_cjk=pending.is_cjk,
            best_text=pending.text,
            best_confidence=pending.confidence,
            text_history=TemporalAccumulator(clock=self._clock),
        )
        self._next_id += 1

        if pending.is_vertical:
            tracked.is_vertical_text = True
            tracked.text_orientation = pending.orientation or math.pi / 2
        elif has_japanese(pending.text) and box.aspect_ratio > VERTICAL_ASPECT_RATIO:
            tracked.is_vertical_text = True
            tracked.text_orientation = math.pi / 2

        tracked.anchor_box = box
        if self.policy.predict_motion:
            tracked.predicted_box = box

        tracked.text_history.add_observation(pending.text, pending.confidence)

        cached = self.cache.get(pending.text)
        if cached is not None:
            tracked.translation = cached
            tracked.best_translation = cached
            tracked.is_placeholder = False
            tracked.detection_state = DetectionState.TRANSLATED

        update_quality(tracked, initial=True)
        update_visibility(tracked, self.policy.screen_margin, now)
        self._matched_ids.add(tracked.id)

        logger.debug(
            f"Promoted text {tracked.id} '{tracked.text}' after {pending.frames_seen} sightings "
            f"(state={tracked.detection_state.value})"
        )
        return tracked

    def _enforce_capacity(self):
        if len(self._tracked) <= self.policy.max_tracked:
            return
        # Newest first; on equal last_seen the later promotion (higher id) stays.
        self._tracked.sort(key=lambda tracked: (tracked.last_seen, tracked.id), reverse=True)
        for evicted in self._tracked[self.policy.max_tracked :]:
            logger.debug(f"Evicting text {evicted.id} '{evicted.text}' over capacity")
        del self._tracked[self.policy.max_tracked :]

    # -------------------------------------------------------------------------
    # Translation
    # -------------------------------------------------------------------------

    def _find_by_text(self, key: str) -> list[TrackedText]:
        """Tracked texts whose exact or normalized text equals a key."""
        normalized_key = normalize_for_matching(key)
        return [
            tracked
            for tracked in self._tracked
            if tracked.text == key or normalize_for_matching(tracked.text) == normalized_key
        ]

    def _translation_key_for(self, tracked: TrackedText, normalized_keys: Mapping[str, str]) -> str | None:
        """Translation key a tracked text should take its result from.

        An exact or normalized-text key wins; otherwise the most similar key
        at or above the fuzzy threshold, to tolerate OCR drift between the
        request and the response.

        Args:
            tracked: Tracked text to look up
            normalized_keys: Normalized key to original key

        Returns:
            Original key, or None if no key is close enough
        """
        if tracked.text in normalized_keys.values():
            return tracked.text

        normalized_text = normalize_for_matching(tracked.text)
        if normalized_text in normalized_keys:
            return normalized_keys[normalized_text]

        best = None
        best_similarity = TRANSLATION_FUZZY_SIMILARITY
        for normalized_key, key in normalized_keys.items():
            similarity = text_similarity(normalized_text, normalized_key)
            if similarity >= best_similarity:
                best = key
                best_similarity = similarity

        if best is not None:
            logger.warning(
                f"Text {tracked.id} '{tracked.text}' matched translation key '{best}' "
                f"by similarity {best_similarity:.2f}"
            )
        return best

    def _accept_translation(self, tracked: TrackedText, key: str, translation: str) -> bool:
        state = tracked.detection_state
        if state == DetectionState.DETECTED:
            state = apply_event(state, TranslationEvent.REQUEST)
        target = next_state(state, TranslationEvent.SUCCEED)
        if target is None:
            logger.debug(f"Ignored translation for text {tracked.id} in state {tracked.detection_state.value}")
            return False

        translation = translation.strip()
        tracked.detection_state = target
        tracked.translation = translation
        tracked.best_translation = translation
        tracked.translation_failed = False
        tracked.translation_started_at = None
        tracked.is_placeholder = False

        self.cache.set(key, translation)
        if tracked.text != key:
            self.cache.set(tracked.text, translation)
        return True

    def _reject_translation(self, tracked: TrackedText, translation: str):
        tracked.noise_count += 1
        tracked.translation_started_at = None
        logger.debug(f"Rejected translation '{translation}' for text {tracked.id} '{tracked.text}'")
        if tracked.detection_state == DetectionState.TRANSLATED:
            return
        tracked.detection_state = apply_event(tracked.detection_state, TranslationEvent.FAIL)
        tracked.translation_failed = True

    def update_translations(self, translations: Mapping[str, str]) -> list[TrackedText]:
        """Apply translation results to the tracked texts they belong to.

        Results are validated first; invalid results mark the text failed
        (unless it already holds a good translation) and count as noise.

        Args:
            translations: Source text to translated text

        Returns:
            Snapshot of the tracked set after the update
        """
        with self._lock:
            normalized_keys = {normalize_for_matching(key): key for key in translations}
            used: set[str] = set()
            for tracked in self._tracked:
                key = self._translation_key_for(tracked, normalized_keys)
                if key is None:
                    continue
                used.add(key)
                translation = translations[key]
                if is_valid_translation(tracked.text, translation):
                    self._accept_translation(tracked, key, translation)
                else:
                    self._reject_translation(tracked, translation)
                update_quality(tracked)

            for key in translations:
                if key not in used:
                    logger.warning(f"No tracked text for translation key '{key}'")
            snapshot = copy.deepcopy(self._tracked)

        if self.on_update is not None:
            self.on_update(snapshot)
        return snapshot

    def mark_translating(self, texts: Iterable[str]):
        """Record that translation requests were sent for these texts."""
        with self._lock:
            now = self._clock()
            for key in texts:
                for tracked in self._find_by_text(key):
                    tracked.detection_state = apply_event(tracked.detection_state, TranslationEvent.REQUEST)
                    tracked.translation_started_at = now

    def mark_translation_failed(self, texts: Iterable[str]):
        """Record failed translation requests.

        A text is marked failed once it has used up its attempts; before
        that it becomes eligible for another request.
        """
        with self._lock:
            for key in texts:
                for tracked in self._find_by_text(key):
                    tracked.translation_attempts += 1
                    tracked.translation_started_at = None
                    if tracked.translation_attempts >= MAX_TRANSLATION_ATTEMPTS:
                        tracked.translation_failed = True
                        tracked.detection_state = apply_event(tracked.detection_state, TranslationEvent.FAIL)
                        logger.info(f"Translation failed for text {tracked.id} '{tracked.text}'")

    def pending_translation_texts(self) -> list[str]:
        """Normalized texts that still need a translation request."""
        with self._lock:
            keys: list[str] = []
            for tracked in self._tracked:
                if not needs_translation(tracked):
                    continue
                key = normalize_for_matching(tracked.text)
                if key and key not in keys:
                    keys.append(key)
            return keys

    def translation_batches(self, target_language: str | None = None) -> list[TranslationBatch]:
        """Untranslated texts grouped by source language."""
        with self._lock:
            return build_translation_batches(self._tracked, target_language or self.target_language)

    # -------------------------------------------------------------------------
    # State access and control
    # -------------------------------------------------------------------------

    def tracked_texts(self) -> list[TrackedText]:
        """Copy of the current tracked set."""
        with self._lock:
            return copy.deepcopy(self._tracked)

    def pending_texts(self) -> list[PendingText]:
        """Copy of the texts waiting for promotion."""
        with self._lock:
            return copy.deepcopy(self._pending)

    def tracked_regions(self) -> list[BoundingBox]:
        """Expanded boxes of confident texts matched in the latest frame.

        OCR callers can skip these regions on the next pass.
        """
        with self._lock:
            return [
                tracked.bounding_box.expanded(TRACKED_REGION_EXPANSION)
                for tracked in self._tracked
                if tracked.id in self._matched_ids and tracked.confidence > TRACKED_REGION_MIN_CONFIDENCE
            ]

    def is_box_in_tracked_region(self, box: BoundingBox, threshold: float = 0.5) -> bool:
        """Check if at least `threshold` of a box lies in one tracked region."""
        return any(box.visible_fraction(region) >= threshold for region in self.tracked_regions())

    def set_scene_motion(self, motion: SceneMotion | str):
        """Scale removal thresholds from a scene classification."""
        self.persistence_multiplier = SceneMotion(motion).persistence_multiplier

    def set_mode(self, mode: TrackingMode | str):
        """Switch presets and start over with an empty tracked set."""
        with self._lock:
            self.policy = policy_for_mode(mode, max_tracked=self.policy.max_tracked)
            self._reset()
        logger.info(f"Tracking mode set to {self.policy.mode.value}")

    def clear(self):
        """Drop all tracked and pending texts."""
        with self._lock:
            self._reset()

    def _reset(self):
        self._tracked.clear()
        self._pending.clear()
        self._matched_ids.clear()
