"""Detection/translation state machine for tracked texts.

Every state change goes through `TRANSITIONS`; an event missing from the
table for the current state is not allowed and leaves the state unchanged.
"""

import logging
from enum import Enum
from typing import Final

logger = logging.getLogger(__name__)


class DetectionState(str, Enum):
    """Translation lifecycle of a tracked text."""

    DETECTED = "detected"
    TRANSLATING = "translating"
    TRANSLATED = "translated"
    FAILED = "failed"


class TranslationEvent(str, Enum):
    """Events driving `DetectionState` changes."""

    REQUEST = "request"  # selected for a translation request
    SUCCEED = "succeed"  # a valid translation was applied
    FAIL = "fail"  # invalid result or attempts exhausted
    PIVOT = "pivot"  # matched text changed content


TRANSITIONS: Final[dict[tuple[DetectionState, TranslationEvent], DetectionState]] = {
    (DetectionState.DETECTED, TranslationEvent.REQUEST): DetectionState.TRANSLATING,
    (DetectionState.DETECTED, TranslationEvent.FAIL): DetectionState.FAILED,
    (DetectionState.DETECTED, TranslationEvent.PIVOT): DetectionState.DETECTED,
    (DetectionState.TRANSLATING, TranslationEvent.SUCCEED): DetectionState.TRANSLATED,
    (DetectionState.TRANSLATING, TranslationEvent.FAIL): DetectionState.FAILED,
    (DetectionState.TRANSLATING, TranslationEvent.PIVOT): DetectionState.DETECTED,
    (DetectionState.TRANSLATED, TranslationEvent.SUCCEED): DetectionState.TRANSLATED,
    (DetectionState.TRANSLATED, TranslationEvent.PIVOT): DetectionState.DETECTED,
    (DetectionState.FAILED, TranslationEvent.PIVOT): DetectionState.DETECTED,
}


def next_state(state: DetectionState, event: TranslationEvent) -> DetectionState | None:
    """Look up the state an event leads to.

    Returns:
        The new state, or None if the event is not allowed in `state`
    """
    return TRANSITIONS.get((state, event))


def apply_event(state: DetectionState, event: TranslationEvent) -> DetectionState:
    """Apply an event, keeping the current state when it is not allowed."""
    target = next_state(state, event)
    if target is None:
        logger.debug(f"Ignored {event.value} in state {state.value}")
        return state
    return target
