"""Data models for tracker input and translation requests."""

from pydantic import BaseModel, ConfigDict, Field

from ocr_tracking.geometry import BoundingBox


class Observation(BaseModel):
    """One OCR detection in one frame."""

    model_config = ConfigDict(frozen=True)

    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    bounding_box: BoundingBox
    language: str | None = None
    is_vertical: bool = False
    orientation: float = 0.0


class Frame(BaseModel):
    """Observations of one processed frame, as recorded for replay."""

    timestamp: float | None = None
    observations: list[Observation] = Field(default_factory=list)


class TranslationBatch(BaseModel):
    """Texts sharing a source language, ready for the translation service."""

    source_language: str
    target_language: str
    texts: list[str]
