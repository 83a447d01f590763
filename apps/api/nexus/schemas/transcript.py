"""Transcript API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from nexus.schemas.fields import LanguageCode
from nexus.schemas.status import TranscriptStatus


class TranscriptSegment(BaseModel):
    start: float = Field(ge=0)
    end: float = Field(ge=0)
    text: str

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "TranscriptSegment":
        if self.end < self.start:
            raise ValueError("Segment end must not precede its start")
        return self


class CreateTranscriptRequest(BaseModel):
    language: LanguageCode


class UpdateTranscriptRequest(BaseModel):
    status: TranscriptStatus | None = None
    content: str | None = None
    segments: list[TranscriptSegment] | None = None
    processing_time: int | None = Field(default=None, ge=0)


class Transcript(BaseModel):
    id: int
    video_id: int
    language: str
    content: str
    segments: list[TranscriptSegment] | None = None
    status: TranscriptStatus
    processing_time: int | None = None
    created_at: datetime
    updated_at: datetime
