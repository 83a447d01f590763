"""Dubbing API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from nexus.schemas.fields import AbsoluteUrl, EntityId, LanguageCode, NonBlankStr
from nexus.schemas.status import ProcessingStatus


class CreateDubbingRequest(BaseModel):
    target_language: LanguageCode
    voice_profile: NonBlankStr
    transcript_id: EntityId | None = None
    voice_params: dict[str, Any] | None = None


class UpdateDubbingRequest(BaseModel):
    status: ProcessingStatus | None = None
    output_url: AbsoluteUrl | None = None
    output_file_path: str | None = None
    processing_time: int | None = Field(default=None, ge=0)
    voice_params: dict[str, Any] | None = None


class Dubbing(BaseModel):
    id: int
    video_id: int
    transcript_id: int
    target_language: str
    voice_profile: str | None = None
    output_url: str | None = None
    output_file_path: str | None = None
    status: ProcessingStatus
    processing_time: int | None = None
    voice_params: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime
