"""Rendered video API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from nexus.schemas.fields import AbsoluteUrl, EntityId, LanguageCode
from nexus.schemas.status import ProcessingStatus


class RenderType(str, Enum):
    DUBBING = "dubbing"
    SUBTITLES = "subtitles"
    BOTH = "both"


class CreateRenderedVideoRequest(BaseModel):
    render_type: RenderType
    dubbing_id: EntityId | None = None
    target_language: LanguageCode | None = None


class UpdateRenderedVideoRequest(BaseModel):
    status: ProcessingStatus | None = None
    output_url: AbsoluteUrl | None = None
    output_file_path: str | None = None
    processing_time: int | None = Field(default=None, ge=0)
    file_size: int | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=0)


class RenderedVideo(BaseModel):
    id: int
    video_id: int
    dubbing_id: int | None = None
    target_language: str | None = None
    output_url: str | None = None
    output_file_path: str | None = None
    render_type: RenderType
    status: ProcessingStatus
    processing_time: int | None = None
    file_size: int | None = None
    duration: int | None = None
    created_at: datetime
    updated_at: datetime
