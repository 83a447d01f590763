"""Video API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from nexus.schemas.fields import AbsoluteUrl, LanguageCode, NonBlankStr
from nexus.schemas.status import ProcessingStatus


class SubmitVideoRequest(BaseModel):
    url: AbsoluteUrl
    target_language: LanguageCode
    voice_profile: str | None = None


class UpdateVideoRequest(BaseModel):
    title: NonBlankStr | None = None
    language: LanguageCode | None = None
    duration: int | None = Field(default=None, ge=0)
    file_size: int | None = Field(default=None, ge=0)
    thumbnail_url: AbsoluteUrl | None = None
    status: ProcessingStatus | None = None


class Video(BaseModel):
    id: int
    user_id: int
    url: str
    title: str | None = None
    duration: int | None = None
    file_path: str
    status: ProcessingStatus
    source_platform: str | None = None
    language: str | None = None
    file_size: int | None = None
    thumbnail_url: str | None = None
    created_at: datetime
    updated_at: datetime
