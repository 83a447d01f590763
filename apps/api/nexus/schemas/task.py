"""Task API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from nexus.schemas.fields import EntityId, NonBlankStr
from nexus.schemas.status import ProcessingStatus


class TaskType(str, Enum):
    CAPTURE = "capture"
    TRANSCRIPTION = "transcription"
    DUBBING = "dubbing"
    RENDERING = "rendering"
    EXPORT = "export"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CreateTaskRequest(BaseModel):
    video_id: EntityId
    type: TaskType
    title: NonBlankStr
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM


class UpdateTaskRequest(BaseModel):
    title: NonBlankStr | None = None
    description: str | None = None
    status: ProcessingStatus | None = None
    priority: TaskPriority | None = None
    # Out-of-range values are clamped by the store rather than rejected.
    progress: int | None = None
    progress_message: str | None = None
    error_details: str | None = None


class Task(BaseModel):
    id: int
    user_id: int
    video_id: int
    type: TaskType
    title: str
    description: str | None = None
    status: ProcessingStatus
    priority: TaskPriority
    progress: int
    progress_message: str | None = None
    error_details: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
