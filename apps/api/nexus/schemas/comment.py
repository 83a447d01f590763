"""Comment API schemas."""

from datetime import datetime

from pydantic import BaseModel

from nexus.schemas.fields import NonBlankStr


class CreateCommentRequest(BaseModel):
    content: NonBlankStr


class Comment(BaseModel):
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime
