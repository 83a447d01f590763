"""Authentication schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class AuthPrincipal(BaseModel):
    """Normalized identity returned by a token verifier, before it is bound to a stored user."""

    open_id: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None
    login_method: str | None = None


class User(BaseModel):
    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    login_method: str | None = None
    role: UserRole
    created_at: datetime
    updated_at: datetime
    last_signed_in: datetime


class LogoutResponse(BaseModel):
    success: bool
