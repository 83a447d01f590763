"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class TransitionErrorDetails(BaseModel):
    current_status: str
    attempted_status: str
    allowed_next_statuses: list[str] | None = None


class FsmTransitionError(BaseModel):
    code: Literal["FSM_TRANSITION_INVALID", "FSM_TERMINAL_IMMUTABLE"]
    message: str
    details: TransitionErrorDetails


class ValidationIssue(BaseModel):
    loc: list[str | int]
    message: str


class ValidationErrorDetails(BaseModel):
    errors: list[ValidationIssue]


class RequestValidationErrorResponse(BaseModel):
    code: Literal["VALIDATION_ERROR"]
    message: str
    details: ValidationErrorDetails


class StoreUnavailableErrorResponse(BaseModel):
    code: Literal["STORE_UNAVAILABLE"]
    message: str
