"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nexus.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from nexus.core.config import Settings, get_settings
from nexus.core.logging_safety import safe_log_identifier
from nexus.errors import ApiError
from nexus.repositories.memory import InMemoryStore, StoreUnavailableError, UserRecord
from nexus.schemas.auth import AuthPrincipal
from nexus.services.comments import CommentService
from nexus.services.dubbing import DubbingService
from nexus.services.rendered_videos import RenderedVideoService
from nexus.services.tasks import TaskService
from nexus.services.transcripts import TranscriptService
from nexus.services.users import UserService
from nexus.services.videos import VideoService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)

UNAUTHENTICATED_MESSAGE = "Unauthorized: User must be logged in"
_READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


async def get_optional_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthPrincipal | None:
    """Resolve the caller from a bearer token, falling back to the session cookie.

    An absent or unverifiable token yields ``None``; protected routes turn that
    into a 401 through ``get_current_user``.
    """
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")

    token: str | None = None
    source = "bearer"
    if credentials is not None and credentials.scheme.lower() == "bearer" and credentials.credentials:
        token = credentials.credentials
    else:
        token = request.cookies.get(settings.session_cookie_name) or None
        source = "cookie"

    if token is None:
        logger.info(
            "auth.anonymous correlation_id=%s method=%s path=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        return None

    try:
        principal = verifier.verify_token(token)
    except AuthVerificationError:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s source=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
            source,
        )
        return None

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s source=%s principal_id=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        source,
        safe_log_identifier(principal.open_id, prefix="pid"),
    )
    request.state.auth_principal = principal
    return principal


def get_user_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserService:
    return UserService(store, owner_open_id=settings.owner_open_id)


async def get_current_user(
    request: Request,
    principal: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserRecord:
    """Protected-route guard: upsert the signed-in user or fail with 401.

    When the store is down, reads continue with an unsaved user so the
    services can answer with their degraded results; writes still fail.
    """
    if principal is None:
        raise _auth_error(UNAUTHENTICATED_MESSAGE)

    try:
        user = users.sign_in(principal)
    except StoreUnavailableError:
        if request.method.upper() not in _READ_METHODS:
            raise
        user = users.degraded_user(principal)
    request.state.current_user = user
    return user


def get_video_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoService:
    return VideoService(store, strict_transitions=settings.strict_status_transitions)


def get_transcript_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TranscriptService:
    return TranscriptService(store, strict_transitions=settings.strict_status_transitions)


def get_dubbing_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DubbingService:
    return DubbingService(store, strict_transitions=settings.strict_status_transitions)


def get_rendered_video_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RenderedVideoService:
    return RenderedVideoService(store, strict_transitions=settings.strict_status_transitions)


def get_task_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaskService:
    return TaskService(store, strict_transitions=settings.strict_status_transitions)


def get_comment_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> CommentService:
    return CommentService(store)
