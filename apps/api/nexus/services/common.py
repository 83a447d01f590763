"""Helpers shared by the resource services."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any

from pydantic import BaseModel

from nexus.core.logging_safety import safe_log_identifier
from nexus.domain.entities import EntityKind
from nexus.errors import ApiError


def requested_changes(payload: BaseModel) -> dict[str, Any]:
    """Fields the client explicitly sent with a non-null value, as model objects (not dumped)."""
    return {
        name: getattr(payload, name)
        for name in payload.model_fields_set
        if getattr(payload, name) is not None
    }


def require_text(value: str | None, *, field: str) -> str:
    """Reject missing or whitespace-only required text before any store access."""
    text = (value or "").strip()
    if not text:
        raise ApiError(
            status_code=422,
            code="VALIDATION_ERROR",
            message="Invalid request payload",
            details={"errors": [{"loc": [field], "message": f"{field} is required"}]},
        )
    return text


def log_status_transition(
    logger: logging.Logger,
    kind: EntityKind,
    entity_id: int,
    previous: Enum,
    current: Enum,
) -> None:
    if previous == current:
        return
    logger.info(
        "status.transitioned kind=%s entity_id=%s from=%s to=%s",
        kind.value,
        safe_log_identifier(entity_id, prefix="eid"),
        previous.value,
        current.value,
    )
