"""Processing status transition rules.

The same graph applies to videos, transcripts, dubbing, rendered videos and
tasks; each kind only ever sees the members of its own status enum, so a
transcript can never move to ``cancelled``.

    pending    -> processing | error | cancelled
    processing -> completed | error | cancelled
    error      -> pending | processing
    cancelled  -> pending
    completed  -> (terminal)

Re-applying the current status is a no-op and always accepted. With
``strict=False`` any member of the kind's enum may follow any other.
"""

from enum import Enum

from nexus.errors import ApiError
from nexus.schemas.status import ProcessingStatus

_TERMINAL_STATES: set[str] = {"completed"}

_ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "error", "cancelled"},
    "processing": {"completed", "error", "cancelled"},
    "error": {"pending", "processing"},
    "cancelled": {"pending"},
    "completed": set(),
}


def _value(status: Enum | str) -> str:
    return status.value if isinstance(status, Enum) else str(status)


def allowed_next_statuses(
    status: Enum | str,
    *,
    statuses: type[Enum] = ProcessingStatus,
    strict: bool = True,
) -> list[str]:
    """Return deterministically ordered allowed successors for a status."""
    current = _value(status)
    members = {member.value for member in statuses}
    if strict:
        candidates = _ALLOWED_TRANSITIONS.get(current, set()) & members
    else:
        candidates = members - {current}
    return sorted(candidates)


def ensure_transition(
    old_status: Enum | str,
    new_status: Enum | str,
    *,
    statuses: type[Enum] = ProcessingStatus,
    strict: bool = True,
) -> None:
    """Validate transition according to lifecycle rules."""
    current = _value(old_status)
    attempted = _value(new_status)
    if current == attempted:
        return

    members = {member.value for member in statuses}
    allowed_next = allowed_next_statuses(current, statuses=statuses, strict=strict)

    if strict and current in _TERMINAL_STATES:
        raise ApiError(
            status_code=409,
            code="FSM_TERMINAL_IMMUTABLE",
            message="Terminal state cannot be mutated",
            details={
                "current_status": current,
                "attempted_status": attempted,
                "allowed_next_statuses": [],
            },
        )

    if attempted not in members or attempted not in allowed_next:
        raise ApiError(
            status_code=409,
            code="FSM_TRANSITION_INVALID",
            message="Invalid status transition",
            details={
                "current_status": current,
                "attempted_status": attempted,
                "allowed_next_statuses": allowed_next,
            },
        )
