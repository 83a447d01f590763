"""Owner-chain authorization shared by every resource service."""

from __future__ import annotations

from typing import Any

from nexus.domain.entities import EntityKind
from nexus.errors import not_found_error
from nexus.repositories.memory import InMemoryStore

# Rows without a ``user_id`` column inherit ownership from the row they point at.
_PARENT_LINKS: dict[EntityKind, tuple[EntityKind, str]] = {
    EntityKind.TRANSCRIPT: (EntityKind.VIDEO, "video_id"),
    EntityKind.DUBBING: (EntityKind.VIDEO, "video_id"),
    EntityKind.RENDERED_VIDEO: (EntityKind.VIDEO, "video_id"),
}


class OwnerChainResolver:
    """Loads an entity and verifies the caller owns it, directly or through its parents.

    Missing and foreign-owned entities raise the same ``RESOURCE_NOT_FOUND``
    error. Nothing is cached: each call re-reads the store.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def resolve_owner_id(self, kind: EntityKind, record: Any) -> int | None:
        current_kind, current = kind, record
        while current is not None:
            owner_id = getattr(current, "user_id", None)
            if owner_id is not None:
                return owner_id
            link = _PARENT_LINKS.get(current_kind)
            if link is None:
                return None
            parent_kind, parent_attr = link
            current = self._store.get_record(parent_kind, getattr(current, parent_attr))
            current_kind = parent_kind
        return None

    def authorize(self, kind: EntityKind, entity_id: int | None, user_id: int | None) -> Any:
        if entity_id is None or user_id is None:
            raise not_found_error()

        record = self._store.get_record(kind, entity_id)
        if record is None or self.resolve_owner_id(kind, record) != user_id:
            raise not_found_error()
        return record
