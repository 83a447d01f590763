"""User sign-in service layer."""

from datetime import UTC, datetime
import logging

from nexus.core.logging_safety import safe_log_identifier
from nexus.repositories.memory import InMemoryStore, StoreUnavailableError, UserRecord
from nexus.schemas.auth import AuthPrincipal, User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: InMemoryStore, *, owner_open_id: str | None = None) -> None:
        self._store = store
        self._owner_open_id = owner_open_id

    def sign_in(self, principal: AuthPrincipal) -> UserRecord:
        """Upsert the principal's user row and refresh ``last_signed_in``."""
        record = self._store.upsert_user(
            open_id=principal.open_id,
            name=principal.name,
            email=principal.email,
            login_method=principal.login_method,
            owner_open_id=self._owner_open_id,
        )
        logger.info(
            "user.upserted user_id=%s role=%s",
            safe_log_identifier(record.id, prefix="uid"),
            record.role.value,
        )
        return record

    def degraded_user(self, principal: AuthPrincipal) -> UserRecord:
        """Unsaved stand-in for a caller whose sign-in could not be written.

        Id 0 is never allocated, so any store read made with it finds nothing.
        """
        now = datetime.now(UTC)
        logger.warning(
            "store.read_degraded operation=auth.sign_in principal_id=%s",
            safe_log_identifier(principal.open_id, prefix="pid"),
        )
        return UserRecord(
            id=0,
            open_id=principal.open_id,
            role=UserRole.USER,
            created_at=now,
            updated_at=now,
            last_signed_in=now,
            name=principal.name,
            email=principal.email,
            login_method=principal.login_method,
        )

    def current_user(self, principal: AuthPrincipal | None) -> User | None:
        if principal is None:
            return None
        try:
            record = self.sign_in(principal)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=auth.me")
            return None
        return self.to_user(record)

    @staticmethod
    def to_user(record: UserRecord) -> User:
        return User(
            id=record.id,
            open_id=record.open_id,
            name=record.name,
            email=record.email,
            login_method=record.login_method,
            role=record.role,
            created_at=record.created_at,
            updated_at=record.updated_at,
            last_signed_in=record.last_signed_in,
        )
