"""Comment service layer."""

import logging

from nexus.domain.entities import EntityKind
from nexus.domain.ownership import OwnerChainResolver
from nexus.repositories.memory import CommentRecord, InMemoryStore, StoreUnavailableError
from nexus.schemas.comment import Comment
from nexus.services.common import require_text

logger = logging.getLogger(__name__)


class CommentService:
    """Comments hang off a task: only the task owner may list or add them, only the author may delete one."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._access = OwnerChainResolver(store)

    def list_comments(self, *, owner_id: int, task_id: int) -> list[Comment]:
        try:
            task = self._access.authorize(EntityKind.TASK, task_id, owner_id)
            records = self._store.list_comments_for_task(task.id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=comments.list")
            return []
        return [self._to_comment(record) for record in records]

    def create_comment(self, *, owner_id: int, task_id: int, content: str) -> Comment:
        content = require_text(content, field="content")
        task = self._access.authorize(EntityKind.TASK, task_id, owner_id)
        record = self._store.create_comment(task_id=task.id, user_id=owner_id, content=content)
        return self._to_comment(record)

    def delete_comment(self, *, owner_id: int, comment_id: int) -> None:
        record = self._access.authorize(EntityKind.COMMENT, comment_id, owner_id)
        self._store.delete_record(EntityKind.COMMENT, record.id)

    @staticmethod
    def _to_comment(record: CommentRecord) -> Comment:
        return Comment(
            id=record.id,
            task_id=record.task_id,
            user_id=record.user_id,
            content=record.content,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
