"""Task service layer."""

import logging

from nexus.core.logging_safety import safe_log_identifier
from nexus.domain.entities import EntityKind
from nexus.domain.ownership import OwnerChainResolver
from nexus.errors import not_found_error
from nexus.repositories.memory import InMemoryStore, StoreUnavailableError, TaskRecord
from nexus.schemas.task import Task, TaskPriority, TaskType, UpdateTaskRequest
from nexus.services.common import log_status_transition, require_text, requested_changes

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, store: InMemoryStore, *, strict_transitions: bool = True) -> None:
        self._store = store
        self._access = OwnerChainResolver(store)
        self._strict_transitions = strict_transitions

    def list_tasks(self, *, owner_id: int) -> list[Task]:
        try:
            records = self._store.list_tasks_for_owner(owner_id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=tasks.list")
            return []
        return [self._to_task(record) for record in records]

    def get_task(self, *, owner_id: int, task_id: int) -> Task:
        try:
            record = self._access.authorize(EntityKind.TASK, task_id, owner_id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=tasks.get")
            raise not_found_error() from None
        return self._to_task(record)

    def create_task(
        self,
        *,
        owner_id: int,
        video_id: int,
        task_type: TaskType,
        title: str,
        description: str | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Task:
        title = require_text(title, field="title")
        video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
        record = self._store.create_task(
            user_id=owner_id,
            video_id=video.id,
            task_type=task_type,
            title=title,
            description=description,
            priority=priority,
        )
        return self._to_task(record)

    def update_task(self, *, owner_id: int, task_id: int, payload: UpdateTaskRequest) -> Task:
        record = self._access.authorize(EntityKind.TASK, task_id, owner_id)
        changes = requested_changes(payload)
        status = changes.pop("status", None)
        previous_status = record.status
        self._store.update_record(
            EntityKind.TASK,
            record,
            changes=changes,
            status=status,
            strict_transitions=self._strict_transitions,
        )
        log_status_transition(logger, EntityKind.TASK, record.id, previous_status, record.status)
        return self._to_task(record)

    def delete_task(self, *, owner_id: int, task_id: int) -> None:
        record = self._access.authorize(EntityKind.TASK, task_id, owner_id)
        self._store.delete_record(EntityKind.TASK, record.id)
        logger.info("task.deleted task_id=%s", safe_log_identifier(record.id, prefix="tid"))

    @staticmethod
    def _to_task(record: TaskRecord) -> Task:
        return Task(
            id=record.id,
            user_id=record.user_id,
            video_id=record.video_id,
            type=record.type,
            title=record.title,
            description=record.description,
            status=record.status,
            priority=record.priority,
            progress=record.progress,
            progress_message=record.progress_message,
            error_details=record.error_details,
            started_at=record.started_at,
            completed_at=record.completed_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
