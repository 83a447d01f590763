"""In-memory entity store used by the API and tests."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from nexus.domain.entities import EntityKind
from nexus.domain.status_fsm import ensure_transition
from nexus.schemas.auth import UserRole
from nexus.schemas.rendered_video import RenderType
from nexus.schemas.status import ProcessingStatus, TranscriptStatus
from nexus.schemas.task import TaskPriority, TaskType
from nexus.schemas.transcript import TranscriptSegment

PROGRESS_MIN = 0
PROGRESS_MAX = 100

_TABLES: dict[EntityKind, str] = {
    EntityKind.USER: "users",
    EntityKind.VIDEO: "videos",
    EntityKind.TRANSCRIPT: "transcripts",
    EntityKind.DUBBING: "dubbing",
    EntityKind.RENDERED_VIDEO: "rendered_videos",
    EntityKind.TASK: "tasks",
    EntityKind.COMMENT: "comments",
}
_STATUS_ENUMS: dict[EntityKind, type[Enum]] = {
    EntityKind.VIDEO: ProcessingStatus,
    EntityKind.TRANSCRIPT: TranscriptStatus,
    EntityKind.DUBBING: ProcessingStatus,
    EntityKind.RENDERED_VIDEO: ProcessingStatus,
    EntityKind.TASK: ProcessingStatus,
}
_IMMUTABLE_FIELDS = frozenset({"id", "user_id", "video_id", "task_id", "created_at", "updated_at", "status"})
_TASK_FINISHED_STATUSES = frozenset({ProcessingStatus.COMPLETED, ProcessingStatus.ERROR, ProcessingStatus.CANCELLED})


class StoreError(Exception):
    """Base class for persistence-layer failures."""


class StoreUnavailableError(StoreError):
    """Raised when the store cannot serve reads or writes."""


class ReferenceIntegrityError(StoreError):
    """Raised when a child row would reference a missing or mismatched parent."""


def clamp_progress(value: int) -> int:
    return max(PROGRESS_MIN, min(PROGRESS_MAX, int(value)))


@dataclass(slots=True)
class UserRecord:
    id: int
    open_id: str
    role: UserRole
    created_at: datetime
    updated_at: datetime
    last_signed_in: datetime
    name: str | None = None
    email: str | None = None
    login_method: str | None = None


@dataclass(slots=True)
class VideoRecord:
    id: int
    user_id: int
    url: str
    file_path: str
    status: ProcessingStatus
    created_at: datetime
    updated_at: datetime
    title: str | None = None
    duration: int | None = None
    source_platform: str | None = None
    language: str | None = None
    file_size: int | None = None
    thumbnail_url: str | None = None


@dataclass(slots=True)
class TranscriptRecord:
    id: int
    video_id: int
    language: str
    content: str
    status: TranscriptStatus
    created_at: datetime
    updated_at: datetime
    segments: list[TranscriptSegment] | None = None
    processing_time: int | None = None


@dataclass(slots=True)
class DubbingRecord:
    id: int
    video_id: int
    transcript_id: int
    target_language: str
    status: ProcessingStatus
    created_at: datetime
    updated_at: datetime
    voice_profile: str | None = None
    output_url: str | None = None
    output_file_path: str | None = None
    processing_time: int | None = None
    voice_params: dict[str, Any] | None = None


@dataclass(slots=True)
class RenderedVideoRecord:
    id: int
    video_id: int
    render_type: RenderType
    status: ProcessingStatus
    created_at: datetime
    updated_at: datetime
    dubbing_id: int | None = None
    target_language: str | None = None
    output_url: str | None = None
    output_file_path: str | None = None
    processing_time: int | None = None
    file_size: int | None = None
    duration: int | None = None


@dataclass(slots=True)
class TaskRecord:
    id: int
    user_id: int
    video_id: int
    type: TaskType
    title: str
    status: ProcessingStatus
    priority: TaskPriority
    progress: int
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    progress_message: str | None = None
    error_details: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(slots=True)
class CommentRecord:
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class InMemoryStore:
    """Deterministic relational-style persistence for the API and tests.

    Integer ids are allocated per table. Child inserts verify their parents,
    deletes cascade to dependants, and ``transaction()`` restores every table
    if the wrapped block raises.
    """

    users: dict[int, UserRecord] = field(default_factory=dict)
    videos: dict[int, VideoRecord] = field(default_factory=dict)
    transcripts: dict[int, TranscriptRecord] = field(default_factory=dict)
    dubbing: dict[int, DubbingRecord] = field(default_factory=dict)
    rendered_videos: dict[int, RenderedVideoRecord] = field(default_factory=dict)
    tasks: dict[int, TaskRecord] = field(default_factory=dict)
    comments: dict[int, CommentRecord] = field(default_factory=dict)
    next_ids: dict[str, int] = field(default_factory=dict)
    write_count: int = 0
    available: bool = True
    task_write_failure_message: str | None = None
    _transaction_depth: int = 0

    # -- plumbing ---------------------------------------------------------

    def _ensure_available(self) -> None:
        if not self.available:
            raise StoreUnavailableError("Entity store is unavailable")

    def _table(self, kind: EntityKind) -> dict[int, Any]:
        return getattr(self, _TABLES[kind])

    def _allocate_id(self, kind: EntityKind) -> int:
        table_name = _TABLES[kind]
        next_id = self.next_ids.get(table_name, 1)
        self.next_ids[table_name] = next_id + 1
        return next_id

    def _snapshot(self) -> dict[str, Any]:
        state: dict[str, Any] = {name: deepcopy(getattr(self, name)) for name in _TABLES.values()}
        state["next_ids"] = dict(self.next_ids)
        state["write_count"] = self.write_count
        return state

    def _restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)

    @contextmanager
    def transaction(self) -> Iterator[InMemoryStore]:
        """Run a multi-step write atomically; nested blocks join the outer one."""
        self._ensure_available()
        if self._transaction_depth:
            self._transaction_depth += 1
            try:
                yield self
            finally:
                self._transaction_depth -= 1
            return

        snapshot = self._snapshot()
        self._transaction_depth = 1
        try:
            yield self
        except Exception:
            self._restore(snapshot)
            raise
        finally:
            self._transaction_depth = 0

    # -- generic reads ----------------------------------------------------

    def get_record(self, kind: EntityKind, entity_id: int | None) -> Any | None:
        self._ensure_available()
        if entity_id is None:
            return None
        return self._table(kind).get(entity_id)

    def _require_parent(self, kind: EntityKind, entity_id: int | None) -> Any:
        record = self.get_record(kind, entity_id)
        if record is None:
            raise ReferenceIntegrityError(f"{kind.value} {entity_id} does not exist")
        return record

    def latest_for_video(self, kind: EntityKind, video_id: int) -> Any | None:
        """Most recently created transcript, dubbing or rendered video for a video."""
        self._ensure_available()
        candidates = [record for record in self._table(kind).values() if record.video_id == video_id]
        if not candidates:
            return None
        return max(candidates, key=lambda record: record.id)

    # -- users ------------------------------------------------------------

    def get_user_by_open_id(self, open_id: str) -> UserRecord | None:
        self._ensure_available()
        for user in self.users.values():
            if user.open_id == open_id:
                return user
        return None

    def upsert_user(
        self,
        *,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
        owner_open_id: str | None = None,
        signed_in_at: datetime | None = None,
    ) -> UserRecord:
        """Insert or refresh a user keyed on ``open_id``; ``None`` fields keep stored values."""
        if not open_id:
            raise ValueError("User open_id is required for upsert")

        now = datetime.now(UTC)
        signed_in_at = signed_in_at or now
        if role is None and owner_open_id is not None and open_id == owner_open_id:
            role = UserRole.ADMIN

        user = self.get_user_by_open_id(open_id)
        if user is None:
            user = UserRecord(
                id=self._allocate_id(EntityKind.USER),
                open_id=open_id,
                role=role or UserRole.USER,
                created_at=now,
                updated_at=now,
                last_signed_in=signed_in_at,
                name=name,
                email=email,
                login_method=login_method,
            )
            self.users[user.id] = user
        else:
            if name is not None:
                user.name = name
            if email is not None:
                user.email = email
            if login_method is not None:
                user.login_method = login_method
            if role is not None:
                user.role = role
            user.last_signed_in = signed_in_at
            user.updated_at = now

        self.write_count += 1
        return user

    # -- inserts ----------------------------------------------------------

    def create_video(
        self,
        *,
        user_id: int,
        url: str,
        source_platform: str | None = None,
        title: str | None = None,
        language: str | None = None,
        file_path: str | None = None,
    ) -> VideoRecord:
        self._require_parent(EntityKind.USER, user_id)
        now = datetime.now(UTC)
        video_id = self._allocate_id(EntityKind.VIDEO)
        video = VideoRecord(
            id=video_id,
            user_id=user_id,
            url=url,
            file_path=file_path or f"storage/videos/{user_id}/{video_id}.mp4",
            status=ProcessingStatus.PENDING,
            created_at=now,
            updated_at=now,
            title=title,
            source_platform=source_platform,
            language=language,
        )
        self.videos[video.id] = video
        self.write_count += 1
        return video

    def create_transcript(
        self,
        *,
        video_id: int,
        language: str,
        content: str = "",
        segments: list[TranscriptSegment] | None = None,
    ) -> TranscriptRecord:
        self._require_parent(EntityKind.VIDEO, video_id)
        now = datetime.now(UTC)
        transcript = TranscriptRecord(
            id=self._allocate_id(EntityKind.TRANSCRIPT),
            video_id=video_id,
            language=language,
            content=content,
            status=TranscriptStatus.PENDING,
            created_at=now,
            updated_at=now,
            segments=segments,
        )
        self.transcripts[transcript.id] = transcript
        self.write_count += 1
        return transcript

    def create_dubbing(
        self,
        *,
        video_id: int,
        transcript_id: int,
        target_language: str,
        voice_profile: str | None = None,
        voice_params: dict[str, Any] | None = None,
    ) -> DubbingRecord:
        self._require_parent(EntityKind.VIDEO, video_id)
        transcript = self._require_parent(EntityKind.TRANSCRIPT, transcript_id)
        if transcript.video_id != video_id:
            raise ReferenceIntegrityError(f"transcript {transcript_id} does not belong to video {video_id}")

        now = datetime.now(UTC)
        dubbing = DubbingRecord(
            id=self._allocate_id(EntityKind.DUBBING),
            video_id=video_id,
            transcript_id=transcript_id,
            target_language=target_language,
            status=ProcessingStatus.PENDING,
            created_at=now,
            updated_at=now,
            voice_profile=voice_profile,
            voice_params=dict(voice_params) if voice_params is not None else None,
        )
        self.dubbing[dubbing.id] = dubbing
        self.write_count += 1
        return dubbing

    def create_rendered_video(
        self,
        *,
        video_id: int,
        render_type: RenderType,
        dubbing_id: int | None = None,
        target_language: str | None = None,
    ) -> RenderedVideoRecord:
        self._require_parent(EntityKind.VIDEO, video_id)
        if dubbing_id is not None:
            dubbing = self._require_parent(EntityKind.DUBBING, dubbing_id)
            if dubbing.video_id != video_id:
                raise ReferenceIntegrityError(f"dubbing {dubbing_id} does not belong to video {video_id}")

        now = datetime.now(UTC)
        rendered = RenderedVideoRecord(
            id=self._allocate_id(EntityKind.RENDERED_VIDEO),
            video_id=video_id,
            render_type=render_type,
            status=ProcessingStatus.PENDING,
            created_at=now,
            updated_at=now,
            dubbing_id=dubbing_id,
            target_language=target_language,
        )
        self.rendered_videos[rendered.id] = rendered
        self.write_count += 1
        return rendered

    def create_task(
        self,
        *,
        user_id: int,
        video_id: int,
        task_type: TaskType,
        title: str,
        description: str | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> TaskRecord:
        self._require_parent(EntityKind.USER, user_id)
        self._require_parent(EntityKind.VIDEO, video_id)
        if self.task_write_failure_message is not None:
            message = self.task_write_failure_message
            self.task_write_failure_message = None
            raise RuntimeError(message)

        now = datetime.now(UTC)
        task = TaskRecord(
            id=self._allocate_id(EntityKind.TASK),
            user_id=user_id,
            video_id=video_id,
            type=task_type,
            title=title,
            status=ProcessingStatus.PENDING,
            priority=priority,
            progress=PROGRESS_MIN,
            created_at=now,
            updated_at=now,
            description=description,
        )
        self.tasks[task.id] = task
        self.write_count += 1
        return task

    def create_comment(self, *, task_id: int, user_id: int, content: str) -> CommentRecord:
        self._require_parent(EntityKind.TASK, task_id)
        self._require_parent(EntityKind.USER, user_id)
        now = datetime.now(UTC)
        comment = CommentRecord(
            id=self._allocate_id(EntityKind.COMMENT),
            task_id=task_id,
            user_id=user_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.comments[comment.id] = comment
        self.write_count += 1
        return comment

    # -- listings ---------------------------------------------------------

    def list_videos_for_owner(self, user_id: int) -> list[VideoRecord]:
        self._ensure_available()
        return sorted((v for v in self.videos.values() if v.user_id == user_id), key=lambda v: v.id)

    def list_tasks_for_owner(self, user_id: int) -> list[TaskRecord]:
        self._ensure_available()
        return sorted((t for t in self.tasks.values() if t.user_id == user_id), key=lambda t: t.id)

    def list_comments_for_task(self, task_id: int) -> list[CommentRecord]:
        self._ensure_available()
        return sorted((c for c in self.comments.values() if c.task_id == task_id), key=lambda c: c.id)

    # -- updates ----------------------------------------------------------

    def update_record(
        self,
        kind: EntityKind,
        record: Any,
        *,
        changes: dict[str, Any] | None = None,
        status: Enum | None = None,
        strict_transitions: bool = True,
    ) -> Any:
        """Apply field changes and an optional status transition as one write.

        The transition is validated before anything is touched, so a rejected
        status leaves the record unchanged. No-op updates are not counted.
        """
        self._ensure_available()
        changes = {key: value for key, value in (changes or {}).items() if key not in _IMMUTABLE_FIELDS}
        for key in changes:
            if not hasattr(record, key):
                raise AttributeError(f"{kind.value} has no field {key!r}")

        status_changed = False
        if status is not None:
            statuses = _STATUS_ENUMS[kind]
            ensure_transition(record.status, status, statuses=statuses, strict=strict_transitions)
            status = statuses(status.value if isinstance(status, Enum) else status)
            status_changed = status != record.status

        if "progress" in changes and changes["progress"] is not None:
            changes["progress"] = clamp_progress(changes["progress"])

        field_changes = {key: value for key, value in changes.items() if getattr(record, key) != value}
        if not field_changes and not status_changed:
            return record

        now = datetime.now(UTC)
        for key, value in field_changes.items():
            setattr(record, key, value)
        if status_changed:
            record.status = status
            if kind is EntityKind.TASK:
                self._apply_task_status_effects(record, now=now)
        record.updated_at = now
        self.write_count += 1
        return record

    @staticmethod
    def _apply_task_status_effects(task: TaskRecord, *, now: datetime) -> None:
        if task.status is ProcessingStatus.PROCESSING and task.started_at is None:
            task.started_at = now
        if task.status in _TASK_FINISHED_STATUSES:
            task.completed_at = now
        if task.status is ProcessingStatus.COMPLETED:
            task.progress = PROGRESS_MAX

    # -- deletes ----------------------------------------------------------

    def delete_record(self, kind: EntityKind, entity_id: int) -> None:
        """Hard-delete a row and every row that references it."""
        with self.transaction():
            table = self._table(kind)
            if entity_id not in table:
                raise ReferenceIntegrityError(f"{kind.value} {entity_id} does not exist")

            if kind is EntityKind.VIDEO:
                for task_id in [t.id for t in self.tasks.values() if t.video_id == entity_id]:
                    self.delete_record(EntityKind.TASK, task_id)
                for child_kind in (EntityKind.RENDERED_VIDEO, EntityKind.DUBBING, EntityKind.TRANSCRIPT):
                    child_table = self._table(child_kind)
                    for child_id in [c.id for c in child_table.values() if c.video_id == entity_id]:
                        del child_table[child_id]
                        self.write_count += 1
            elif kind is EntityKind.TASK:
                for comment_id in [c.id for c in self.comments.values() if c.task_id == entity_id]:
                    del self.comments[comment_id]
                    self.write_count += 1

            del table[entity_id]
            self.write_count += 1
