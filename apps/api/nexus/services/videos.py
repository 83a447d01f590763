"""Video service layer."""

import logging

from nexus.core.logging_safety import safe_log_identifier
from nexus.domain.entities import EntityKind
from nexus.domain.ownership import OwnerChainResolver
from nexus.domain.platform import infer_platform
from nexus.errors import ApiError, not_found_error
from nexus.repositories.memory import InMemoryStore, StoreUnavailableError, VideoRecord
from nexus.schemas.task import TaskType
from nexus.schemas.video import UpdateVideoRequest, Video
from nexus.services.common import log_status_transition, requested_changes

logger = logging.getLogger(__name__)

_CAPTURE_TASK_TITLE = "Video Capture"


class VideoService:
    def __init__(self, store: InMemoryStore, *, strict_transitions: bool = True) -> None:
        self._store = store
        self._access = OwnerChainResolver(store)
        self._strict_transitions = strict_transitions

    def list_videos(self, *, owner_id: int) -> list[Video]:
        try:
            records = self._store.list_videos_for_owner(owner_id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=videos.list")
            return []
        return [self._to_video(record) for record in records]

    def get_video(self, *, owner_id: int, video_id: int) -> Video:
        try:
            record = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=videos.get")
            raise not_found_error() from None
        return self._to_video(record)

    def submit_video(
        self,
        *,
        owner_id: int,
        url: str,
        target_language: str,
        voice_profile: str | None = None,
    ) -> Video:
        """Create the video and its capture task together; neither survives if the other fails."""
        platform = infer_platform(url)
        description = f"Capturing video from {url} for dubbing into {target_language}"
        if voice_profile:
            description = f"{description} with voice {voice_profile}"

        try:
            with self._store.transaction():
                video = self._store.create_video(user_id=owner_id, url=url, source_platform=platform)
                self._store.create_task(
                    user_id=owner_id,
                    video_id=video.id,
                    task_type=TaskType.CAPTURE,
                    title=_CAPTURE_TASK_TITLE,
                    description=description,
                )
        except RuntimeError as exc:
            logger.warning(
                "store.write_failed operation=videos.submit code=STORE_WRITE_FAILED reason=%s",
                type(exc).__name__,
            )
            raise ApiError(
                status_code=500,
                code="STORE_WRITE_FAILED",
                message="Failed to persist video submission",
            ) from exc

        logger.info(
            "video.submitted video_id=%s user_id=%s platform=%s",
            safe_log_identifier(video.id, prefix="vid"),
            safe_log_identifier(owner_id, prefix="uid"),
            platform,
        )
        return self._to_video(video)

    def update_video(self, *, owner_id: int, video_id: int, payload: UpdateVideoRequest) -> Video:
        record = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
        changes = requested_changes(payload)
        status = changes.pop("status", None)
        previous_status = record.status
        self._store.update_record(
            EntityKind.VIDEO,
            record,
            changes=changes,
            status=status,
            strict_transitions=self._strict_transitions,
        )
        log_status_transition(logger, EntityKind.VIDEO, record.id, previous_status, record.status)
        return self._to_video(record)

    def delete_video(self, *, owner_id: int, video_id: int) -> None:
        record = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
        self._store.delete_record(EntityKind.VIDEO, record.id)
        logger.info("video.deleted video_id=%s", safe_log_identifier(record.id, prefix="vid"))

    @staticmethod
    def _to_video(record: VideoRecord) -> Video:
        return Video(
            id=record.id,
            user_id=record.user_id,
            url=record.url,
            title=record.title,
            duration=record.duration,
            file_path=record.file_path,
            status=record.status,
            source_platform=record.source_platform,
            language=record.language,
            file_size=record.file_size,
            thumbnail_url=record.thumbnail_url,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
