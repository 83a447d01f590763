"""Rendered video service layer."""

import logging

from nexus.domain.entities import EntityKind
from nexus.domain.ownership import OwnerChainResolver
from nexus.errors import not_found_error
from nexus.repositories.memory import InMemoryStore, RenderedVideoRecord, StoreUnavailableError
from nexus.schemas.rendered_video import RenderedVideo, RenderType, UpdateRenderedVideoRequest
from nexus.services.common import log_status_transition, requested_changes

logger = logging.getLogger(__name__)


class RenderedVideoService:
    def __init__(self, store: InMemoryStore, *, strict_transitions: bool = True) -> None:
        self._store = store
        self._access = OwnerChainResolver(store)
        self._strict_transitions = strict_transitions

    def get_latest_rendered_video(self, *, owner_id: int, video_id: int) -> RenderedVideo | None:
        try:
            video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
            record = self._store.latest_for_video(EntityKind.RENDERED_VIDEO, video.id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=rendered_videos.get")
            return None
        return self._to_rendered_video(record) if record is not None else None

    def create_rendered_video(
        self,
        *,
        owner_id: int,
        video_id: int,
        render_type: RenderType,
        dubbing_id: int | None = None,
        target_language: str | None = None,
    ) -> RenderedVideo:
        video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
        if dubbing_id is not None:
            dubbing = self._access.authorize(EntityKind.DUBBING, dubbing_id, owner_id)
            if dubbing.video_id != video.id:
                raise not_found_error()
            if target_language is None:
                target_language = dubbing.target_language

        record = self._store.create_rendered_video(
            video_id=video.id,
            render_type=render_type,
            dubbing_id=dubbing_id,
            target_language=target_language,
        )
        return self._to_rendered_video(record)

    def update_rendered_video(
        self,
        *,
        owner_id: int,
        rendered_video_id: int,
        payload: UpdateRenderedVideoRequest,
    ) -> RenderedVideo:
        record = self._access.authorize(EntityKind.RENDERED_VIDEO, rendered_video_id, owner_id)
        changes = requested_changes(payload)
        status = changes.pop("status", None)
        previous_status = record.status
        self._store.update_record(
            EntityKind.RENDERED_VIDEO,
            record,
            changes=changes,
            status=status,
            strict_transitions=self._strict_transitions,
        )
        log_status_transition(logger, EntityKind.RENDERED_VIDEO, record.id, previous_status, record.status)
        return self._to_rendered_video(record)

    @staticmethod
    def _to_rendered_video(record: RenderedVideoRecord) -> RenderedVideo:
        return RenderedVideo(
            id=record.id,
            video_id=record.video_id,
            dubbing_id=record.dubbing_id,
            target_language=record.target_language,
            output_url=record.output_url,
            output_file_path=record.output_file_path,
            render_type=record.render_type,
            status=record.status,
            processing_time=record.processing_time,
            file_size=record.file_size,
            duration=record.duration,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
