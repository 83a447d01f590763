"""Dubbing service layer."""

from typing import Any
import logging

from nexus.domain.entities import EntityKind
from nexus.domain.ownership import OwnerChainResolver
from nexus.errors import ApiError, not_found_error
from nexus.repositories.memory import DubbingRecord, InMemoryStore, StoreUnavailableError
from nexus.schemas.dubbing import Dubbing, UpdateDubbingRequest
from nexus.services.common import log_status_transition, requested_changes

logger = logging.getLogger(__name__)


class DubbingService:
    def __init__(self, store: InMemoryStore, *, strict_transitions: bool = True) -> None:
        self._store = store
        self._access = OwnerChainResolver(store)
        self._strict_transitions = strict_transitions

    def get_latest_dubbing(self, *, owner_id: int, video_id: int) -> Dubbing | None:
        try:
            video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
            record = self._store.latest_for_video(EntityKind.DUBBING, video.id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=dubbing.get")
            return None
        return self._to_dubbing(record) if record is not None else None

    def create_dubbing(
        self,
        *,
        owner_id: int,
        video_id: int,
        target_language: str,
        voice_profile: str,
        transcript_id: int | None = None,
        voice_params: dict[str, Any] | None = None,
    ) -> Dubbing:
        video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)

        if transcript_id is None:
            transcript = self._store.latest_for_video(EntityKind.TRANSCRIPT, video.id)
            if transcript is None:
                raise ApiError(
                    status_code=409,
                    code="TRANSCRIPT_REQUIRED",
                    message="Video has no transcript to dub",
                    details={"video_id": video.id},
                )
        else:
            transcript = self._access.authorize(EntityKind.TRANSCRIPT, transcript_id, owner_id)
            if transcript.video_id != video.id:
                raise not_found_error()

        record = self._store.create_dubbing(
            video_id=video.id,
            transcript_id=transcript.id,
            target_language=target_language,
            voice_profile=voice_profile,
            voice_params=voice_params,
        )
        return self._to_dubbing(record)

    def update_dubbing(self, *, owner_id: int, dubbing_id: int, payload: UpdateDubbingRequest) -> Dubbing:
        record = self._access.authorize(EntityKind.DUBBING, dubbing_id, owner_id)
        changes = requested_changes(payload)
        status = changes.pop("status", None)
        previous_status = record.status
        self._store.update_record(
            EntityKind.DUBBING,
            record,
            changes=changes,
            status=status,
            strict_transitions=self._strict_transitions,
        )
        log_status_transition(logger, EntityKind.DUBBING, record.id, previous_status, record.status)
        return self._to_dubbing(record)

    @staticmethod
    def _to_dubbing(record: DubbingRecord) -> Dubbing:
        return Dubbing(
            id=record.id,
            video_id=record.video_id,
            transcript_id=record.transcript_id,
            target_language=record.target_language,
            voice_profile=record.voice_profile,
            output_url=record.output_url,
            output_file_path=record.output_file_path,
            status=record.status,
            processing_time=record.processing_time,
            voice_params=record.voice_params,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
