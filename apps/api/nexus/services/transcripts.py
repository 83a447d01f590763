"""Transcript service layer."""

import logging

from nexus.domain.entities import EntityKind
from nexus.domain.ownership import OwnerChainResolver
from nexus.repositories.memory import InMemoryStore, StoreUnavailableError, TranscriptRecord
from nexus.schemas.transcript import Transcript, UpdateTranscriptRequest
from nexus.services.common import log_status_transition, requested_changes

logger = logging.getLogger(__name__)


class TranscriptService:
    def __init__(self, store: InMemoryStore, *, strict_transitions: bool = True) -> None:
        self._store = store
        self._access = OwnerChainResolver(store)
        self._strict_transitions = strict_transitions

    def get_latest_transcript(self, *, owner_id: int, video_id: int) -> Transcript | None:
        try:
            video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
            record = self._store.latest_for_video(EntityKind.TRANSCRIPT, video.id)
        except StoreUnavailableError:
            logger.warning("store.read_degraded operation=transcription.get")
            return None
        return self._to_transcript(record) if record is not None else None

    def create_transcript(self, *, owner_id: int, video_id: int, language: str) -> Transcript:
        video = self._access.authorize(EntityKind.VIDEO, video_id, owner_id)
        record = self._store.create_transcript(video_id=video.id, language=language)
        return self._to_transcript(record)

    def update_transcript(
        self,
        *,
        owner_id: int,
        transcript_id: int,
        payload: UpdateTranscriptRequest,
    ) -> Transcript:
        record = self._access.authorize(EntityKind.TRANSCRIPT, transcript_id, owner_id)
        changes = requested_changes(payload)
        status = changes.pop("status", None)
        previous_status = record.status
        self._store.update_record(
            EntityKind.TRANSCRIPT,
            record,
            changes=changes,
            status=status,
            strict_transitions=self._strict_transitions,
        )
        log_status_transition(logger, EntityKind.TRANSCRIPT, record.id, previous_status, record.status)
        return self._to_transcript(record)

    @staticmethod
    def _to_transcript(record: TranscriptRecord) -> Transcript:
        return Transcript(
            id=record.id,
            video_id=record.video_id,
            language=record.language,
            content=record.content,
            segments=record.segments,
            status=record.status,
            processing_time=record.processing_time,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
