"""Transcription routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from nexus.repositories.memory import UserRecord
from nexus.routes.dependencies import get_current_user, get_transcript_service
from nexus.schemas.error import FsmTransitionError, NoLeakNotFoundError
from nexus.schemas.transcript import CreateTranscriptRequest, Transcript, UpdateTranscriptRequest
from nexus.services.transcripts import TranscriptService

router = APIRouter(tags=["Transcription"])


@router.get("/videos/{videoId}/transcript", response_model=Transcript | None)
async def get_transcript(
    video_id: Annotated[int, Path(alias="videoId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TranscriptService, Depends(get_transcript_service)],
) -> Transcript | None:
    return service.get_latest_transcript(owner_id=user.id, video_id=video_id)


@router.post(
    "/videos/{videoId}/transcript",
    response_model=Transcript,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def create_transcript(
    video_id: Annotated[int, Path(alias="videoId")],
    payload: CreateTranscriptRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TranscriptService, Depends(get_transcript_service)],
) -> Transcript:
    return service.create_transcript(owner_id=user.id, video_id=video_id, language=payload.language)


@router.patch(
    "/transcripts/{transcriptId}",
    response_model=Transcript,
    responses={404: {"model": NoLeakNotFoundError}, 409: {"model": FsmTransitionError}},
)
async def update_transcript(
    transcript_id: Annotated[int, Path(alias="transcriptId")],
    payload: UpdateTranscriptRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TranscriptService, Depends(get_transcript_service)],
) -> Transcript:
    return service.update_transcript(owner_id=user.id, transcript_id=transcript_id, payload=payload)
