"""Dubbing routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from nexus.repositories.memory import UserRecord
from nexus.routes.dependencies import get_current_user, get_dubbing_service
from nexus.schemas.dubbing import CreateDubbingRequest, Dubbing, UpdateDubbingRequest
from nexus.schemas.error import ErrorResponse, FsmTransitionError, NoLeakNotFoundError
from nexus.services.dubbing import DubbingService

router = APIRouter(tags=["Dubbing"])


@router.get("/videos/{videoId}/dubbing", response_model=Dubbing | None)
async def get_dubbing(
    video_id: Annotated[int, Path(alias="videoId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[DubbingService, Depends(get_dubbing_service)],
) -> Dubbing | None:
    return service.get_latest_dubbing(owner_id=user.id, video_id=video_id)


@router.post(
    "/videos/{videoId}/dubbing",
    response_model=Dubbing,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": NoLeakNotFoundError}, 409: {"model": ErrorResponse}},
)
async def create_dubbing(
    video_id: Annotated[int, Path(alias="videoId")],
    payload: CreateDubbingRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[DubbingService, Depends(get_dubbing_service)],
) -> Dubbing:
    return service.create_dubbing(
        owner_id=user.id,
        video_id=video_id,
        target_language=payload.target_language,
        voice_profile=payload.voice_profile,
        transcript_id=payload.transcript_id,
        voice_params=payload.voice_params,
    )


@router.patch(
    "/dubbing/{dubbingId}",
    response_model=Dubbing,
    responses={404: {"model": NoLeakNotFoundError}, 409: {"model": FsmTransitionError}},
)
async def update_dubbing(
    dubbing_id: Annotated[int, Path(alias="dubbingId")],
    payload: UpdateDubbingRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[DubbingService, Depends(get_dubbing_service)],
) -> Dubbing:
    return service.update_dubbing(owner_id=user.id, dubbing_id=dubbing_id, payload=payload)
