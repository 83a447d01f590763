"""Video routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from nexus.repositories.memory import UserRecord
from nexus.routes.dependencies import get_current_user, get_video_service
from nexus.schemas.error import ErrorResponse, FsmTransitionError, NoLeakNotFoundError
from nexus.schemas.video import SubmitVideoRequest, UpdateVideoRequest, Video
from nexus.services.videos import VideoService

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.get("", response_model=list[Video], responses={401: {"model": ErrorResponse}})
async def list_videos(
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> list[Video]:
    return service.list_videos(owner_id=user.id)


@router.get(
    "/{videoId}",
    response_model=Video,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def get_video(
    video_id: Annotated[int, Path(alias="videoId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Video:
    return service.get_video(owner_id=user.id, video_id=video_id)


@router.post(
    "",
    response_model=Video,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_video(
    payload: SubmitVideoRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Video:
    return service.submit_video(
        owner_id=user.id,
        url=payload.url,
        target_language=payload.target_language,
        voice_profile=payload.voice_profile,
    )


@router.patch(
    "/{videoId}",
    response_model=Video,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": NoLeakNotFoundError},
        409: {"model": FsmTransitionError},
    },
)
async def update_video(
    video_id: Annotated[int, Path(alias="videoId")],
    payload: UpdateVideoRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Video:
    return service.update_video(owner_id=user.id, video_id=video_id, payload=payload)


@router.delete(
    "/{videoId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_video(
    video_id: Annotated[int, Path(alias="videoId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Response:
    service.delete_video(owner_id=user.id, video_id=video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
