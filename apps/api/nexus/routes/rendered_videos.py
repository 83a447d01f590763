"""Rendered video routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from nexus.repositories.memory import UserRecord
from nexus.routes.dependencies import get_current_user, get_rendered_video_service
from nexus.schemas.error import FsmTransitionError, NoLeakNotFoundError
from nexus.schemas.rendered_video import CreateRenderedVideoRequest, RenderedVideo, UpdateRenderedVideoRequest
from nexus.services.rendered_videos import RenderedVideoService

router = APIRouter(tags=["RenderedVideos"])


@router.get("/videos/{videoId}/rendered-videos", response_model=RenderedVideo | None)
async def get_rendered_video(
    video_id: Annotated[int, Path(alias="videoId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[RenderedVideoService, Depends(get_rendered_video_service)],
) -> RenderedVideo | None:
    return service.get_latest_rendered_video(owner_id=user.id, video_id=video_id)


@router.post(
    "/videos/{videoId}/rendered-videos",
    response_model=RenderedVideo,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def create_rendered_video(
    video_id: Annotated[int, Path(alias="videoId")],
    payload: CreateRenderedVideoRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[RenderedVideoService, Depends(get_rendered_video_service)],
) -> RenderedVideo:
    return service.create_rendered_video(
        owner_id=user.id,
        video_id=video_id,
        render_type=payload.render_type,
        dubbing_id=payload.dubbing_id,
        target_language=payload.target_language,
    )


@router.patch(
    "/rendered-videos/{renderedVideoId}",
    response_model=RenderedVideo,
    responses={404: {"model": NoLeakNotFoundError}, 409: {"model": FsmTransitionError}},
)
async def update_rendered_video(
    rendered_video_id: Annotated[int, Path(alias="renderedVideoId")],
    payload: UpdateRenderedVideoRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[RenderedVideoService, Depends(get_rendered_video_service)],
) -> RenderedVideo:
    return service.update_rendered_video(
        owner_id=user.id,
        rendered_video_id=rendered_video_id,
        payload=payload,
    )
