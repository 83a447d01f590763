"""Comment routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from nexus.repositories.memory import UserRecord
from nexus.routes.dependencies import get_comment_service, get_current_user
from nexus.schemas.comment import Comment, CreateCommentRequest
from nexus.schemas.error import NoLeakNotFoundError
from nexus.services.comments import CommentService

router = APIRouter(tags=["Comments"])


@router.get(
    "/tasks/{taskId}/comments",
    response_model=list[Comment],
    responses={404: {"model": NoLeakNotFoundError}},
)
async def list_comments(
    task_id: Annotated[int, Path(alias="taskId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> list[Comment]:
    return service.list_comments(owner_id=user.id, task_id=task_id)


@router.post(
    "/tasks/{taskId}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def create_comment(
    task_id: Annotated[int, Path(alias="taskId")],
    payload: CreateCommentRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> Comment:
    return service.create_comment(owner_id=user.id, task_id=task_id, content=payload.content)


@router.delete(
    "/comments/{commentId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def delete_comment(
    comment_id: Annotated[int, Path(alias="commentId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> Response:
    service.delete_comment(owner_id=user.id, comment_id=comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
