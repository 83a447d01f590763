"""Task routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from nexus.repositories.memory import UserRecord
from nexus.routes.dependencies import get_current_user, get_task_service
from nexus.schemas.error import ErrorResponse, FsmTransitionError, NoLeakNotFoundError
from nexus.schemas.task import CreateTaskRequest, Task, UpdateTaskRequest
from nexus.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=list[Task], responses={401: {"model": ErrorResponse}})
async def list_tasks(
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> list[Task]:
    return service.list_tasks(owner_id=user.id)


@router.get(
    "/{taskId}",
    response_model=Task,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def get_task(
    task_id: Annotated[int, Path(alias="taskId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> Task:
    return service.get_task(owner_id=user.id, task_id=task_id)


@router.post(
    "",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def create_task(
    payload: CreateTaskRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> Task:
    return service.create_task(
        owner_id=user.id,
        video_id=payload.video_id,
        task_type=payload.type,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
    )


@router.patch(
    "/{taskId}",
    response_model=Task,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": NoLeakNotFoundError},
        409: {"model": FsmTransitionError},
    },
)
async def update_task(
    task_id: Annotated[int, Path(alias="taskId")],
    payload: UpdateTaskRequest,
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> Task:
    return service.update_task(owner_id=user.id, task_id=task_id, payload=payload)


@router.delete(
    "/{taskId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_task(
    task_id: Annotated[int, Path(alias="taskId")],
    user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> Response:
    service.delete_task(owner_id=user.id, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
