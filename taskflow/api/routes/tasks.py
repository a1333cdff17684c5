from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from taskflow.api.deps import get_task_service, require_roles
from taskflow.api.errors import ensure_success, unwrap
from taskflow.api.schemas.common import Page
from taskflow.api.schemas.tasks import CommentRequest, CommentResponse, TaskResponse
from taskflow.api.uploads import read_upload
from taskflow.core.auth import Role
from taskflow.domain import CurrentUser, TaskProgress
from taskflow.domain.pagination import MAX_PAGE_SIZE
from taskflow.domain.requests import CreateCommentRequest, CreateTaskRequest, UpdateTaskRequest
from taskflow.domain.services import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])

# Static paths are declared before "/{task_id}" so they are not captured by it.


@router.get("/developer", response_model=Page[TaskResponse], summary="Tasks of the caller")
async def get_developer_tasks(
    page_number: int = Query(1, ge=1),
    page_size: int = Query(MAX_PAGE_SIZE, ge=1),
    service: TaskService = Depends(get_task_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.DEVELOPER])),  # noqa: B008
) -> Page[TaskResponse]:
    """Return the tasks assigned to the developer linked to the authenticated user."""
    result = await service.get_developer_tasks(user.id, page_number, page_size)
    return Page[TaskResponse].model_validate(unwrap(result))


@router.get("/admin", response_model=Page[TaskResponse], summary="All tasks")
async def get_all_tasks(
    page_number: int = Query(1, ge=1),
    page_size: int = Query(MAX_PAGE_SIZE, ge=1),
    service: TaskService = Depends(get_task_service),  # noqa: B008
    _: CurrentUser = Depends(require_roles([Role.ADMIN])),  # noqa: B008
) -> Page[TaskResponse]:
    result = await service.get_tasks(page_number, page_size)
    return Page[TaskResponse].model_validate(unwrap(result))


@router.get("/by-status", response_model=Page[TaskResponse], summary="Tasks by progress")
async def get_tasks_by_status(
    progress: TaskProgress = Query(...),
    page_number: int = Query(1, ge=1),
    page_size: int = Query(MAX_PAGE_SIZE, ge=1),
    service: TaskService = Depends(get_task_service),  # noqa: B008
    _: CurrentUser = Depends(require_roles([Role.ADMIN, Role.MANAGER])),  # noqa: B008
) -> Page[TaskResponse]:
    """Return tasks in the given progress state, newest first."""
    result = await service.get_tasks_by_status(progress, page_number, page_size)
    return Page[TaskResponse].model_validate(unwrap(result))


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign task",
    description="Create a task and assign it to a developer (admin-only).",
)
async def assign_task(
    start_at: datetime = Form(...),
    end_at: datetime = Form(...),
    content: str = Form(""),
    assigned_to_developer_id: UUID | None = Form(None),
    document: UploadFile | None = File(None),  # noqa: B008
    service: TaskService = Depends(get_task_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN])),  # noqa: B008
) -> TaskResponse:
    request = CreateTaskRequest(
        start_at=start_at,
        end_at=end_at,
        content=content,
        assigned_to_developer_id=assigned_to_developer_id,
        document=await read_upload(document),
    )
    result = await service.assign_task(request, user.id)
    return TaskResponse.model_validate(unwrap(result))


@router.put("", response_model=TaskResponse, summary="Update task")
async def update_task(
    id: UUID = Form(...),  # noqa: A002
    start_at: datetime = Form(...),
    end_at: datetime = Form(...),
    content: str | None = Form(None),
    progress: TaskProgress = Form(TaskProgress.NOT_STARTED),
    assigned_to_developer_id: UUID | None = Form(None),
    document: UploadFile | None = File(None),  # noqa: B008
    service: TaskService = Depends(get_task_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN, Role.MANAGER])),  # noqa: B008
) -> TaskResponse:
    request = UpdateTaskRequest(
        id=id,
        start_at=start_at,
        end_at=end_at,
        content=content,
        progress=progress,
        assigned_to_developer_id=assigned_to_developer_id,
        document=await read_upload(document),
    )
    result = await service.update_task(request, user.id)
    return TaskResponse.model_validate(unwrap(result))


@router.patch(
    "/{task_id}/status", status_code=status.HTTP_204_NO_CONTENT, summary="Change task progress"
)
async def change_task_status(
    task_id: UUID,
    progress: TaskProgress = Query(...),
    service: TaskService = Depends(get_task_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN, Role.DEVELOPER])),  # noqa: B008
) -> None:
    ensure_success(await service.change_task_status(task_id, progress, user.id))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete task")
async def delete_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN])),  # noqa: B008
) -> None:
    ensure_success(await service.delete_task(task_id, user.id))


@router.get("/{task_id}", response_model=TaskResponse, summary="Get task")
async def get_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),  # noqa: B008
    _: CurrentUser = Depends(require_roles([Role.ADMIN, Role.DEVELOPER])),  # noqa: B008
) -> TaskResponse:
    result = await service.get_task(task_id)
    return TaskResponse.model_validate(unwrap(result))


@router.post(
    "/{task_id}/comment",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on task",
)
async def add_comment(
    task_id: UUID,
    payload: CommentRequest,
    service: TaskService = Depends(get_task_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN, Role.DEVELOPER])),  # noqa: B008
) -> CommentResponse:
    """Add a comment authored by the developer linked to the caller; the assignee is notified."""
    result = await service.add_comment(user.id, task_id, CreateCommentRequest(content=payload.content))
    return CommentResponse.model_validate(unwrap(result))


@router.get("/{task_id}/comments", response_model=list[CommentResponse], summary="List comments")
async def get_comments(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),  # noqa: B008
    _: CurrentUser = Depends(require_roles([Role.ADMIN, Role.DEVELOPER])),  # noqa: B008
) -> list[CommentResponse]:
    result = await service.get_comments(task_id)
    return [CommentResponse.model_validate(comment) for comment in unwrap(result)]
