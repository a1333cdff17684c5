"""Read models returned by the services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from taskflow.domain.entities import Developer, JobLevel, TaskEntity, TaskProgress


@dataclass(slots=True)
class AccessToken:
    token: str
    expires_at: datetime


@dataclass(slots=True)
class LoginResponse:
    access_token: str
    access_token_expiration: datetime
    refresh_token: str
    refresh_token_expiration: datetime


@dataclass(slots=True)
class TaskView:
    id: UUID
    start_at: datetime
    end_at: datetime
    content: str | None
    document: str | None
    is_finished: bool
    progress: TaskProgress
    assigned_to_developer_id: UUID | None
    created_at: datetime


@dataclass(slots=True)
class DeveloperView:
    id: UUID
    full_name: str
    age: int
    image_path: str | None
    job_title: str
    year_of_experience: int
    job_level: JobLevel
    user_id: UUID


@dataclass(slots=True)
class DeveloperDetailView(DeveloperView):
    assigned_tasks: list[TaskView] = field(default_factory=list)


@dataclass(slots=True)
class CommentView:
    id: UUID
    content: str
    task_entity_id: UUID
    developer_id: UUID
    developer_name: str | None
    created_at: datetime


def public_url(base_url: str, path: str | None) -> str | None:
    """Prefix a stored relative path with the public base URL."""
    if not path:
        return None
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def to_task_view(task: TaskEntity, base_url: str = "") -> TaskView:
    return TaskView(
        id=task.id,
        start_at=task.start_at,
        end_at=task.end_at,
        content=task.content,
        document=public_url(base_url, task.document) if base_url else task.document,
        is_finished=task.is_finished,
        progress=task.progress,
        assigned_to_developer_id=task.assigned_to_developer_id,
        created_at=task.created_at,
    )


def to_developer_view(developer: Developer, base_url: str = "") -> DeveloperView:
    return DeveloperView(
        id=developer.id,
        full_name=developer.full_name,
        age=developer.age,
        image_path=public_url(base_url, developer.image_path) if base_url else developer.image_path,
        job_title=developer.job_title,
        year_of_experience=developer.year_of_experience,
        job_level=developer.job_level,
        user_id=developer.user_id,
    )


def to_developer_detail_view(developer: Developer, base_url: str = "") -> DeveloperDetailView:
    summary = to_developer_view(developer, base_url)
    return DeveloperDetailView(
        id=summary.id,
        full_name=summary.full_name,
        age=summary.age,
        image_path=summary.image_path,
        job_title=summary.job_title,
        year_of_experience=summary.year_of_experience,
        job_level=summary.job_level,
        user_id=summary.user_id,
        assigned_tasks=[
            to_task_view(task, base_url) for task in developer.assigned_tasks if not task.is_deleted
        ],
    )
