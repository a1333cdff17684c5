"""Inputs accepted by the services, independent of the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from taskflow.domain.entities import JobLevel, TaskProgress
from taskflow.domain.ports import UploadedFile


@dataclass(slots=True)
class LoginRequest:
    email: str
    password: str


@dataclass(slots=True)
class ResetPasswordRequest:
    email: str
    token: str
    new_password: str


@dataclass(slots=True)
class CreateDeveloperRequest:
    email: str
    password: str
    full_name: str
    age: int
    job_title: str
    year_of_experience: int
    job_level: JobLevel
    image: UploadedFile | None = None


@dataclass(slots=True)
class UpdateDeveloperRequest:
    id: UUID
    full_name: str
    age: int
    job_title: str
    year_of_experience: int
    job_level: JobLevel
    image: UploadedFile | None = None


@dataclass(slots=True)
class CreateTaskRequest:
    start_at: datetime
    end_at: datetime
    content: str
    assigned_to_developer_id: UUID | None
    document: UploadedFile | None = None


@dataclass(slots=True)
class UpdateTaskRequest:
    id: UUID
    start_at: datetime
    end_at: datetime
    content: str | None
    progress: TaskProgress
    assigned_to_developer_id: UUID | None
    document: UploadedFile | None = None


@dataclass(slots=True)
class CreateCommentRequest:
    content: str
