"""Pydantic schemas for developer endpoints."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from taskflow.api.schemas.tasks import TaskResponse
from taskflow.domain.entities import JobLevel


class DeveloperResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    age: int
    image_path: str | None = Field(None, description="Public URL of the profile image")
    job_title: str
    year_of_experience: int
    job_level: JobLevel
    user_id: UUID


class DeveloperDetailResponse(DeveloperResponse):
    assigned_tasks: list[TaskResponse] = Field(default_factory=list)
