"""Pydantic schemas for task and comment endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from taskflow.domain.entities import TaskProgress


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    start_at: datetime
    end_at: datetime
    content: str | None = None
    document: str | None = Field(None, description="Public URL of the attached document")
    is_finished: bool
    progress: TaskProgress
    assigned_to_developer_id: UUID | None = None
    created_at: datetime


class CommentRequest(BaseModel):
    content: str = Field(..., description="Comment text")


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    task_entity_id: UUID
    developer_id: UUID
    developer_name: str | None = None
    created_at: datetime
