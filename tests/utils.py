from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from taskflow.core.auth import Role, generate_token
from taskflow.domain import ApplicationUser, JobLevel
from taskflow.domain.requests import CreateDeveloperRequest, CreateTaskRequest

API = "/api/v1"


def auth_headers(
    user_id: UUID | None = None,
    roles: Sequence[Role] = (Role.ADMIN,),
    email: str = "admin@system.com",
) -> dict[str, str]:
    user = ApplicationUser(email=email, user_name=email.split("@")[0], id=user_id or uuid4())
    token = generate_token(user, [role.value for role in roles], []).token
    return {"Authorization": f"Bearer {token}"}


def future_window(start_in: timedelta = timedelta(days=1), length: timedelta = timedelta(days=2)):
    start = datetime.now(UTC) + start_in
    return start, start + length


def developer_request(**overrides: Any) -> CreateDeveloperRequest:
    values: dict[str, Any] = {
        "email": "jane@example.com",
        "password": "Passw0rd",
        "full_name": "Jane Doe",
        "age": 30,
        "job_title": "Backend Engineer",
        "year_of_experience": 5,
        "job_level": JobLevel.SENIOR,
    }
    values.update(overrides)
    return CreateDeveloperRequest(**values)


def task_request(developer_id: UUID | None, **overrides: Any) -> CreateTaskRequest:
    start, end = future_window()
    values: dict[str, Any] = {
        "start_at": start,
        "end_at": end,
        "content": "Implement the reporting endpoint",
        "assigned_to_developer_id": developer_id,
    }
    values.update(overrides)
    return CreateTaskRequest(**values)


def developer_form(**overrides: Any) -> dict[str, str]:
    """Form fields for POST /developers."""
    values = {
        "email": "jane@example.com",
        "password": "Passw0rd",
        "full_name": "Jane Doe",
        "age": "30",
        "job_title": "Backend Engineer",
        "year_of_experience": "5",
        "job_level": JobLevel.SENIOR.value,
    }
    values.update({key: str(value) for key, value in overrides.items()})
    return values
