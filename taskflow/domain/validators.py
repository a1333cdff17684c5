"""Request validation rules.

Each validator returns the first failing ``Error`` (or ``Error.NONE``), in the
order the rules are declared.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime

from email_validator import EmailNotValidError, validate_email

from taskflow.domain.clock import ensure_utc, utc_now
from taskflow.domain.entities import MAX_CONTENT_LENGTH
from taskflow.domain.errors import FileErrors, TaskErrors, validation_error
from taskflow.domain.ports import UploadedFile
from taskflow.domain.requests import (
    CreateCommentRequest,
    CreateDeveloperRequest,
    CreateTaskRequest,
    LoginRequest,
    ResetPasswordRequest,
    UpdateDeveloperRequest,
    UpdateTaskRequest,
)
from taskflow.domain.results import Error

MIN_PASSWORD_LENGTH = 5
NAME_LENGTH = (3, 50)
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024
DEFAULT_ALLOWED_EXTENSIONS = (".jpg", ".png", ".jpeg", ".pdf", ".docx")

_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")


def is_valid_email(value: str | None) -> bool:
    if not value or not value.strip():
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_email(value: str | None, field: str = "Email") -> Error:
    if not value or not value.strip():
        return validation_error(f"{field}.Required", "Email is required")
    if not is_valid_email(value):
        return validation_error(f"{field}.Invalid", "A valid email address is required.")
    return Error.NONE


def check_password(value: str | None, field: str = "Password") -> Error:
    if not value or not value.strip():
        return validation_error(f"{field}.Required", "Password is required")
    if len(value) < MIN_PASSWORD_LENGTH:
        return validation_error(
            f"{field}.TooShort", f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if not _UPPER.search(value):
        return validation_error(
            f"{field}.MissingUppercase", "Password must contain at least one uppercase letter."
        )
    if not _DIGIT.search(value):
        return validation_error(f"{field}.MissingDigit", "Password must contain at least one digit.")
    return Error.NONE


def check_upload(
    file: UploadedFile | None,
    *,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
) -> Error:
    if file is None:
        return Error.NONE
    if file.size > max_size:
        return FileErrors.TooLarge
    if not file.extension or file.extension not in tuple(allowed_extensions):
        return FileErrors.InvalidExtension
    return Error.NONE


def _check_length(value: str | None, field: str, label: str) -> Error:
    if not value or not value.strip():
        return validation_error(f"{field}.Required", f"{label} is required")
    low, high = NAME_LENGTH
    if not low <= len(value.strip()) <= high:
        return validation_error(
            f"{field}.Length", f"Length of {label.lower()} must be between {low} and {high} characters"
        )
    return Error.NONE


def _first(*errors: Error) -> Error:
    return next((error for error in errors if error != Error.NONE), Error.NONE)


def validate_login(request: LoginRequest) -> Error:
    return _first(check_email(request.email), check_password(request.password))


def validate_reset_password(request: ResetPasswordRequest) -> Error:
    if not request.token or not request.token.strip():
        token_error = validation_error("Token.Required", "Token is required")
    else:
        token_error = Error.NONE
    return _first(
        check_password(request.new_password, "NewPassword"),
        check_email(request.email),
        token_error,
    )


def _validate_developer_fields(
    full_name: str, job_title: str, age: int, year_of_experience: int
) -> Error:
    error = _first(
        _check_length(full_name, "FullName", "Full name"),
        _check_length(job_title, "JobTitle", "Job title"),
    )
    if error != Error.NONE:
        return error
    if age <= 0:
        return validation_error("Age.Invalid", "Age can't less than or equal zero")
    if year_of_experience < 0:
        return validation_error(
            "YearOfExperience.Invalid", "Year of experience can't less than zero"
        )
    return Error.NONE


def validate_create_developer(request: CreateDeveloperRequest, **upload_limits) -> Error:
    return _first(
        check_email(request.email),
        check_password(request.password),
        _validate_developer_fields(
            request.full_name, request.job_title, request.age, request.year_of_experience
        ),
        check_upload(request.image, **upload_limits),
    )


def validate_update_developer(request: UpdateDeveloperRequest, **upload_limits) -> Error:
    if request.id is None or request.id.int == 0:
        return validation_error("Id.Required", "Id is required.")
    return _first(
        _validate_developer_fields(
            request.full_name, request.job_title, request.age, request.year_of_experience
        ),
        check_upload(request.image, **upload_limits),
    )


def _validate_schedule(
    start_at: datetime | None, end_at: datetime | None, now: datetime | None
) -> Error:
    start_at, end_at = ensure_utc(start_at), ensure_utc(end_at)
    if start_at is None:
        return TaskErrors.EmptyStartDate
    if end_at is None:
        return TaskErrors.EmptyEndDate
    if start_at >= end_at:
        return TaskErrors.InvalidDateRange
    now = now or utc_now()
    if start_at < now:
        return TaskErrors.StartInPast
    if end_at < now:
        return TaskErrors.EndInPast
    return Error.NONE


def validate_create_task(
    request: CreateTaskRequest, *, now: datetime | None = None, **upload_limits
) -> Error:
    if not request.content or not request.content.strip():
        return TaskErrors.EmptyContent
    if len(request.content) > MAX_CONTENT_LENGTH:
        return TaskErrors.ContentTooLong
    if request.assigned_to_developer_id is None or request.assigned_to_developer_id.int == 0:
        return TaskErrors.InvalidDeveloper
    return _first(
        _validate_schedule(request.start_at, request.end_at, now),
        check_upload(request.document, **upload_limits),
    )


def validate_update_task(
    request: UpdateTaskRequest, *, now: datetime | None = None, **upload_limits
) -> Error:
    if request.id is None or request.id.int == 0:
        return validation_error("Id.Required", "Id is required.")
    if request.content and len(request.content) > MAX_CONTENT_LENGTH:
        return TaskErrors.ContentTooLong
    if request.assigned_to_developer_id is None or request.assigned_to_developer_id.int == 0:
        return TaskErrors.InvalidDeveloper
    return _first(
        _validate_schedule(request.start_at, request.end_at, now),
        check_upload(request.document, **upload_limits),
    )


def validate_comment(request: CreateCommentRequest) -> Error:
    if request.content is None:
        return validation_error("Content.Required", "content can't be null")
    return Error.NONE
