"""Error catalogs, one namespace per aggregate."""

from __future__ import annotations

from taskflow.domain.results import Error, ErrorType


class DeveloperErrors:
    EmptyFullName = Error("Developer.EmptyFullName", "Full name cannot be empty", ErrorType.VALIDATION)
    InvalidAge = Error("Developer.InvalidAge", "Age must be between 18 and 80", ErrorType.VALIDATION)
    EmptyJobTitle = Error("Developer.JobTitleEmpty", "Job title cannot be empty", ErrorType.VALIDATION)
    InvalidExperience = Error(
        "Developer.InvalidExperience", "Years of experience cannot be negative", ErrorType.VALIDATION
    )
    InvalidUserId = Error("Developer.InvalidUserId", "A valid User ID is required", ErrorType.VALIDATION)
    NotFound = Error("Developer.NotFound", "Developer not found", ErrorType.NOT_FOUND)
    TaskAlreadyAssigned = Error(
        "Developer.TaskAlreadyAssigned",
        "This task is already assigned to the developer",
        ErrorType.CONFLICT,
    )
    DeveloperAlreadyExist = Error(
        "Developer.DeveloperAlreadyExist", "This developer is already exist", ErrorType.CONFLICT
    )
    DatabaseError = Error(
        "Developer.DatabaseError", "Developer could not be saved", ErrorType.INTERNAL_SERVER_ERROR
    )


class TaskErrors:
    EmptyStartDate = Error("Task.EmptyStartDate", "Start date cannot be empty", ErrorType.VALIDATION)
    EmptyEndDate = Error("Task.EmptyEndDate", "End date cannot be empty", ErrorType.VALIDATION)
    InvalidDateRange = Error(
        "Task.InvalidDateRange", "Start date must be before end date", ErrorType.VALIDATION
    )
    StartInPast = Error("Task.StartInPast", "Start time of Task cannot be in the past", ErrorType.VALIDATION)
    EndInPast = Error("Task.EndInPast", "Task deadline cannot be in the past", ErrorType.VALIDATION)
    InvalidDeveloper = Error("Task.InvalidDeveloper", "A valid developer ID is required", ErrorType.VALIDATION)
    EmptyContent = Error("Task.EmptyContent", "Task content is required", ErrorType.VALIDATION)
    ContentTooLong = Error(
        "Task.ContentTooLong", "Content cannot exceed 1000 characters", ErrorType.VALIDATION
    )
    DocumentTooLarge = Error("Task.DocumentTooLarge", "Document exceeds size limit", ErrorType.VALIDATION)
    AlreadyFinished = Error("Task.AlreadyFinished", "Task is already finished", ErrorType.CONFLICT)
    NotFinished = Error("Task.NotFinished", "Task is not finished yet", ErrorType.CONFLICT)
    NotFound = Error("Task.NotFound", "Task not found", ErrorType.NOT_FOUND)
    NotAssignedToDeveloper = Error(
        "Task.NotAssignedToDeveloper", "Task not found in developer list", ErrorType.NOT_FOUND
    )


class CommentErrors:
    EmptyContent = Error("Comment.Errors.EmptyContent", "Content can't be null or empty", ErrorType.VALIDATION)
    EmptyTaskEntityId = Error(
        "Comment.Errors.EmptyTaskEntityId", "TaskEntity Id can't be null or empty", ErrorType.VALIDATION
    )
    EmptyDeveloperId = Error(
        "Comment.Errors.EmptyDeveloperId", "Developer Id can't be null or empty", ErrorType.VALIDATION
    )
    DatabaseError = Error(
        "Comment.Errors.DatabaseError", "Internal server error", ErrorType.INTERNAL_SERVER_ERROR
    )


class UserErrors:
    EmptyPassword = Error("ChangePassword.Empty", "Passwords cannot be empty.", ErrorType.VALIDATION)
    NotFound = Error("User.Errors.NotFound", "User not found", ErrorType.NOT_FOUND)
    InvalidCredentials = Error(
        "User.Errors.InvalidCredentials", "Invalid email or password", ErrorType.VALIDATION
    )
    InvalidToken = Error(
        "User.Errors.InvalidToken", "Invalid token or refresh token", ErrorType.VALIDATION
    )


class FileErrors:
    TooLarge = Error("File.TooLarge", "File must be 2 MB or less", ErrorType.VALIDATION)
    InvalidExtension = Error(
        "File.InvalidExtension",
        "Only .jpg, .png, .jpeg, .pdf, .docx files are allowed",
        ErrorType.VALIDATION,
    )


def validation_error(code: str, description: str) -> Error:
    """Build an ad hoc validation error, e.g. from a request rule or the credential store."""
    return Error(code, description, ErrorType.VALIDATION)
