"""Self-validating aggregates: Developer, TaskEntity and the owned Comment.

Instances are only obtainable through the ``create`` factories, which run the
same ``_validate`` used by ``update``. The constructors refuse to run without
the module's factory token. SQLAlchemy materialises persisted rows without
calling ``__init__``, so loading from the database never needs it.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from taskflow.domain.clock import ensure_utc, utc_now
from taskflow.domain.errors import CommentErrors, DeveloperErrors, TaskErrors
from taskflow.domain.results import Error, Result, ValueResult

_FACTORY = object()

MIN_AGE = 18
MAX_AGE = 80
MAX_CONTENT_LENGTH = 1000
MAX_DOCUMENT_LENGTH = 2 * 1024 * 1024


class JobLevel(str, enum.Enum):
    INTERN = "Intern"
    JUNIOR = "Junior"
    MID_LEVEL = "MidLevel"
    SENIOR = "Senior"
    LEAD = "Lead"


class TaskProgress(str, enum.Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _normalize(value: str | None) -> str | None:
    return None if _is_blank(value) else value.strip()  # type: ignore[union-attr]


def _guard(token: object, name: str) -> None:
    if token is not _FACTORY:
        raise TypeError(f"{name} instances must be built with {name}.create()")


class BaseEntity:
    """Identity plus audit and soft-delete state.

    Audit fields are stamped by the unit of work when changes are saved.
    """

    id: UUID
    created_by_user_id: UUID | None
    created_at: datetime
    modified_by_user_id: UUID | None
    modified_at: datetime | None
    deleted_by_user_id: UUID | None
    deleted_at: datetime | None
    is_deleted: bool

    def __init__(self) -> None:
        self.id = uuid4()
        self.created_by_user_id = None
        self.created_at = utc_now()
        self.modified_by_user_id = None
        self.modified_at = None
        self.deleted_by_user_id = None
        self.deleted_at = None
        self.is_deleted = False

    def mark_deleted(self, deleted_by_user_id: UUID | None, at: datetime | None = None) -> None:
        self.deleted_by_user_id = deleted_by_user_id
        self.is_deleted = True
        self.deleted_at = at or utc_now()

    def undo_delete(self) -> None:
        self.deleted_by_user_id = None
        self.is_deleted = False
        self.deleted_at = None


class Developer(BaseEntity):
    full_name: str
    age: int
    image_path: str | None
    job_title: str
    year_of_experience: int
    job_level: JobLevel
    user_id: UUID
    assigned_tasks: list[TaskEntity]

    def __init__(
        self,
        *,
        full_name: str,
        age: int,
        image_path: str | None,
        job_title: str,
        year_of_experience: int,
        job_level: JobLevel,
        user_id: UUID,
        _token: object = None,
    ) -> None:
        _guard(_token, "Developer")
        super().__init__()
        self.full_name = full_name.strip()
        self.age = age
        self.image_path = image_path
        self.job_title = job_title.strip()
        self.year_of_experience = year_of_experience
        self.job_level = job_level
        self.user_id = user_id
        self.assigned_tasks = []

    @classmethod
    def create(
        cls,
        full_name: str,
        age: int,
        image_path: str | None,
        job_title: str,
        year_of_experience: int,
        job_level: JobLevel,
        user_id: UUID | None,
    ) -> ValueResult[Developer]:
        error = cls._validate(full_name, age, job_title, year_of_experience, user_id)
        if error != Error.NONE:
            return ValueResult.failure(error)

        return ValueResult.success(
            cls(
                full_name=full_name,
                age=age,
                image_path=image_path,
                job_title=job_title,
                year_of_experience=year_of_experience,
                job_level=job_level,
                user_id=user_id,  # type: ignore[arg-type]
                _token=_FACTORY,
            )
        )

    def update(
        self,
        full_name: str,
        age: int,
        image_path: str | None,
        job_title: str,
        year_of_experience: int,
        job_level: JobLevel,
        user_id: UUID | None,
    ) -> Result:
        error = self._validate(full_name, age, job_title, year_of_experience, user_id)
        if error != Error.NONE:
            return Result.failure(error)

        self.full_name = full_name.strip()
        self.age = age
        self.image_path = image_path
        self.job_title = job_title.strip()
        self.year_of_experience = year_of_experience
        self.job_level = job_level
        self.user_id = user_id  # type: ignore[assignment]
        return Result.success()

    @staticmethod
    def _validate(
        full_name: str | None,
        age: int,
        job_title: str | None,
        year_of_experience: int,
        user_id: UUID | None,
    ) -> Error:
        if _is_blank(full_name):
            return DeveloperErrors.EmptyFullName
        if age < MIN_AGE or age > MAX_AGE:
            return DeveloperErrors.InvalidAge
        if _is_blank(job_title):
            return DeveloperErrors.EmptyJobTitle
        if year_of_experience < 0:
            return DeveloperErrors.InvalidExperience
        if user_id is None or user_id.int == 0:
            return DeveloperErrors.InvalidUserId
        return Error.NONE

    def assign_to_user(self, user_id: UUID | None) -> Result:
        if user_id is None or user_id.int == 0:
            return Result.failure(DeveloperErrors.InvalidUserId)
        self.user_id = user_id
        return Result.success()

    def assign_task(self, task: TaskEntity) -> Result:
        if any(assigned.id == task.id for assigned in self.assigned_tasks):
            return Result.failure(DeveloperErrors.TaskAlreadyAssigned)
        self.assigned_tasks.append(task)
        return Result.success()

    def remove_task(self, task: TaskEntity) -> Result:
        for assigned in self.assigned_tasks:
            if assigned.id == task.id:
                self.assigned_tasks.remove(assigned)
                return Result.success()
        return Result.failure(TaskErrors.NotAssignedToDeveloper)

    def __repr__(self) -> str:
        return f"<Developer(id={self.id}, full_name={self.full_name!r})>"


class TaskEntity(BaseEntity):
    start_at: datetime
    end_at: datetime
    content: str | None
    document: str | None
    is_finished: bool
    progress: TaskProgress
    assigned_to_developer_id: UUID | None
    assigned_to_developer: Developer | None
    comments: list[Comment]

    def __init__(
        self,
        *,
        start_at: datetime,
        end_at: datetime,
        content: str | None,
        document: str | None,
        progress: TaskProgress,
        _token: object = None,
    ) -> None:
        _guard(_token, "TaskEntity")
        super().__init__()
        self.start_at = start_at
        self.end_at = end_at
        self.content = _normalize(content)
        self.document = _normalize(document)
        self.is_finished = False
        self.progress = progress
        self.assigned_to_developer_id = None
        self.comments = []

    @property
    def duration(self) -> timedelta:
        return self.end_at - self.start_at

    @classmethod
    def create(
        cls,
        start_at: datetime | None,
        end_at: datetime | None,
        content: str | None,
        document: str | None,
    ) -> ValueResult[TaskEntity]:
        start_at, end_at = ensure_utc(start_at), ensure_utc(end_at)
        error = cls._validate(start_at, end_at, content, document)
        if error != Error.NONE:
            return ValueResult.failure(error)

        return ValueResult.success(
            cls(
                start_at=start_at,  # type: ignore[arg-type]
                end_at=end_at,  # type: ignore[arg-type]
                content=content,
                document=document,
                progress=TaskProgress.NOT_STARTED,
                _token=_FACTORY,
            )
        )

    def update(
        self,
        start_at: datetime | None,
        end_at: datetime | None,
        content: str | None,
        document: str | None,
    ) -> Result:
        start_at, end_at = ensure_utc(start_at), ensure_utc(end_at)
        error = self._validate(start_at, end_at, content, document)
        if error != Error.NONE:
            return Result.failure(error)

        self.start_at = start_at  # type: ignore[assignment]
        self.end_at = end_at  # type: ignore[assignment]
        self.content = _normalize(content)
        self.document = _normalize(document)
        return Result.success()

    def mark_as_finished(self) -> Result:
        if self.is_finished:
            return Result.failure(TaskErrors.AlreadyFinished)
        self.is_finished = True
        self.progress = TaskProgress.COMPLETED
        return Result.success()

    def reopen(self) -> Result:
        if not self.is_finished:
            return Result.failure(TaskErrors.NotFinished)
        self.is_finished = False
        self.progress = TaskProgress.IN_PROGRESS
        return Result.success()

    def update_progress(self, new_progress: TaskProgress) -> Result:
        self.progress = new_progress
        if new_progress is TaskProgress.COMPLETED and not self.is_finished:
            self.mark_as_finished()
        return Result.success()

    def assign_to_developer(self, developer_id: UUID | None) -> Result:
        if developer_id is None or developer_id.int == 0:
            return Result.failure(TaskErrors.InvalidDeveloper)
        self.assigned_to_developer_id = developer_id
        return Result.success()

    def add_comment(self, comment: Comment) -> Result:
        self.comments.append(comment)
        return Result.success()

    @staticmethod
    def _validate(
        start_at: datetime | None,
        end_at: datetime | None,
        content: str | None,
        document: str | None,
    ) -> Error:
        if start_at is None:
            return TaskErrors.EmptyStartDate
        if end_at is None:
            return TaskErrors.EmptyEndDate
        if start_at >= end_at:
            return TaskErrors.InvalidDateRange
        if content is not None and len(content) > MAX_CONTENT_LENGTH:
            return TaskErrors.ContentTooLong
        if document is not None and len(document) > MAX_DOCUMENT_LENGTH:
            return TaskErrors.DocumentTooLarge
        return Error.NONE

    def __repr__(self) -> str:
        return f"<TaskEntity(id={self.id}, progress={self.progress.value})>"


class Comment:
    """Comment owned by a task; appended, never removed."""

    id: UUID
    content: str
    task_entity_id: UUID
    developer_id: UUID
    created_at: datetime

    def __init__(
        self,
        *,
        content: str,
        task_entity_id: UUID,
        developer_id: UUID,
        _token: object = None,
    ) -> None:
        _guard(_token, "Comment")
        self.id = uuid4()
        self.content = content.strip()
        self.task_entity_id = task_entity_id
        self.developer_id = developer_id
        self.created_at = utc_now()

    @classmethod
    def create(
        cls, content: str | None, task_entity_id: UUID | None, developer_id: UUID | None
    ) -> ValueResult[Comment]:
        error = cls._validate(content, task_entity_id, developer_id)
        if error != Error.NONE:
            return ValueResult.failure(error)
        return ValueResult.success(
            cls(
                content=content,  # type: ignore[arg-type]
                task_entity_id=task_entity_id,  # type: ignore[arg-type]
                developer_id=developer_id,  # type: ignore[arg-type]
                _token=_FACTORY,
            )
        )

    def update(
        self, content: str | None, task_entity_id: UUID | None, developer_id: UUID | None
    ) -> Result:
        error = self._validate(content, task_entity_id, developer_id)
        if error != Error.NONE:
            return Result.failure(error)
        self.content = content.strip()  # type: ignore[union-attr]
        self.task_entity_id = task_entity_id  # type: ignore[assignment]
        self.developer_id = developer_id  # type: ignore[assignment]
        return Result.success()

    @staticmethod
    def _validate(
        content: str | None, task_entity_id: UUID | None, developer_id: UUID | None
    ) -> Error:
        if _is_blank(content):
            return CommentErrors.EmptyContent
        if task_entity_id is None or task_entity_id.int == 0:
            return CommentErrors.EmptyTaskEntityId
        if developer_id is None or developer_id.int == 0:
            return CommentErrors.EmptyDeveloperId
        return Error.NONE

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, task_entity_id={self.task_entity_id})>"
