"""Task use cases: assignment, progress, details, removal and comments."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, cast
from uuid import UUID

import structlog

from taskflow.core.config import Settings, get_settings
from taskflow.domain.entities import Comment, Developer, TaskEntity, TaskProgress
from taskflow.domain.errors import DeveloperErrors, TaskErrors, UserErrors
from taskflow.domain.pagination import PagedResult, clamp_paging
from taskflow.domain.ports import FileStore, NotificationSink
from taskflow.domain.requests import CreateCommentRequest, CreateTaskRequest, UpdateTaskRequest
from taskflow.domain.results import Error, Result, ValueResult
from taskflow.domain.services.compensation import CompensationScope
from taskflow.domain.validators import (
    validate_comment,
    validate_create_task,
    validate_update_task,
)
from taskflow.domain.views import CommentView, TaskView, to_task_view
from taskflow.infrastructure.repositories import UnitOfWork
from taskflow.infrastructure.repositories.generic import OrderBy, Predicate

logger = structlog.get_logger()


def _oldest_first(stmt):
    return stmt.order_by(TaskEntity.created_at, TaskEntity.id)


def _newest_first(stmt):
    return stmt.order_by(TaskEntity.created_at.desc(), TaskEntity.id)


class TaskService:
    def __init__(
        self,
        uow: UnitOfWork,
        files: FileStore,
        notifications: NotificationSink,
        settings: Settings | None = None,
    ) -> None:
        self.uow = uow
        self.files = files
        self.notifications = notifications
        self.settings = settings or get_settings()

    @property
    def _upload_limits(self) -> dict[str, Any]:
        return {
            "max_size": self.settings.max_file_size,
            "allowed_extensions": self.settings.allowed_extensions,
        }

    def _view(self, task: TaskEntity) -> TaskView:
        return to_task_view(task, self.settings.base_url)

    async def assign_task(
        self, request: CreateTaskRequest, actor_id: UUID | None = None
    ) -> ValueResult[TaskView]:
        await logger.ainfo(
            "task_assign_requested", developer_id=str(request.assigned_to_developer_id)
        )

        error = validate_create_task(request, **self._upload_limits)
        if error != Error.NONE:
            await logger.awarning("task_assign_invalid", code=error.code)
            return ValueResult.failure(error)

        if not await self.uow.developers.is_exist(Developer.id == request.assigned_to_developer_id):
            return ValueResult.failure(DeveloperErrors.NotFound)

        async with CompensationScope("assign_task") as scope:
            document_path: str | None = None
            if request.document is not None:
                document_path = await self.files.upload(request.document)
                uploaded = document_path
                scope.register("remove_document", lambda: self.files.remove(uploaded))

            result = TaskEntity.create(
                request.start_at, request.end_at, request.content, document_path
            )
            if result.is_failure:
                return ValueResult.failure(result.error)
            task = cast(TaskEntity, result.value)

            assigned = task.assign_to_developer(request.assigned_to_developer_id)
            if assigned.is_failure:
                return ValueResult.failure(assigned.error)

            await self.uow.tasks.create(task)
            await self.uow.save_changes(actor_id)
            scope.complete()

        view = self._view(task)
        await logger.ainfo("task_assigned", task_id=str(task.id))
        await self._broadcast("assigntask", view)
        return ValueResult.success(view)

    async def change_task_status(
        self, task_id: UUID, progress: TaskProgress, actor_id: UUID | None = None
    ) -> Result:
        repo = self.uow.tasks
        task = await repo.get_by_id(task_id)
        if task is None:
            return Result.failure(TaskErrors.NotFound)

        if task.progress == progress:
            return Result.success()

        result = task.update_progress(progress)
        if result.is_failure:
            return result

        await repo.update(task)
        await self.uow.save_changes(actor_id)

        await logger.ainfo("task_status_changed", task_id=str(task_id), progress=progress.value)
        await self._broadcast(
            "changetaskstatus",
            {"id": str(task_id), "progress": progress.value, "is_finished": task.is_finished},
        )
        return Result.success()

    async def delete_task(self, task_id: UUID, actor_id: UUID | None = None) -> Result:
        repo = self.uow.tasks
        task = await repo.get_by_id(task_id)
        if task is None:
            return Result.failure(TaskErrors.NotFound)

        await repo.delete(task)
        await self.uow.save_changes(actor_id)

        await logger.ainfo("task_deleted", task_id=str(task_id))
        await self._broadcast("deletetask", self._view(task))
        return Result.success()

    async def get_task(self, task_id: UUID) -> ValueResult[TaskView]:
        task = await self.uow.tasks.get_by_id(task_id)
        if task is None:
            return ValueResult.failure(TaskErrors.NotFound)
        return ValueResult.success(self._view(task))

    async def get_tasks(
        self, page_number: int, page_size: int
    ) -> ValueResult[PagedResult[TaskView]]:
        return ValueResult.success(
            await self._page(None, _oldest_first, page_number, page_size)
        )

    async def get_developer_tasks(
        self, user_id: UUID, page_number: int, page_size: int
    ) -> ValueResult[PagedResult[TaskView]]:
        developer = await self.uow.developers.first_or_default(Developer.user_id == user_id)
        if developer is None:
            return ValueResult.failure(DeveloperErrors.NotFound)

        page = await self._page(
            TaskEntity.assigned_to_developer_id == developer.id,
            _oldest_first,
            page_number,
            page_size,
        )
        return ValueResult.success(page)

    async def get_tasks_by_status(
        self, progress: TaskProgress, page_number: int, page_size: int
    ) -> ValueResult[PagedResult[TaskView]]:
        page = await self._page(
            TaskEntity.progress == progress, _newest_first, page_number, page_size
        )
        return ValueResult.success(page)

    async def update_task(
        self, request: UpdateTaskRequest, actor_id: UUID | None = None
    ) -> ValueResult[TaskView]:
        error = validate_update_task(request, **self._upload_limits)
        if error != Error.NONE:
            return ValueResult.failure(error)

        repo = self.uow.tasks
        task = await repo.get_by_id(request.id)
        if task is None:
            return ValueResult.failure(TaskErrors.NotFound)

        if not await self.uow.developers.is_exist(Developer.id == request.assigned_to_developer_id):
            return ValueResult.failure(DeveloperErrors.NotFound)

        old_path = task.document
        new_path: str | None = None

        async with CompensationScope("update_task") as scope:
            if request.document is not None:
                new_path = await self.files.upload(request.document)
                uploaded = new_path
                scope.register("remove_document", lambda: self.files.remove(uploaded))

            result = task.update(request.start_at, request.end_at, request.content, new_path or old_path)
            if result.is_failure:
                return ValueResult.failure(result.error)

            if request.progress != task.progress:
                task.update_progress(request.progress)
            task.assign_to_developer(request.assigned_to_developer_id)

            await repo.update(task)
            await self.uow.save_changes(actor_id)
            scope.complete()

        if new_path and old_path and old_path != new_path:
            try:
                await self.files.remove(old_path)
            except Exception:
                await logger.aexception("file_cleanup_failed", path=old_path)

        view = self._view(task)
        await logger.ainfo("task_updated", task_id=str(task.id))
        await self._broadcast("updatetask", view)
        return ValueResult.success(view)

    async def add_comment(
        self, user_id: UUID, task_id: UUID, request: CreateCommentRequest
    ) -> ValueResult[CommentView]:
        """Comment on a task as the developer linked to ``user_id``.

        The task's assignee is notified once the comment is stored.
        """
        error = validate_comment(request)
        if error != Error.NONE:
            return ValueResult.failure(error)

        author = await self.uow.developers.first_or_default(Developer.user_id == user_id)
        if author is None:
            return ValueResult.failure(UserErrors.NotFound)

        repo = self.uow.tasks
        task = await repo.get_by_id(task_id, "comments", "assigned_to_developer")
        if task is None:
            return ValueResult.failure(TaskErrors.NotFound)

        result = Comment.create(request.content, task.id, author.id)
        if result.is_failure:
            return ValueResult.failure(result.error)
        comment = cast(Comment, result.value)

        task.add_comment(comment)
        await repo.update(task)
        written = await self.uow.save_changes(user_id)

        assignee = task.assigned_to_developer
        if written > 0 and assignee is not None:
            try:
                await self.notifications.send_to_user(
                    assignee.user_id,
                    "notifycomment",
                    {"from": author.full_name, "content": comment.content, "task_title": task.content},
                )
            except Exception:
                await logger.aexception("notification_failed", notify_event="notifycomment")

        await logger.ainfo("comment_added", task_id=str(task.id), comment_id=str(comment.id))
        return ValueResult.success(
            CommentView(
                id=comment.id,
                content=comment.content,
                task_entity_id=comment.task_entity_id,
                developer_id=comment.developer_id,
                developer_name=author.full_name,
                created_at=comment.created_at,
            )
        )

    async def get_comments(self, task_id: UUID) -> ValueResult[list[CommentView]]:
        if not await self.uow.tasks.is_exist(TaskEntity.id == task_id):
            return ValueResult.failure(TaskErrors.NotFound)
        return ValueResult.success(await self.uow.tasks.get_comments(task_id))

    async def _page(
        self,
        predicate: Predicate | None,
        order_by: OrderBy,
        page_number: int,
        page_size: int,
    ) -> PagedResult[TaskView]:
        page_number, page_size = clamp_paging(page_number, page_size)
        repo = self.uow.tasks

        total = await repo.count(predicate)
        tasks = await repo.get_all(
            predicate, order_by=order_by, page_number=page_number, page_size=page_size
        )
        return PagedResult(
            items=[self._view(task) for task in tasks],
            page_number=page_number,
            page_size=page_size,
            total_count=total,
        )

    async def _broadcast(self, event: str, payload: Any) -> None:
        if not isinstance(payload, dict):
            payload = asdict(payload)
        try:
            await self.notifications.broadcast_all(event, payload)
        except Exception:
            await logger.aexception("notification_failed", notify_event=event)
