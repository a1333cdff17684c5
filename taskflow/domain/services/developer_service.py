"""Developer use cases: paging, lookup, onboarding, profile updates, removal."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, cast
from uuid import UUID

import structlog
from sqlalchemy import func

from taskflow.core.auth import Role
from taskflow.core.config import Settings, get_settings
from taskflow.domain.entities import Developer
from taskflow.domain.errors import DeveloperErrors, validation_error
from taskflow.domain.identity import ApplicationUser, IdentityResult
from taskflow.domain.pagination import PagedResult, clamp_paging
from taskflow.domain.ports import CredentialStore, FileStore, NotificationSink
from taskflow.domain.requests import CreateDeveloperRequest, UpdateDeveloperRequest
from taskflow.domain.results import Error, Result, ValueResult
from taskflow.domain.services.compensation import CompensationScope
from taskflow.domain.validators import validate_create_developer, validate_update_developer
from taskflow.domain.views import (
    DeveloperDetailView,
    DeveloperView,
    to_developer_detail_view,
    to_developer_view,
)
from taskflow.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger()


def _identity_error(outcome: IdentityResult, fallback_code: str) -> Error:
    first = outcome.first_error
    if first is None:
        return validation_error(fallback_code, "The credential store rejected the request")
    return validation_error(first.code, first.description)


class DeveloperService:
    def __init__(
        self,
        uow: UnitOfWork,
        credentials: CredentialStore,
        files: FileStore,
        notifications: NotificationSink,
        settings: Settings | None = None,
    ) -> None:
        self.uow = uow
        self.credentials = credentials
        self.files = files
        self.notifications = notifications
        self.settings = settings or get_settings()

    @property
    def _upload_limits(self) -> dict[str, Any]:
        return {
            "max_size": self.settings.max_file_size,
            "allowed_extensions": self.settings.allowed_extensions,
        }

    async def get_developers(self, page_number: int, page_size: int) -> PagedResult[DeveloperView]:
        page_number, page_size = clamp_paging(page_number, page_size)
        repo = self.uow.developers

        total = await repo.count()
        developers = await repo.get_all(
            order_by=lambda stmt: stmt.order_by(Developer.created_at, Developer.id),
            page_number=page_number,
            page_size=page_size,
        )
        await logger.ainfo(
            "developers_listed", page_number=page_number, page_size=page_size, total=total
        )
        return PagedResult(
            items=[to_developer_view(d, self.settings.base_url) for d in developers],
            page_number=page_number,
            page_size=page_size,
            total_count=total,
        )

    async def get_developer(self, developer_id: UUID) -> ValueResult[DeveloperDetailView]:
        developer = await self.uow.developers.get_by_id(developer_id, "assigned_tasks")
        if developer is None:
            await logger.awarning("developer_not_found", developer_id=str(developer_id))
            return ValueResult.failure(DeveloperErrors.NotFound)
        return ValueResult.success(to_developer_detail_view(developer, self.settings.base_url))

    async def create_developer(
        self, request: CreateDeveloperRequest, actor_id: UUID | None = None
    ) -> ValueResult[DeveloperView]:
        """Create the credential, the optional image and the developer row together.

        A failure after the credential or the image exists undoes both.
        """
        await logger.ainfo("developer_create_requested", email=request.email)

        error = validate_create_developer(request, **self._upload_limits)
        if error != Error.NONE:
            await logger.awarning("developer_create_invalid", code=error.code)
            return ValueResult.failure(error)

        repo = self.uow.developers
        if await repo.is_exist(
            (func.lower(Developer.full_name) == request.full_name.strip().lower())
            & (func.lower(Developer.job_title) == request.job_title.strip().lower())
            & (Developer.year_of_experience == request.year_of_experience)
        ):
            await logger.awarning("developer_already_exists", full_name=request.full_name)
            return ValueResult.failure(DeveloperErrors.DeveloperAlreadyExist)

        user = ApplicationUser(
            email=request.email.strip(),
            user_name=request.email.strip().split("@")[0],
            email_confirmed=True,
        )

        async with CompensationScope("create_developer") as scope:
            outcome = await self.credentials.create_user(user, request.password)
            if not outcome.succeeded:
                return ValueResult.failure(_identity_error(outcome, "User.CreateFailed"))
            scope.register("delete_credential", lambda: self.credentials.delete_user(user))

            outcome = await self.credentials.add_to_role(user, Role.DEVELOPER.value)
            if not outcome.succeeded:
                return ValueResult.failure(_identity_error(outcome, "User.RoleFailed"))

            image_path: str | None = None
            if request.image is not None:
                image_path = await self.files.upload(request.image)
                uploaded = image_path
                scope.register("remove_image", lambda: self.files.remove(uploaded))

            result = Developer.create(
                request.full_name,
                request.age,
                image_path,
                request.job_title,
                request.year_of_experience,
                request.job_level,
                user.id,
            )
            if result.is_failure:
                return ValueResult.failure(result.error)
            developer = cast(Developer, result.value)

            await repo.create(developer)
            if await self.uow.save_changes(actor_id) <= 0:
                await logger.aerror("developer_not_persisted", user_id=str(user.id))
                return ValueResult.failure(DeveloperErrors.DatabaseError)
            scope.complete()

        view = to_developer_view(developer, self.settings.base_url)
        await logger.ainfo("developer_created", developer_id=str(developer.id), user_id=str(user.id))
        await self._broadcast("createdeveloper", view)
        return ValueResult.success(view)

    async def update_developer(
        self, request: UpdateDeveloperRequest, actor_id: UUID | None = None
    ) -> ValueResult[DeveloperView]:
        error = validate_update_developer(request, **self._upload_limits)
        if error != Error.NONE:
            return ValueResult.failure(error)

        repo = self.uow.developers
        developer = await repo.get_by_id(request.id)
        if developer is None:
            await logger.awarning("developer_not_found", developer_id=str(request.id))
            return ValueResult.failure(DeveloperErrors.NotFound)

        old_path = developer.image_path
        new_path: str | None = None

        async with CompensationScope("update_developer") as scope:
            if request.image is not None:
                new_path = await self.files.upload(request.image)
                uploaded = new_path
                scope.register("remove_image", lambda: self.files.remove(uploaded))

            result = developer.update(
                request.full_name,
                request.age,
                new_path or old_path,
                request.job_title,
                request.year_of_experience,
                request.job_level,
                developer.user_id,
            )
            if result.is_failure:
                return ValueResult.failure(result.error)

            await repo.update(developer)
            if await self.uow.save_changes(actor_id) <= 0:
                return ValueResult.failure(DeveloperErrors.DatabaseError)
            scope.complete()

        # The previous image goes only once the new path is committed.
        if new_path and old_path and old_path != new_path:
            await self._discard_file(old_path)

        view = to_developer_view(developer, self.settings.base_url)
        await logger.ainfo("developer_updated", developer_id=str(developer.id))
        await self._broadcast("updatedeveloper", view)
        return ValueResult.success(view)

    async def delete_developer(self, developer_id: UUID, actor_id: UUID | None = None) -> Result:
        repo = self.uow.developers
        developer = await repo.get_by_id(developer_id)
        if developer is None:
            await logger.awarning("developer_not_found", developer_id=str(developer_id))
            return Result.failure(DeveloperErrors.NotFound)

        await repo.delete(developer)
        await self.uow.save_changes(actor_id)

        if developer.image_path:
            await self._discard_file(developer.image_path)

        await logger.ainfo("developer_deleted", developer_id=str(developer_id))
        await self._broadcast("deletedeveloper", {"id": str(developer_id)})
        return Result.success()

    async def _discard_file(self, path: str) -> None:
        try:
            await self.files.remove(path)
        except Exception:
            await logger.aexception("file_cleanup_failed", path=path)

    async def _broadcast(self, event: str, payload: Any) -> None:
        if not isinstance(payload, dict):
            payload = asdict(payload)
        try:
            await self.notifications.broadcast_all(event, payload)
        except Exception:
            await logger.aexception("notification_failed", notify_event=event)
