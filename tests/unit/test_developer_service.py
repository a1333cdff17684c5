"""Unit tests for developer onboarding, updates and removal."""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.domain import ApplicationUser, Developer, JobLevel
from taskflow.domain.errors import DeveloperErrors, FileErrors
from taskflow.domain.ports import UploadedFile
from taskflow.domain.requests import UpdateDeveloperRequest
from taskflow.domain.services import DeveloperService
from taskflow.infrastructure.identity import SqlAlchemyCredentialStore
from taskflow.infrastructure.repositories import UnitOfWork
from tests.fakes import FakeFileStore, FakeNotificationSink
from tests.utils import developer_request


class ExplodingUnitOfWork(UnitOfWork):
    """Fails at save time, after every external side effect has happened."""

    async def save_changes(self, actor_id: UUID | None = None) -> int:
        raise RuntimeError("database unavailable")


class NothingWrittenUnitOfWork(UnitOfWork):
    async def save_changes(self, actor_id: UUID | None = None) -> int:
        await self.session.rollback()
        return 0


async def count_developers(session_factory: async_sessionmaker[AsyncSession]) -> int:
    async with UnitOfWork(session_factory) as uow:
        return await uow.developers.count(include_deleted=True)


def avatar(name: str = "me.png") -> UploadedFile:
    return UploadedFile(filename=name, content=b"\x89PNG", content_type="image/png")


class TestCreateDeveloper:
    async def test_creates_credential_role_and_developer(
        self,
        developer_service: DeveloperService,
        credentials: SqlAlchemyCredentialStore,
        notifications: FakeNotificationSink,
        files: FakeFileStore,
        admin: ApplicationUser,
    ) -> None:
        result = await developer_service.create_developer(
            developer_request(image=avatar()), admin.id
        )

        assert result.is_success
        view = result.value
        assert view is not None
        assert view.full_name == "Jane Doe"
        assert view.image_path is not None and view.image_path.startswith("https://")
        assert len(files.files) == 1

        user = await credentials.find_by_email("jane@example.com")
        assert user is not None and user.id == view.user_id
        assert await credentials.get_roles(user) == ["Developer"]
        assert notifications.events() == ["createdeveloper"]

    async def test_audit_fields_carry_actor(
        self,
        developer_service: DeveloperService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        view = (await developer_service.create_developer(developer_request(), admin.id)).value
        assert view is not None

        async with UnitOfWork(session_factory) as uow:
            stored = await uow.developers.get_by_id(view.id)

        assert stored is not None
        assert stored.created_by_user_id == admin.id

    async def test_duplicate_profile_is_a_conflict(
        self, developer_service: DeveloperService, credentials: SqlAlchemyCredentialStore
    ) -> None:
        assert (await developer_service.create_developer(developer_request())).is_success

        result = await developer_service.create_developer(
            developer_request(
                email="other@example.com", full_name="JANE DOE", job_title="backend engineer"
            )
        )

        assert result.error == DeveloperErrors.DeveloperAlreadyExist
        assert await credentials.find_by_email("other@example.com") is None

    async def test_duplicate_email_is_rejected_before_any_row(
        self,
        developer_service: DeveloperService,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        assert (await developer_service.create_developer(developer_request())).is_success

        result = await developer_service.create_developer(
            developer_request(full_name="John Smith")
        )

        assert result.is_failure
        assert result.error.code == "DuplicateEmail"
        assert await count_developers(session_factory) == 1

    async def test_invalid_upload_touches_nothing(
        self,
        developer_service: DeveloperService,
        credentials: SqlAlchemyCredentialStore,
        files: FakeFileStore,
    ) -> None:
        result = await developer_service.create_developer(
            developer_request(image=avatar("virus.exe"))
        )

        assert result.error == FileErrors.InvalidExtension
        assert files.files == {}
        assert await credentials.find_by_email("jane@example.com") is None

    async def test_entity_rule_failure_undoes_credential_and_image(
        self,
        developer_service: DeveloperService,
        credentials: SqlAlchemyCredentialStore,
        files: FakeFileStore,
    ) -> None:
        # The request rules accept any positive age; the entity requires 18..80.
        result = await developer_service.create_developer(
            developer_request(age=12, image=avatar())
        )

        assert result.error == DeveloperErrors.InvalidAge
        assert files.files == {}
        assert len(files.removed) == 1
        assert await credentials.find_by_email("jane@example.com") is None

    async def test_save_failure_compensates_and_propagates(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        credentials: SqlAlchemyCredentialStore,
        files: FakeFileStore,
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        async with ExplodingUnitOfWork(session_factory) as uow:
            service = DeveloperService(uow, credentials, files, notifications)

            with pytest.raises(RuntimeError, match="database unavailable"):
                await service.create_developer(developer_request(image=avatar()), admin.id)

        assert files.files == {}
        assert await credentials.find_by_email("jane@example.com") is None
        assert await count_developers(session_factory) == 0
        assert notifications.broadcasts == []

    async def test_nothing_written_reports_database_error(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        credentials: SqlAlchemyCredentialStore,
        files: FakeFileStore,
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        async with NothingWrittenUnitOfWork(session_factory) as uow:
            service = DeveloperService(uow, credentials, files, notifications)
            result = await service.create_developer(developer_request())

        assert result.error == DeveloperErrors.DatabaseError
        assert await credentials.find_by_email("jane@example.com") is None


class TestReadDevelopers:
    async def test_paging_is_clamped(self, developer_service: DeveloperService) -> None:
        for index in range(3):
            request = developer_request(
                email=f"dev{index}@example.com", full_name=f"Developer {index}"
            )
            assert (await developer_service.create_developer(request)).is_success

        page = await developer_service.get_developers(page_number=0, page_size=2)

        assert page.page_number == 1
        assert page.total_count == 3
        assert len(page.items) == 2
        assert page.has_forward

    async def test_missing_developer(self, developer_service: DeveloperService) -> None:
        result = await developer_service.get_developer(uuid4())

        assert result.error == DeveloperErrors.NotFound


class TestUpdateAndDelete:
    async def test_update_replaces_image_after_commit(
        self, developer_service: DeveloperService, files: FakeFileStore
    ) -> None:
        created = (
            await developer_service.create_developer(developer_request(image=avatar("old.png")))
        ).value
        assert created is not None
        (old_path,) = files.files

        result = await developer_service.update_developer(
            UpdateDeveloperRequest(
                id=created.id,
                full_name="Jane Smith",
                age=31,
                job_title="Staff Engineer",
                year_of_experience=6,
                job_level=JobLevel.LEAD,
                image=avatar("new.png"),
            )
        )

        assert result.is_success
        assert result.value is not None and result.value.full_name == "Jane Smith"
        assert old_path in files.removed
        assert list(files.files) != [old_path]
        assert len(files.files) == 1

    async def test_update_unknown_developer(self, developer_service: DeveloperService) -> None:
        result = await developer_service.update_developer(
            UpdateDeveloperRequest(
                id=uuid4(),
                full_name="Jane Smith",
                age=31,
                job_title="Engineer",
                year_of_experience=6,
                job_level=JobLevel.LEAD,
            )
        )

        assert result.error == DeveloperErrors.NotFound

    async def test_delete_is_soft_and_removes_image(
        self,
        developer_service: DeveloperService,
        session_factory: async_sessionmaker[AsyncSession],
        files: FakeFileStore,
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        created = (
            await developer_service.create_developer(developer_request(image=avatar()))
        ).value
        assert created is not None

        result = await developer_service.delete_developer(created.id, admin.id)

        assert result.is_success
        assert files.files == {}
        assert notifications.events()[-1] == "deletedeveloper"
        assert (await developer_service.get_developer(created.id)).error == DeveloperErrors.NotFound

        async with UnitOfWork(session_factory) as uow:
            stored = await uow.developers.get_by_id(created.id, include_deleted=True)
        assert isinstance(stored, Developer)
        assert stored.is_deleted
        assert stored.deleted_by_user_id == admin.id

    async def test_delete_twice_is_not_found(self, developer_service: DeveloperService) -> None:
        created = (await developer_service.create_developer(developer_request())).value
        assert created is not None

        assert (await developer_service.delete_developer(created.id)).is_success
        assert (
            await developer_service.delete_developer(created.id)
        ).error == DeveloperErrors.NotFound
