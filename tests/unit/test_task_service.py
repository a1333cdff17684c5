"""Unit tests for task assignment, progress, paging and comments."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.domain import ApplicationUser, Developer, JobLevel, TaskProgress
from taskflow.domain.errors import DeveloperErrors, TaskErrors, UserErrors
from taskflow.domain.ports import UploadedFile
from taskflow.domain.requests import CreateCommentRequest, UpdateTaskRequest
from taskflow.domain.services import TaskService
from taskflow.infrastructure.repositories import UnitOfWork
from tests.fakes import FakeFileStore, FakeNotificationSink
from tests.utils import future_window, task_request


@asynccontextmanager
async def request_scope(
    session_factory: async_sessionmaker[AsyncSession],
    files: FakeFileStore,
    notifications: FakeNotificationSink,
) -> AsyncIterator[TaskService]:
    """A fresh unit of work per call, the way each HTTP request gets one."""
    async with UnitOfWork(session_factory) as uow:
        yield TaskService(uow, files, notifications)


async def add_developer(
    session_factory: async_sessionmaker[AsyncSession], user_id: UUID, name: str = "Jane Doe"
) -> Developer:
    developer = Developer.create(name, 30, None, "Engineer", 3, JobLevel.MID_LEVEL, user_id).value
    assert developer is not None
    async with UnitOfWork(session_factory) as uow:
        await uow.developers.create(developer)
        await uow.save_changes()
    return developer


def document(name: str = "brief.pdf") -> UploadedFile:
    return UploadedFile(filename=name, content=b"%PDF-1.7", content_type="application/pdf")


class TestAssignTask:
    async def test_assign_task(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        files: FakeFileStore,
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)

        result = await task_service.assign_task(
            task_request(developer.id, document=document()), admin.id
        )

        assert result.is_success
        view = result.value
        assert view is not None
        assert view.assigned_to_developer_id == developer.id
        assert view.progress is TaskProgress.NOT_STARTED
        assert view.document is not None and view.document.endswith("brief.pdf")
        assert len(files.files) == 1
        assert notifications.events() == ["assigntask"]

    async def test_invalid_range_writes_nothing(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        files: FakeFileStore,
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        start, _ = future_window()

        result = await task_service.assign_task(
            task_request(
                developer.id,
                start_at=start,
                end_at=start - timedelta(hours=1),
                document=document(),
            )
        )

        assert result.error == TaskErrors.InvalidDateRange
        assert files.files == {}
        async with UnitOfWork(session_factory) as uow:
            assert await uow.tasks.count(include_deleted=True) == 0

    async def test_unknown_developer(self, task_service: TaskService, files: FakeFileStore) -> None:
        result = await task_service.assign_task(task_request(uuid4(), document=document()))

        assert result.error == DeveloperErrors.NotFound
        assert files.files == {}


class TestProgress:
    async def test_completed_marks_finished(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        task = (await task_service.assign_task(task_request(developer.id))).value
        assert task is not None

        result = await task_service.change_task_status(task.id, TaskProgress.COMPLETED, admin.id)

        assert result.is_success
        stored = (await task_service.get_task(task.id)).value
        assert stored is not None
        assert stored.is_finished is True
        assert stored.progress is TaskProgress.COMPLETED
        assert notifications.events()[-1] == "changetaskstatus"

    async def test_same_progress_is_a_no_op(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        task = (await task_service.assign_task(task_request(developer.id))).value
        assert task is not None

        result = await task_service.change_task_status(task.id, TaskProgress.NOT_STARTED)

        assert result.is_success
        assert notifications.events() == ["assigntask"]

    async def test_unknown_task(self, task_service: TaskService) -> None:
        result = await task_service.change_task_status(uuid4(), TaskProgress.IN_PROGRESS)

        assert result.error == TaskErrors.NotFound


class TestQueries:
    async def test_paging_over_twenty_five_tasks(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        for index in range(25):
            assert (
                await task_service.assign_task(task_request(developer.id, content=f"Task {index}"))
            ).is_success

        sizes = []
        for page_number in (1, 2, 3, 4):
            page = (await task_service.get_tasks(page_number, 10)).value
            assert page is not None
            assert page.total_count == 25
            assert page.total_pages == 3
            sizes.append(len(page.items))

        assert sizes == [10, 10, 5, 0]

    async def test_page_size_is_capped(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        for index in range(12):
            await task_service.assign_task(task_request(developer.id, content=f"Task {index}"))

        page = (await task_service.get_tasks(1, 100)).value

        assert page is not None
        assert page.page_size == 10
        assert len(page.items) == 10

    async def test_tasks_by_status_newest_first(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        older = (await task_service.assign_task(task_request(developer.id, content="older"))).value
        newer = (await task_service.assign_task(task_request(developer.id, content="newer"))).value
        done = (await task_service.assign_task(task_request(developer.id, content="done"))).value
        assert older and newer and done
        await task_service.change_task_status(done.id, TaskProgress.COMPLETED)

        page = (await task_service.get_tasks_by_status(TaskProgress.NOT_STARTED, 1, 10)).value

        assert page is not None
        assert page.total_count == 2
        assert [item.id for item in page.items] == [newer.id, older.id]

    async def test_developer_tasks_resolve_by_user(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        mine = await add_developer(session_factory, admin.id)
        other_user = uuid4()
        other = await add_developer(session_factory, other_user, name="John Smith")
        await task_service.assign_task(task_request(mine.id, content="mine"))
        await task_service.assign_task(task_request(other.id, content="theirs"))

        page = (await task_service.get_developer_tasks(other_user, 1, 10)).value

        assert page is not None
        assert [item.content for item in page.items] == ["theirs"]

    async def test_developer_tasks_without_developer(self, task_service: TaskService) -> None:
        result = await task_service.get_developer_tasks(uuid4(), 1, 10)

        assert result.error == DeveloperErrors.NotFound


class TestUpdateAndDelete:
    async def test_update_keeps_document_when_none_given(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        files: FakeFileStore,
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        other = await add_developer(session_factory, uuid4(), name="John Smith")
        task = (
            await task_service.assign_task(task_request(developer.id, document=document()))
        ).value
        assert task is not None
        start, end = future_window(start_in=timedelta(days=3))

        result = await task_service.update_task(
            UpdateTaskRequest(
                id=task.id,
                start_at=start,
                end_at=end,
                content="Reworded",
                progress=TaskProgress.IN_PROGRESS,
                assigned_to_developer_id=other.id,
            ),
            admin.id,
        )

        assert result.is_success
        view = result.value
        assert view is not None
        assert view.content == "Reworded"
        assert view.progress is TaskProgress.IN_PROGRESS
        assert view.assigned_to_developer_id == other.id
        assert view.document == task.document
        assert files.removed == []

    async def test_update_swaps_document(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        files: FakeFileStore,
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        task = (
            await task_service.assign_task(task_request(developer.id, document=document("a.pdf")))
        ).value
        assert task is not None
        (old_path,) = files.files
        start, end = future_window()

        result = await task_service.update_task(
            UpdateTaskRequest(
                id=task.id,
                start_at=start,
                end_at=end,
                content="Same task",
                progress=TaskProgress.NOT_STARTED,
                assigned_to_developer_id=developer.id,
                document=document("b.pdf"),
            )
        )

        assert result.is_success
        assert files.removed == [old_path]
        assert len(files.files) == 1

    async def test_delete_hides_task(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, admin.id)
        task = (await task_service.assign_task(task_request(developer.id))).value
        assert task is not None

        assert (await task_service.delete_task(task.id, admin.id)).is_success

        assert (await task_service.get_task(task.id)).error == TaskErrors.NotFound
        assert (await task_service.delete_task(task.id)).error == TaskErrors.NotFound


class TestComments:
    async def test_comment_notifies_assignee(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        files: FakeFileStore,
        notifications: FakeNotificationSink,
        admin: ApplicationUser,
    ) -> None:
        assignee_user = uuid4()
        assignee = await add_developer(session_factory, assignee_user, name="Assigned Dev")
        author = await add_developer(session_factory, admin.id, name="Reviewer Dev")

        async with request_scope(session_factory, files, notifications) as service:
            task = (await service.assign_task(task_request(assignee.id))).value
        assert task is not None

        async with request_scope(session_factory, files, notifications) as service:
            result = await service.add_comment(
                admin.id, task.id, CreateCommentRequest(content="Please add tests")
            )

        assert result.is_success
        comment = result.value
        assert comment is not None
        assert comment.developer_id == author.id
        assert comment.developer_name == "Reviewer Dev"
        assert notifications.direct == [
            (
                str(assignee_user),
                "notifycomment",
                {
                    "from": "Reviewer Dev",
                    "content": "Please add tests",
                    "task_title": task.content,
                },
            )
        ]

        async with request_scope(session_factory, files, notifications) as service:
            comments = (await service.get_comments(task.id)).value

        assert comments is not None
        assert [c.content for c in comments] == ["Please add tests"]
        assert comments[0].developer_name == "Reviewer Dev"

    async def test_comment_requires_developer_profile(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        developer = await add_developer(session_factory, uuid4())
        task = (await task_service.assign_task(task_request(developer.id))).value
        assert task is not None

        result = await task_service.add_comment(
            admin.id, task.id, CreateCommentRequest(content="hello")
        )

        assert result.error == UserErrors.NotFound

    async def test_comment_on_missing_task(
        self,
        task_service: TaskService,
        session_factory: async_sessionmaker[AsyncSession],
        admin: ApplicationUser,
    ) -> None:
        await add_developer(session_factory, admin.id)

        result = await task_service.add_comment(
            admin.id, uuid4(), CreateCommentRequest(content="hello")
        )

        assert result.error == TaskErrors.NotFound

    async def test_comments_of_missing_task(self, task_service: TaskService) -> None:
        assert (await task_service.get_comments(uuid4())).error == TaskErrors.NotFound
