from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from taskflow.api.deps import get_db_session_factory, get_file_store, get_notification_sink
from taskflow.api.main import app
from taskflow.core.config import get_settings
from taskflow.domain import ApplicationUser
from taskflow.domain.services import AccountService, AuthenticationService, DeveloperService, TaskService
from taskflow.infrastructure.db import Base, build_session_factory
from taskflow.infrastructure.identity import SqlAlchemyCredentialStore, seed_identity
from taskflow.infrastructure.repositories import UnitOfWork
from tests.fakes import FakeFileStore, FakeNotificationSink


@pytest.fixture()
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    # A file database lets the credential store and the unit of work use separate connections.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'taskflow.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture()
async def admin(session_factory: async_sessionmaker[AsyncSession]) -> ApplicationUser:
    """Seed roles and the bootstrap administrator."""
    return await seed_identity(session_factory, get_settings())


@pytest.fixture()
def credentials(session_factory: async_sessionmaker[AsyncSession]) -> SqlAlchemyCredentialStore:
    return SqlAlchemyCredentialStore(session_factory)


@pytest.fixture()
def files() -> FakeFileStore:
    return FakeFileStore()


@pytest.fixture()
def notifications() -> FakeNotificationSink:
    return FakeNotificationSink()


@pytest.fixture()
async def uow(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[UnitOfWork]:
    async with UnitOfWork(session_factory) as unit_of_work:
        yield unit_of_work


@pytest.fixture()
def auth_service(credentials: SqlAlchemyCredentialStore, admin: ApplicationUser) -> AuthenticationService:
    return AuthenticationService(credentials)


@pytest.fixture()
def account_service(credentials: SqlAlchemyCredentialStore, admin: ApplicationUser) -> AccountService:
    return AccountService(credentials)


@pytest.fixture()
def developer_service(
    uow: UnitOfWork,
    credentials: SqlAlchemyCredentialStore,
    files: FakeFileStore,
    notifications: FakeNotificationSink,
    admin: ApplicationUser,
) -> DeveloperService:
    return DeveloperService(uow, credentials, files, notifications)


@pytest.fixture()
def task_service(
    uow: UnitOfWork,
    files: FakeFileStore,
    notifications: FakeNotificationSink,
    admin: ApplicationUser,
) -> TaskService:
    return TaskService(uow, files, notifications)


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    admin: ApplicationUser,
    files: FakeFileStore,
    notifications: FakeNotificationSink,
) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app with the test database and in-memory side effects."""
    app.dependency_overrides[get_db_session_factory] = lambda: session_factory
    app.dependency_overrides[get_file_store] = lambda: files
    app.dependency_overrides[get_notification_sink] = lambda: notifications

    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
