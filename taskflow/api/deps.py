from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable, Sequence
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.core.auth import Role, TokenError, decode_access_token
from taskflow.core.config import get_settings
from taskflow.domain import CurrentUser
from taskflow.domain.ports import CredentialStore, FileStore, NotificationSink
from taskflow.domain.services import (
    AccountService,
    AuthenticationService,
    DeveloperService,
    TaskService,
)
from taskflow.infrastructure.db.session import get_session_factory
from taskflow.infrastructure.identity import SqlAlchemyCredentialStore
from taskflow.infrastructure.notifications import RedisNotificationSink
from taskflow.infrastructure.repositories import UnitOfWork
from taskflow.infrastructure.storage import LocalFileStore

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> CurrentUser:
    """Resolve the authenticated user from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    user_id = payload.get("sub")
    roles: Iterable[str] = payload.get("roles", [])

    if not user_id:
        raise _unauthorized("Token missing subject")

    return CurrentUser(
        user_id=user_id,
        email=payload.get("email", ""),
        name=payload.get("name", ""),
        roles=list(roles),
        permissions=list(payload.get("permissions", [])),
    )


def require_roles(required_roles: Sequence[Role]) -> Callable[[CurrentUser], CurrentUser]:
    """Dependency factory enforcing that the authenticated user has one of the required roles."""
    required = {Role(role).value for role in required_roles}

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:  # noqa: B008
        if not required.intersection(user.roles):
            raise _forbidden("Insufficient role privileges")
        return user

    return dependency


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory shared by the unit of work and the credential store."""
    return get_session_factory()


async def get_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),  # noqa: B008
) -> AsyncIterator[UnitOfWork]:
    """Provide one unit of work per request; it is closed when the response is sent."""
    async with UnitOfWork(session_factory) as uow:
        yield uow


def get_credential_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),  # noqa: B008
) -> CredentialStore:
    return SqlAlchemyCredentialStore(session_factory)


@lru_cache
def get_file_store() -> FileStore:
    return LocalFileStore(get_settings().upload_root)


@lru_cache
def get_notification_sink() -> NotificationSink:
    return RedisNotificationSink.from_url(get_settings().redis_url)


def get_authentication_service(
    credentials: CredentialStore = Depends(get_credential_store),  # noqa: B008
) -> AuthenticationService:
    return AuthenticationService(credentials)


def get_account_service(
    credentials: CredentialStore = Depends(get_credential_store),  # noqa: B008
) -> AccountService:
    return AccountService(credentials)


def get_developer_service(
    uow: UnitOfWork = Depends(get_unit_of_work),  # noqa: B008
    credentials: CredentialStore = Depends(get_credential_store),  # noqa: B008
    files: FileStore = Depends(get_file_store),  # noqa: B008
    notifications: NotificationSink = Depends(get_notification_sink),  # noqa: B008
) -> DeveloperService:
    return DeveloperService(uow, credentials, files, notifications)


def get_task_service(
    uow: UnitOfWork = Depends(get_unit_of_work),  # noqa: B008
    files: FileStore = Depends(get_file_store),  # noqa: B008
    notifications: NotificationSink = Depends(get_notification_sink),  # noqa: B008
) -> TaskService:
    return TaskService(uow, files, notifications)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
