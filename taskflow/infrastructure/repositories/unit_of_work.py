from __future__ import annotations

from types import TracebackType
from typing import Any, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.domain.clock import utc_now
from taskflow.domain.entities import BaseEntity, Developer, TaskEntity

from .generic import ChangeTracker, GenericRepository
from .tasks import TaskRepository

logger = structlog.get_logger()

T = TypeVar("T")


class UnitOfWork:
    """One session, one logical operation.

    Repositories obtained from the same instance share its session, so
    ``save_changes`` persists everything they staged atomically. Audit columns
    are stamped at save time from the ``actor_id`` passed in. Leaving the
    context rolls back anything not committed and closes the session.
    Instances must not be shared between concurrent tasks.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._repositories: dict[type, GenericRepository[Any]] = {}
        self._tracker = ChangeTracker()
        self._explicit_transaction = False

    async def __aenter__(self) -> UnitOfWork:
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self._session
        if session is None:
            return
        try:
            # Detach first so the rollback cannot expire entities handed to callers.
            session.expunge_all()
            if session.in_transaction():
                await session.rollback()
        finally:
            await session.close()
            self._session = None
            self._repositories.clear()
            self._tracker.clear()
            self._explicit_transaction = False
            logger.debug("uow_exit", exc_type=exc_type.__name__ if exc_type else None)

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork used outside of its 'async with' block")
        return self._session

    @property
    def in_transaction(self) -> bool:
        return self._explicit_transaction

    def repository(self, entity_type: type[T]) -> GenericRepository[T]:
        repo = self._repositories.get(entity_type)
        if repo is None:
            if entity_type is TaskEntity:
                repo = TaskRepository(self.session, self._tracker)
            else:
                repo = GenericRepository(self.session, entity_type, self._tracker)
            self._repositories[entity_type] = repo
        return repo

    @property
    def developers(self) -> GenericRepository[Developer]:
        return self.repository(Developer)

    @property
    def tasks(self) -> TaskRepository:
        return self.repository(TaskEntity)  # type: ignore[return-value]

    async def save_changes(self, actor_id: UUID | None = None) -> int:
        """Stamp audit fields, flush, and commit unless a transaction is open.

        Returns the number of entities written; ``0`` means nothing changed.
        Any failure rolls the session back before the exception propagates.
        """
        session = self.session
        try:
            written = self._stamp_audit(session, actor_id)
            await session.flush()
            if not self._explicit_transaction:
                await session.commit()
        except Exception:
            await logger.aexception(
                "uow_save_failed", actor_id=str(actor_id) if actor_id else None
            )
            await self._reset()
            raise

        self._tracker.clear()
        return written

    async def begin_transaction(self) -> None:
        if self._explicit_transaction:
            raise RuntimeError("A transaction is already in progress")
        if not self.session.in_transaction():
            await self.session.begin()
        self._explicit_transaction = True

    async def commit_transaction(self, actor_id: UUID | None = None) -> int:
        """Run a final ``save_changes`` and commit; roll back and re-raise on failure."""
        if not self._explicit_transaction:
            raise RuntimeError("No transaction in progress")
        written = await self.save_changes(actor_id)
        try:
            await self.session.commit()
        except Exception:
            await self._reset()
            raise
        self._explicit_transaction = False
        return written

    async def rollback_transaction(self) -> None:
        await self._reset()

    async def _reset(self) -> None:
        await self.session.rollback()
        self._tracker.clear()
        self._explicit_transaction = False

    def _stamp_audit(self, session: AsyncSession, actor_id: UUID | None) -> int:
        now = utc_now()
        touched: dict[int, object] = {}

        for entity in [*self._tracker.created.values(), *session.new]:
            if id(entity) in touched:
                continue
            if isinstance(entity, BaseEntity):
                entity.created_by_user_id = actor_id
                entity.created_at = now
            touched[id(entity)] = entity

        for entity in self._tracker.deleted.values():
            entity.mark_deleted(actor_id, now)
            touched[id(entity)] = entity

        modified = [
            *self._tracker.updated.values(),
            *(entity for entity in session.dirty if session.is_modified(entity)),
        ]
        for entity in modified:
            if id(entity) in touched:
                continue
            if isinstance(entity, BaseEntity):
                entity.modified_by_user_id = actor_id
                entity.modified_at = now
            touched[id(entity)] = entity

        for entity in session.deleted:
            touched[id(entity)] = entity

        return len(touched)
