"""Generic async repository over one mapped entity type."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.domain.entities import BaseEntity

T = TypeVar("T")

Predicate = ColumnElement[bool]
OrderBy = Callable[[Select[Any]], Select[Any]]


@dataclass
class ChangeTracker:
    """Entities staged through repositories, keyed by object identity.

    The unit of work reads it at save time. Autoflush empties
    ``session.new`` before then, so the session alone cannot tell what was staged.
    """

    created: dict[int, Any] = field(default_factory=dict)
    updated: dict[int, Any] = field(default_factory=dict)
    deleted: dict[int, BaseEntity] = field(default_factory=dict)

    def clear(self) -> None:
        self.created.clear()
        self.updated.clear()
        self.deleted.clear()


class GenericRepository(Generic[T]):
    """CRUD and paged queries for a single entity type.

    Writes are only staged; the owning unit of work makes them durable.
    Soft-deleted rows are filtered out by default, pass ``include_deleted=True``
    to see them. Missing rows are reported as ``None`` or an empty list.
    """

    def __init__(
        self,
        session: AsyncSession,
        entity_type: type[T],
        tracker: ChangeTracker | None = None,
    ) -> None:
        self.session = session
        self.entity_type = entity_type
        self._tracker = tracker if tracker is not None else ChangeTracker()

    @property
    def soft_deletable(self) -> bool:
        return issubclass(self.entity_type, BaseEntity)

    def _base_query(
        self, predicate: Predicate | None, include_deleted: bool
    ) -> Select[tuple[T]]:
        stmt = select(self.entity_type)
        if predicate is not None:
            stmt = stmt.where(predicate)
        if self.soft_deletable and not include_deleted:
            stmt = stmt.where(self.entity_type.is_deleted.is_(False))  # type: ignore[attr-defined]
        return stmt

    def _with_includes(self, stmt: Select[tuple[T]], includes: Sequence[str]) -> Select[tuple[T]]:
        for name in includes:
            stmt = stmt.options(selectinload(getattr(self.entity_type, name)))
        return stmt

    async def count(
        self, predicate: Predicate | None = None, *, include_deleted: bool = False
    ) -> int:
        stmt = self._base_query(predicate, include_deleted)
        total = await self.session.scalar(select(func.count()).select_from(stmt.subquery()))
        return int(total or 0)

    async def get_all(
        self,
        predicate: Predicate | None = None,
        *,
        order_by: OrderBy | None = None,
        page_number: int | None = None,
        page_size: int | None = None,
        includes: Sequence[str] = (),
        include_deleted: bool = False,
    ) -> list[T]:
        """Filter, eager-load, order, then paginate (in that order).

        Rows come back detached: changing them is never written by ``save_changes``.
        """
        stmt = self._base_query(predicate, include_deleted)
        stmt = self._with_includes(stmt, includes)
        if order_by is not None:
            stmt = order_by(stmt)
        if page_number is not None and page_size is not None:
            stmt = stmt.offset((page_number - 1) * page_size).limit(page_size)

        # Held so their ids cannot be reused while the query runs.
        tracked = list(self.session.sync_session)
        result = await self.session.scalars(stmt)
        rows = list(result.all())
        self._detach(rows, includes, {id(obj) for obj in tracked})
        return rows

    def _detach(self, rows: list[T], includes: Sequence[str], keep: set[int]) -> None:
        """Expunge rows this query loaded, and their included relations.

        Entities the session already held stay attached, since callers may
        have staged changes on them.
        """
        loaded: list[Any] = list(rows)
        for row in rows:
            for name in includes:
                related = getattr(row, name)
                if isinstance(related, list):
                    loaded.extend(related)
                elif related is not None:
                    loaded.append(related)
        for obj in loaded:
            if id(obj) not in keep and obj in self.session:
                self.session.expunge(obj)

    async def get_by_id(
        self, entity_id: UUID, *includes: str, include_deleted: bool = False
    ) -> T | None:
        return await self.first_or_default(
            self.entity_type.id == entity_id,  # type: ignore[attr-defined]
            *includes,
            include_deleted=include_deleted,
        )

    async def first_or_default(
        self, predicate: Predicate, *includes: str, include_deleted: bool = False
    ) -> T | None:
        stmt = self._with_includes(self._base_query(predicate, include_deleted), includes)
        result = await self.session.scalars(stmt.limit(1))
        return result.first()

    async def is_exist(self, predicate: Predicate, *, include_deleted: bool = False) -> bool:
        stmt = self._base_query(predicate, include_deleted).exists()
        return bool(await self.session.scalar(select(stmt)))

    async def create(self, entity: T) -> None:
        self.session.add(entity)
        self._tracker.created[id(entity)] = entity

    async def update(self, entity: T) -> None:
        self.session.add(entity)
        self._tracker.updated[id(entity)] = entity

    async def delete(self, entity: T) -> None:
        """Stage a soft delete; entities without audit state are removed outright."""
        if isinstance(entity, BaseEntity):
            self.session.add(entity)
            self._tracker.deleted[id(entity)] = entity
        else:
            await self.session.delete(entity)
