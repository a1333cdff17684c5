from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.domain.entities import Comment, Developer, TaskEntity
from taskflow.domain.views import CommentView

from .generic import ChangeTracker, GenericRepository


class TaskRepository(GenericRepository[TaskEntity]):
    def __init__(self, session: AsyncSession, tracker: ChangeTracker | None = None) -> None:
        super().__init__(session, TaskEntity, tracker)

    async def get_comments(self, task_id: UUID) -> list[CommentView]:
        """Comments of a task with their author's name, oldest first."""
        stmt = (
            select(Comment, Developer.full_name)
            .outerjoin(Developer, Developer.id == Comment.developer_id)
            .where(Comment.task_entity_id == task_id)
            .order_by(Comment.created_at)
        )
        rows = await self.session.execute(stmt)
        return [
            CommentView(
                id=comment.id,
                content=comment.content,
                task_entity_id=comment.task_entity_id,
                developer_id=comment.developer_id,
                developer_name=full_name,
                created_at=comment.created_at,
            )
            for comment, full_name in rows.all()
        ]
