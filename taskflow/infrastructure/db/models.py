from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskflow.domain.clock import utc_now
from taskflow.domain.entities import Comment, Developer, JobLevel, TaskEntity, TaskProgress

from .base import Base, mapper_registry
from .types import UTCDateTime


def _enum(enum_cls: type, name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=lambda e: [x.value for x in e])


def _audit_columns() -> list[Column]:
    return [
        Column("created_by_user_id", Uuid, nullable=True),
        Column("created_at", UTCDateTime, nullable=False, default=utc_now),
        Column("modified_by_user_id", Uuid, nullable=True),
        Column("modified_at", UTCDateTime, nullable=True),
        Column("deleted_by_user_id", Uuid, nullable=True),
        Column("deleted_at", UTCDateTime, nullable=True),
        Column("is_deleted", Boolean, nullable=False, default=False, index=True),
    ]


# --- Domain tables (imperative mapping) ---

developers_table = Table(
    "developers",
    mapper_registry.metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("full_name", String(50), nullable=False),
    Column("age", Integer, nullable=False),
    Column("image_path", String(512), nullable=True),
    Column("job_title", String(50), nullable=False),
    Column("year_of_experience", Integer, nullable=False),
    Column("job_level", _enum(JobLevel, "job_level"), nullable=False),
    Column("user_id", Uuid, ForeignKey("users.id"), nullable=False, index=True),
    *_audit_columns(),
)

tasks_table = Table(
    "tasks",
    mapper_registry.metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("start_at", UTCDateTime, nullable=False),
    Column("end_at", UTCDateTime, nullable=False),
    Column("content", String(1000), nullable=True),
    Column("document", String(512), nullable=True),
    Column("is_finished", Boolean, nullable=False, default=False),
    Column("progress", _enum(TaskProgress, "task_progress"), nullable=False),
    Column(
        "assigned_to_developer_id",
        Uuid,
        ForeignKey("developers.id"),
        nullable=True,
        index=True,
    ),
    *_audit_columns(),
)

comments_table = Table(
    "comments",
    mapper_registry.metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("content", Text, nullable=False),
    Column("task_entity_id", Uuid, ForeignKey("tasks.id"), nullable=False, index=True),
    Column("developer_id", Uuid, ForeignKey("developers.id"), nullable=False),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
)


def map_domain_entities() -> None:
    """Attach the domain classes to their tables. Safe to call more than once."""
    if hasattr(Developer, "__mapper__"):
        return

    mapper_registry.map_imperatively(Comment, comments_table)
    mapper_registry.map_imperatively(
        TaskEntity,
        tasks_table,
        properties={
            "comments": relationship(
                Comment, lazy="raise", order_by=comments_table.c.created_at
            ),
            "assigned_to_developer": relationship(
                Developer, back_populates="assigned_tasks", lazy="raise"
            ),
        },
    )
    mapper_registry.map_imperatively(
        Developer,
        developers_table,
        properties={
            "assigned_tasks": relationship(
                TaskEntity,
                back_populates="assigned_to_developer",
                lazy="raise",
                order_by=tasks_table.c.created_at,
            ),
        },
    )


map_domain_entities()


# --- Identity models ---

user_roles_table = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class UserModel(Base):
    """SQLAlchemy model for users table."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    normalized_email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    email_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reset_token_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now, nullable=False)

    roles: Mapped[list[RoleModel]] = relationship(
        secondary=user_roles_table, lazy="selectin"
    )
    claims: Mapped[list[UserClaimModel]] = relationship(
        back_populates="user", cascade="all, delete-orphan", lazy="selectin"
    )
    refresh_tokens: Mapped[list[RefreshTokenModel]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RefreshTokenModel.id",
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"


class RoleModel(Base):
    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now, nullable=False)


class UserClaimModel(Base):
    __tablename__ = "user_claims"
    __table_args__ = (UniqueConstraint("user_id", "claim_type", "claim_value"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    claim_type: Mapped[str] = mapped_column(String(64), nullable=False)
    claim_value: Mapped[str] = mapped_column(String(128), nullable=False)

    user: Mapped[UserModel] = relationship(back_populates="claims")


class RefreshTokenModel(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    expires_on: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_on: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now, nullable=False)
    revoked_on: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    user: Mapped[UserModel] = relationship(back_populates="refresh_tokens")
