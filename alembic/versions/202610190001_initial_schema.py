"""Initial schema for identity, developers, tasks, and comments

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None

job_level_enum = sa.Enum("Intern", "Junior", "MidLevel", "Senior", "Lead", name="job_level")
task_progress_enum = sa.Enum("NotStarted", "InProgress", "Completed", name="task_progress")


def audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_by_user_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_by_user_id", sa.Uuid(), nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by_user_id", sa.Uuid(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("normalized_email", sa.String(length=255), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reset_token_hash", sa.String(length=128), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_users_normalized_email", "users", ["normalized_email"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=64), nullable=False, unique=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_table(
        "user_roles",
        sa.Column(
            "user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "role_id", sa.Uuid(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
        ),
    )

    op.create_table(
        "user_claims",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("claim_type", sa.String(length=64), nullable=False),
        sa.Column("claim_value", sa.String(length=128), nullable=False),
        sa.UniqueConstraint("user_id", "claim_type", "claim_value"),
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("token", sa.String(length=128), nullable=False, index=True),
        sa.Column("expires_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_on",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("revoked_on", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "developers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("full_name", sa.String(length=50), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("image_path", sa.String(length=512), nullable=True),
        sa.Column("job_title", sa.String(length=50), nullable=False),
        sa.Column("year_of_experience", sa.Integer(), nullable=False),
        sa.Column("job_level", job_level_enum, nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False, index=True),
        *audit_columns(),
    )
    op.create_index("ix_developers_is_deleted", "developers", ["is_deleted"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("content", sa.String(length=1000), nullable=True),
        sa.Column("document", sa.String(length=512), nullable=True),
        sa.Column("is_finished", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("progress", task_progress_enum, nullable=False),
        sa.Column(
            "assigned_to_developer_id",
            sa.Uuid(),
            sa.ForeignKey("developers.id"),
            nullable=True,
            index=True,
        ),
        *audit_columns(),
    )
    op.create_index("ix_tasks_is_deleted", "tasks", ["is_deleted"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "task_entity_id", sa.Uuid(), sa.ForeignKey("tasks.id"), nullable=False, index=True
        ),
        sa.Column("developer_id", sa.Uuid(), sa.ForeignKey("developers.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("comments")
    op.drop_index("ix_tasks_is_deleted", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_developers_is_deleted", table_name="developers")
    op.drop_table("developers")
    op.drop_table("refresh_tokens")
    op.drop_table("user_claims")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_index("ix_users_normalized_email", table_name="users")
    op.drop_table("users")
    task_progress_enum.drop(op.get_bind(), checkfirst=True)
    job_level_enum.drop(op.get_bind(), checkfirst=True)
