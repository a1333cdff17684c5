from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.core.auth import ROLE_PERMISSIONS, Role
from taskflow.core.config import Settings, get_settings
from taskflow.domain.identity import ApplicationUser
from taskflow.infrastructure.db.models import RoleModel

from .credential_store import PERMISSION_CLAIM, SqlAlchemyCredentialStore

logger = structlog.get_logger()


async def seed_roles(session: AsyncSession) -> list[str]:
    """Create any missing application role; returns the names created."""
    existing = set(await session.scalars(select(RoleModel.name)))
    created = [role.value for role in Role if role.value not in existing]
    for name in created:
        session.add(RoleModel(name=name))
    await session.commit()
    return created


async def seed_identity(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings | None = None
) -> ApplicationUser:
    """Idempotently create the roles and the bootstrap administrator."""
    settings = settings or get_settings()

    async with session_factory() as session:
        created_roles = await seed_roles(session)
    if created_roles:
        await logger.ainfo("roles_seeded", roles=created_roles)

    store = SqlAlchemyCredentialStore(session_factory)
    admin = await store.find_by_email(settings.seed_admin_email)
    if admin is not None:
        return admin

    admin = ApplicationUser(
        email=settings.seed_admin_email,
        user_name="admin",
        email_confirmed=True,
    )
    outcome = await store.create_user(admin, settings.seed_admin_password)
    if not outcome.succeeded:
        first = outcome.first_error
        raise RuntimeError(f"Could not seed administrator: {first.description if first else outcome}")

    await store.add_to_role(admin, Role.ADMIN.value)
    for permission in ROLE_PERMISSIONS[Role.ADMIN]:
        await store.add_claim(admin, PERMISSION_CLAIM, permission)

    await logger.ainfo("admin_seeded", user_id=str(admin.id), email=admin.email)
    return admin
