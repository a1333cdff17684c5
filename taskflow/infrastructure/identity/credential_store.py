"""Credential store backed by SQLAlchemy, with bcrypt password hashing."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import secrets
from datetime import timedelta
from uuid import UUID

import structlog
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.domain.clock import utc_now
from taskflow.domain.identity import ApplicationUser, IdentityError, IdentityResult, RefreshToken
from taskflow.infrastructure.db.models import (
    RefreshTokenModel,
    RoleModel,
    UserClaimModel,
    UserModel,
)

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PERMISSION_CLAIM = "permission"
RESET_TOKEN_LIFETIME = timedelta(hours=24)

DUPLICATE_EMAIL = "DuplicateEmail"
PASSWORD_MISMATCH = IdentityError("PasswordMismatch", "Incorrect password.")
INVALID_RESET_TOKEN = IdentityError("InvalidToken", "Invalid token.")
USER_NOT_FOUND = IdentityError("UserNotFound", "User not found.")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def normalize_email(email: str) -> str:
    return email.strip().upper()


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_uuid(value: UUID | str) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class SqlAlchemyCredentialStore:
    """User credentials, roles, claims and refresh tokens.

    Every call runs in its own short session and commits before returning, so
    a created credential is durable independently of any unit of work. That
    is why services pair ``create_user`` with a compensating ``delete_user``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> ApplicationUser | None:
        if not email:
            return None
        async with self._session_factory() as session:
            model = await self._model_by_email(session, email)
            return self._map_to_domain(model) if model else None

    async def find_by_id(self, user_id: UUID | str) -> ApplicationUser | None:
        key = _as_uuid(user_id)
        if key is None:
            return None
        async with self._session_factory() as session:
            model = await session.get(UserModel, key)
            return self._map_to_domain(model) if model else None

    async def create_user(self, user: ApplicationUser, password: str) -> IdentityResult:
        async with self._session_factory() as session:
            if await self._model_by_email(session, user.email) is not None:
                return IdentityResult.failed(
                    IdentityError(DUPLICATE_EMAIL, f"Email '{user.email}' is already taken.")
                )

            session.add(
                UserModel(
                    id=user.id,
                    email=user.email.strip(),
                    normalized_email=normalize_email(user.email),
                    user_name=user.user_name,
                    hashed_password=await asyncio.to_thread(hash_password, password),
                    email_confirmed=user.email_confirmed,
                    created_at=user.created_at,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                await logger.awarning("credential_duplicate_email", email=user.email)
                return IdentityResult.failed(
                    IdentityError(DUPLICATE_EMAIL, f"Email '{user.email}' is already taken.")
                )

        await logger.ainfo("credential_created", user_id=str(user.id))
        return IdentityResult.success()

    async def check_password(self, user: ApplicationUser, password: str) -> bool:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return False
            return await asyncio.to_thread(verify_password, password, model.hashed_password)

    async def change_password(
        self, user: ApplicationUser, current_password: str, new_password: str
    ) -> IdentityResult:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return IdentityResult.failed(USER_NOT_FOUND)
            if not await asyncio.to_thread(verify_password, current_password, model.hashed_password):
                return IdentityResult.failed(PASSWORD_MISMATCH)

            model.hashed_password = await asyncio.to_thread(hash_password, new_password)
            await session.commit()
        return IdentityResult.success()

    async def generate_password_reset_token(self, user: ApplicationUser) -> str:
        token = secrets.token_urlsafe(32)
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return ""
            model.reset_token_hash = _hash_reset_token(token)
            model.reset_token_expires_at = utc_now() + RESET_TOKEN_LIFETIME
            await session.commit()
        return token

    async def reset_password(
        self, user: ApplicationUser, token: str, new_password: str
    ) -> IdentityResult:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return IdentityResult.failed(USER_NOT_FOUND)

            expected = model.reset_token_hash
            expires_at = model.reset_token_expires_at
            if (
                not expected
                or expires_at is None
                or expires_at <= utc_now()
                or not hmac.compare_digest(expected, _hash_reset_token(token))
            ):
                return IdentityResult.failed(INVALID_RESET_TOKEN)

            model.hashed_password = await asyncio.to_thread(hash_password, new_password)
            model.reset_token_hash = None
            model.reset_token_expires_at = None
            await session.commit()
        return IdentityResult.success()

    async def get_roles(self, user: ApplicationUser) -> list[str]:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return []
            return sorted(role.name for role in model.roles)

    async def get_claims(self, user: ApplicationUser) -> list[tuple[str, str]]:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return []
            return [(claim.claim_type, claim.claim_value) for claim in model.claims]

    async def add_to_role(self, user: ApplicationUser, role: str) -> IdentityResult:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return IdentityResult.failed(USER_NOT_FOUND)
            role_model = await session.scalar(select(RoleModel).where(RoleModel.name == role))
            if role_model is None:
                return IdentityResult.failed(
                    IdentityError("InvalidRoleName", f"Role '{role}' does not exist.")
                )
            if any(existing.id == role_model.id for existing in model.roles):
                return IdentityResult.failed(
                    IdentityError("UserAlreadyInRole", f"User already in role '{role}'.")
                )
            model.roles.append(role_model)
            await session.commit()
        return IdentityResult.success()

    async def add_claim(
        self, user: ApplicationUser, claim_type: str, claim_value: str
    ) -> IdentityResult:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return IdentityResult.failed(USER_NOT_FOUND)
            if any(
                c.claim_type == claim_type and c.claim_value == claim_value for c in model.claims
            ):
                return IdentityResult.success()
            model.claims.append(UserClaimModel(claim_type=claim_type, claim_value=claim_value))
            await session.commit()
        return IdentityResult.success()

    async def delete_user(self, user: ApplicationUser) -> IdentityResult:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return IdentityResult.failed(USER_NOT_FOUND)
            await session.delete(model)
            await session.commit()

        await logger.ainfo("credential_deleted", user_id=str(user.id))
        return IdentityResult.success()

    async def update_user(self, user: ApplicationUser) -> IdentityResult:
        """Persist profile fields and reconcile refresh tokens by token value."""
        async with self._session_factory() as session:
            model = await session.get(UserModel, user.id)
            if model is None:
                return IdentityResult.failed(USER_NOT_FOUND)

            model.email = user.email.strip()
            model.normalized_email = normalize_email(user.email)
            model.user_name = user.user_name
            model.email_confirmed = user.email_confirmed

            stored = {rt.token: rt for rt in model.refresh_tokens}
            for token in user.refresh_tokens:
                existing = stored.get(token.token)
                if existing is None:
                    model.refresh_tokens.append(
                        RefreshTokenModel(
                            token=token.token,
                            expires_on=token.expires_on,
                            created_on=token.created_on,
                            revoked_on=token.revoked_on,
                        )
                    )
                elif existing.revoked_on is None and token.revoked_on is not None:
                    existing.revoked_on = token.revoked_on

            await session.commit()
        return IdentityResult.success()

    async def _model_by_email(self, session: AsyncSession, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.normalized_email == normalize_email(email))
        return await session.scalar(stmt)

    def _map_to_domain(self, model: UserModel) -> ApplicationUser:
        return ApplicationUser(
            id=model.id,
            email=model.email,
            user_name=model.user_name,
            email_confirmed=model.email_confirmed,
            created_at=model.created_at,
            refresh_tokens=[
                RefreshToken(
                    token=rt.token,
                    expires_on=rt.expires_on,
                    created_on=rt.created_on,
                    revoked_on=rt.revoked_on,
                )
                for rt in model.refresh_tokens
            ],
        )
