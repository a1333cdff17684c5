"""Authentication: login, refresh-token rotation, revocation and password reset."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog

from taskflow.core.auth import generate_refresh_token, generate_token, validate_token
from taskflow.core.config import Settings, get_settings
from taskflow.domain.errors import UserErrors, validation_error
from taskflow.domain.identity import ApplicationUser
from taskflow.domain.ports import CredentialStore
from taskflow.domain.requests import LoginRequest, ResetPasswordRequest
from taskflow.domain.results import Error, Result, ValueResult
from taskflow.domain.validators import validate_login, validate_reset_password
from taskflow.domain.views import LoginResponse

logger = structlog.get_logger()


class AuthenticationService:
    """Service for authentication operations.

    Refresh tokens are single use: redeeming one revokes it and mints exactly
    one successor. Several active tokens may coexist for one user (one per
    device).
    """

    def __init__(self, credentials: CredentialStore, settings: Settings | None = None) -> None:
        self.credentials = credentials
        self.settings = settings or get_settings()

    async def login(self, request: LoginRequest) -> ValueResult[LoginResponse]:
        """Authenticate with email and password.

        Unknown email, wrong password and malformed input are indistinguishable
        to the caller.
        """
        if validate_login(request) != Error.NONE:
            return await self._invalid_login(request.email, "invalid_request")

        user = await self.credentials.find_by_email(request.email)
        if user is None:
            return await self._invalid_login(request.email, "unknown_email")

        if not await self.credentials.check_password(user, request.password):
            return await self._invalid_login(request.email, "wrong_password")

        response = await self._issue_tokens(user)
        await logger.ainfo("login_success", user_id=str(user.id))
        return ValueResult.success(response)

    async def refresh_token(
        self, access_token: str, refresh_token: str
    ) -> ValueResult[LoginResponse]:
        """Redeem an active refresh token for a new access/refresh pair."""
        user = await self._find_token_owner(access_token)
        current = user.find_active_refresh_token(refresh_token) if user else None
        if user is None or current is None:
            await logger.awarning("refresh_token_rejected")
            return ValueResult.failure(UserErrors.InvalidToken)

        current.revoke()
        response = await self._issue_tokens(user)
        await logger.ainfo("refresh_token_rotated", user_id=str(user.id))
        return ValueResult.success(response)

    async def revoke_refresh_token(self, access_token: str, refresh_token: str) -> bool:
        user = await self._find_token_owner(access_token)
        current = user.find_active_refresh_token(refresh_token) if user else None
        if user is None or current is None:
            return False

        current.revoke()
        await self._save(user)
        await logger.ainfo("refresh_token_revoked", user_id=str(user.id))
        return True

    async def generate_password_reset_token(self, email: str) -> str:
        """Return a reset token, or an empty string when no user has this email."""
        user = await self.credentials.find_by_email(email)
        if user is None:
            await logger.awarning("password_reset_unknown_email")
            return ""
        token = await self.credentials.generate_password_reset_token(user)
        await logger.ainfo("password_reset_token_issued", user_id=str(user.id))
        return token

    async def reset_password(self, request: ResetPasswordRequest) -> Result:
        error = validate_reset_password(request)
        if error != Error.NONE:
            return Result.failure(error)

        user = await self.credentials.find_by_email(request.email)
        if user is None:
            return Result.failure(UserErrors.NotFound)

        outcome = await self.credentials.reset_password(user, request.token, request.new_password)
        if not outcome.succeeded:
            first = outcome.first_error
            await logger.awarning(
                "password_reset_rejected",
                user_id=str(user.id),
                code=first.code if first else None,
            )
            if first is None:
                return Result.failure(validation_error("ResetPassword.Failed", "Password reset failed"))
            return Result.failure(validation_error(first.code, first.description))

        await logger.ainfo("password_reset", user_id=str(user.id))
        return Result.success()

    async def _find_token_owner(self, access_token: str) -> ApplicationUser | None:
        user_id = validate_token(access_token, settings=self.settings)
        if user_id is None:
            return None
        return await self.credentials.find_by_id(user_id)

    async def _issue_tokens(self, user: ApplicationUser) -> LoginResponse:
        roles = await self.credentials.get_roles(user)
        permissions = [value for _, value in await self.credentials.get_claims(user)]
        access = generate_token(user, roles, permissions, settings=self.settings)

        expires_on = datetime.now(UTC) + timedelta(days=self.settings.refresh_token_lifetime_days)
        refresh = user.add_refresh_token(generate_refresh_token(), expires_on)
        await self._save(user)

        return LoginResponse(
            access_token=access.token,
            access_token_expiration=access.expires_at,
            refresh_token=refresh.token,
            refresh_token_expiration=refresh.expires_on,
        )

    async def _save(self, user: ApplicationUser) -> None:
        outcome = await self.credentials.update_user(user)
        if not outcome.succeeded:
            first = outcome.first_error
            raise RuntimeError(
                f"Could not persist refresh tokens for user {user.id}: "
                f"{first.description if first else 'unknown error'}"
            )

    async def _invalid_login(self, email: str, reason: str) -> ValueResult[LoginResponse]:
        await logger.awarning("login_failed", email=email, reason=reason)
        return ValueResult.failure(UserErrors.InvalidCredentials)
