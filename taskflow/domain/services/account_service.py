from __future__ import annotations

from uuid import UUID

import structlog

from taskflow.domain.errors import UserErrors, validation_error
from taskflow.domain.ports import CredentialStore
from taskflow.domain.results import Error, Result
from taskflow.domain.validators import check_password

logger = structlog.get_logger()


class AccountService:
    """Self-service operations on the caller's own credentials."""

    def __init__(self, credentials: CredentialStore) -> None:
        self.credentials = credentials

    async def change_password(
        self, user_id: UUID | str, current_password: str, new_password: str
    ) -> Result:
        if not current_password or not new_password:
            return Result.failure(UserErrors.EmptyPassword)

        error = check_password(new_password, "NewPassword")
        if error != Error.NONE:
            return Result.failure(error)

        user = await self.credentials.find_by_id(user_id)
        if user is None:
            return Result.failure(UserErrors.NotFound)

        outcome = await self.credentials.change_password(user, current_password, new_password)
        if not outcome.succeeded:
            first = outcome.first_error
            await logger.awarning(
                "password_change_rejected", user_id=str(user.id), code=first.code if first else None
            )
            if first is None:
                return Result.failure(
                    validation_error("ChangePassword.Failed", "Password change failed")
                )
            return Result.failure(validation_error(first.code, first.description))

        await logger.ainfo("password_changed", user_id=str(user.id))
        return Result.success()
