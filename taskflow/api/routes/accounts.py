from __future__ import annotations

from fastapi import APIRouter, Depends

from taskflow.api.deps import get_account_service, get_current_user
from taskflow.api.errors import ensure_success
from taskflow.api.schemas.auth import ChangePasswordRequest, OperationResponse
from taskflow.domain import CurrentUser
from taskflow.domain.services import AccountService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post(
    "/change-password",
    response_model=OperationResponse,
    summary="Change password",
    description="Change the current user's password.",
)
async def change_password(
    payload: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    service: AccountService = Depends(get_account_service),  # noqa: B008
) -> OperationResponse:
    result = await service.change_password(
        user.user_id, payload.current_password, payload.new_password
    )
    ensure_success(result)
    return OperationResponse()
