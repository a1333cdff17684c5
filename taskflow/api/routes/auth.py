"""Authentication routes - login, token refresh and revocation, password reset."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from taskflow.api.deps import get_authentication_service
from taskflow.api.errors import ensure_success, unwrap
from taskflow.api.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    OperationResponse,
    ResetPasswordRequest,
    TokenPairRequest,
)
from taskflow.domain import requests
from taskflow.domain.services import AuthenticationService

logger = structlog.get_logger()
router = APIRouter(prefix="/authentication", tags=["Authentication"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Authenticate with email and password, returns an access and a refresh token.",
)
async def login(
    payload: LoginRequest,
    service: AuthenticationService = Depends(get_authentication_service),  # noqa: B008
) -> LoginResponse:
    result = await service.login(
        requests.LoginRequest(email=payload.email, password=payload.password)
    )
    return LoginResponse.model_validate(unwrap(result))


@router.post(
    "/refresh-token",
    response_model=LoginResponse,
    summary="Rotate refresh token",
    description="Redeem an active refresh token; the old one is revoked.",
)
async def refresh_token(
    payload: TokenPairRequest,
    service: AuthenticationService = Depends(get_authentication_service),  # noqa: B008
) -> LoginResponse:
    result = await service.refresh_token(payload.access_token, payload.refresh_token)
    return LoginResponse.model_validate(unwrap(result))


@router.post("/revoke-token", response_model=OperationResponse, summary="Revoke refresh token")
async def revoke_token(
    payload: TokenPairRequest,
    service: AuthenticationService = Depends(get_authentication_service),  # noqa: B008
) -> OperationResponse:
    if not await service.revoke_refresh_token(payload.access_token, payload.refresh_token):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid token or refresh token",
        )
    return OperationResponse()


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    summary="Request password reset token",
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    service: AuthenticationService = Depends(get_authentication_service),  # noqa: B008
) -> ForgotPasswordResponse:
    """Issue a reset token.

    The token is returned directly; delivering it by email is left to the caller.
    """
    token = await service.generate_password_reset_token(payload.email)
    return ForgotPasswordResponse(token=token)


@router.post("/reset-password", response_model=OperationResponse, summary="Reset password")
async def reset_password(
    payload: ResetPasswordRequest,
    service: AuthenticationService = Depends(get_authentication_service),  # noqa: B008
) -> OperationResponse:
    result = await service.reset_password(
        requests.ResetPasswordRequest(
            email=payload.email, token=payload.token, new_password=payload.new_password
        )
    )
    ensure_success(result)
    return OperationResponse()
