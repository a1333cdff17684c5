"""Pydantic schemas for authentication and account endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# --- Request Schemas ---


class LoginRequest(BaseModel):
    """Request schema for user login.

    Shape is checked by the service so that malformed input and bad
    credentials produce the same error.
    """

    email: str = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class TokenPairRequest(BaseModel):
    """Request schema for token refresh and revocation."""

    access_token: str = Field(..., description="Access token, may be expired")
    refresh_token: str = Field(..., description="Refresh token to redeem or revoke")


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., description="Email of the account to reset")


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., description="User email address")
    token: str = Field(..., description="Password reset token")
    new_password: str = Field(..., description="New password")


class ChangePasswordRequest(BaseModel):
    """Request schema for password change."""

    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., description="New password")


# --- Response Schemas ---


class LoginResponse(BaseModel):
    """Access token and refresh token with their expiries."""

    model_config = ConfigDict(from_attributes=True)

    access_token: str = Field(..., description="JWT access token")
    access_token_expiration: datetime = Field(..., description="Access token expiry (UTC)")
    refresh_token: str = Field(..., description="Opaque refresh token")
    refresh_token_expiration: datetime = Field(..., description="Refresh token expiry (UTC)")
    token_type: str = Field(default="bearer", description="Token type")


class ForgotPasswordResponse(BaseModel):
    token: str = Field(..., description="Reset token; empty when the email is unknown")


class OperationResponse(BaseModel):
    success: bool = Field(default=True)
