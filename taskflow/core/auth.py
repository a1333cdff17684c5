from __future__ import annotations

import base64
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import jwt

from taskflow.core.config import Settings, get_settings
from taskflow.domain.identity import ApplicationUser
from taskflow.domain.views import AccessToken

REFRESH_TOKEN_BYTES = 32


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    DEVELOPER = "Developer"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


# Permission claims granted to the seeded accounts of each role.
ROLE_PERMISSIONS: dict[Role, tuple[str, ...]] = {
    Role.ADMIN: (
        "developers.read",
        "developers.write",
        "developers.delete",
        "tasks.read",
        "tasks.write",
        "tasks.delete",
        "comments.write",
    ),
    Role.MANAGER: ("developers.read", "developers.write", "tasks.read", "tasks.write"),
    Role.DEVELOPER: ("tasks.read", "comments.write"),
}


def generate_token(
    user: ApplicationUser,
    roles: Iterable[str],
    permissions: Iterable[str],
    *,
    settings: Settings | None = None,
) -> AccessToken:
    """Issue a signed access token carrying the caller's roles and permissions.

    Roles and permissions are emitted as JSON arrays so clients never have to
    split strings.
    """
    settings = settings or get_settings()

    now = datetime.now(UTC)
    expires_at = now + timedelta(minutes=settings.jwt_lifetime_minutes)
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "name": user.user_name,
        "email": user.email,
        "roles": list(roles),
        "permissions": list(permissions),
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }

    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return AccessToken(token=token, expires_at=expires_at)


def validate_token(token: str | None, *, settings: Settings | None = None) -> str | None:
    """Return the subject of a correctly signed token, or ``None``.

    Only the signature is checked. Expiry, issuer and audience are ignored
    because the access token presented alongside a refresh token has normally
    expired already.
    """
    if not token:
        return None
    settings = settings or get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False, "verify_iss": False, "verify_aud": False},
        )
    except jwt.PyJWTError:
        return None

    subject = payload.get("sub")
    return subject if isinstance(subject, str) and subject else None


def decode_access_token(token: str, *, settings: Settings | None = None) -> dict:
    """Decode and fully validate a JWT access token."""
    settings = settings or get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    _ensure_roles(payload.get("roles", []))
    return payload


def generate_refresh_token() -> str:
    """Opaque refresh token: 32 random bytes, base64 encoded."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def _ensure_roles(roles: Iterable[str]) -> None:
    for role in roles:
        if not Role.contains(role):
            raise TokenError(f"Unsupported role: {role}")
