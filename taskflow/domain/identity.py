"""Identity aggregate as seen by the authentication core.

The credential store owns persistence of users; the services only read and
mutate these plain objects and hand them back through ``update_user``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from taskflow.domain.clock import utc_now


@dataclass(slots=True)
class RefreshToken:
    """Opaque rotating token; moves Active -> Revoked at most once."""

    token: str
    expires_on: datetime
    created_on: datetime = field(default_factory=utc_now)
    revoked_on: datetime | None = None

    @property
    def is_expired(self) -> bool:
        return utc_now() >= self.expires_on

    @property
    def is_revoked(self) -> bool:
        return self.revoked_on is not None

    @property
    def is_active(self) -> bool:
        return self.revoked_on is None and not self.is_expired

    def revoke(self, at: datetime | None = None) -> bool:
        """Revoke an active token. Returns False when it was already inactive."""
        if not self.is_active:
            return False
        self.revoked_on = at or utc_now()
        return True


@dataclass(slots=True)
class ApplicationUser:
    """Credential identity with its refresh tokens."""

    email: str
    user_name: str
    id: UUID = field(default_factory=uuid4)
    email_confirmed: bool = False
    refresh_tokens: list[RefreshToken] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    def find_active_refresh_token(self, token: str) -> RefreshToken | None:
        return next(
            (rt for rt in self.refresh_tokens if rt.token == token and rt.is_active),
            None,
        )

    def add_refresh_token(self, token: str, expires_on: datetime) -> RefreshToken:
        refresh_token = RefreshToken(token=token, expires_on=expires_on)
        self.refresh_tokens.append(refresh_token)
        return refresh_token


@dataclass(frozen=True, slots=True)
class IdentityError:
    code: str
    description: str


@dataclass(frozen=True, slots=True)
class IdentityResult:
    """Outcome of a credential-store mutation."""

    succeeded: bool
    errors: tuple[IdentityError, ...] = ()

    @classmethod
    def success(cls) -> IdentityResult:
        return cls(True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> IdentityResult:
        return cls(False, tuple(errors))

    @property
    def first_error(self) -> IdentityError | None:
        return self.errors[0] if self.errors else None


@dataclass(slots=True)
class CurrentUser:
    """Authenticated caller resolved from a bearer token."""

    user_id: str
    email: str = ""
    name: str = ""
    roles: list[str] = field(default_factory=list)
    permissions: list[str] = field(default_factory=list)

    @property
    def id(self) -> UUID:
        return UUID(self.user_id)
