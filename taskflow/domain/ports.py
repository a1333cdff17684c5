"""Interfaces of the collaborators the services depend on."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Protocol
from uuid import UUID

from taskflow.domain.identity import ApplicationUser, IdentityResult


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """File received from a client, fully buffered."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()


class CredentialStore(Protocol):
    async def find_by_email(self, email: str) -> ApplicationUser | None: ...

    async def find_by_id(self, user_id: UUID | str) -> ApplicationUser | None: ...

    async def create_user(self, user: ApplicationUser, password: str) -> IdentityResult: ...

    async def check_password(self, user: ApplicationUser, password: str) -> bool: ...

    async def change_password(
        self, user: ApplicationUser, current_password: str, new_password: str
    ) -> IdentityResult: ...

    async def generate_password_reset_token(self, user: ApplicationUser) -> str: ...

    async def reset_password(
        self, user: ApplicationUser, token: str, new_password: str
    ) -> IdentityResult: ...

    async def get_roles(self, user: ApplicationUser) -> list[str]: ...

    async def get_claims(self, user: ApplicationUser) -> list[tuple[str, str]]: ...

    async def add_to_role(self, user: ApplicationUser, role: str) -> IdentityResult: ...

    async def delete_user(self, user: ApplicationUser) -> IdentityResult: ...

    async def update_user(self, user: ApplicationUser) -> IdentityResult: ...


class FileStore(Protocol):
    async def upload(self, file: UploadedFile, delete_existing_at: str | None = None) -> str:
        """Store the file and return its path relative to the public root."""
        ...

    async def remove(self, path: str | None) -> None: ...


class NotificationSink(Protocol):
    async def broadcast_all(self, event: str, payload: Any) -> None: ...

    async def send_to_user(self, user_id: UUID | str, event: str, payload: Any) -> None: ...
