"""Pairing of external side effects with their inverse.

A service registers the undo action right after each side effect succeeds
(file uploaded, credential created). If the scope is left without
``complete()`` the registered actions run newest first. They are shielded from
cancellation so an interrupted request never leaves a side effect unpaired.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from types import TracebackType

import structlog

logger = structlog.get_logger()

Compensation = Callable[[], Awaitable[object]]


class CompensationScope:
    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._actions: list[tuple[str, Compensation]] = []
        self._completed = False

    def register(self, name: str, action: Compensation) -> None:
        self._actions.append((name, action))

    def complete(self) -> None:
        """Keep every side effect; nothing will be undone."""
        self._completed = True
        self._actions.clear()

    @property
    def pending(self) -> list[str]:
        return [name for name, _ in self._actions]

    async def compensate(self) -> None:
        """Run the registered inverses newest first and forget them."""
        actions, self._actions = self._actions, []
        await asyncio.shield(self._run(actions))

    async def _run(self, actions: list[tuple[str, Compensation]]) -> None:
        for name, action in reversed(actions):
            try:
                await action()
            except Exception:
                await logger.aexception(
                    "compensation_failed", operation=self.operation, action=name
                )
            else:
                await logger.awarning(
                    "compensation_applied", operation=self.operation, action=name
                )

    async def __aenter__(self) -> CompensationScope:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self._completed and self._actions:
            await self.compensate()
