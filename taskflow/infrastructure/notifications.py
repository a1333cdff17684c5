"""Push notifications fanned out through Redis pub/sub.

A websocket gateway subscribes to these channels and relays events to the
connected clients.
"""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

import structlog
from redis.asyncio import Redis

logger = structlog.get_logger()

BROADCAST_CHANNEL = "taskflow:notifications:all"
USER_CHANNEL_PREFIX = "taskflow:notifications:user:"


def encode_event(event: str, payload: Any) -> str:
    return json.dumps({"event": event, "payload": payload}, default=str)


class RedisNotificationSink:
    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisNotificationSink:
        return cls(Redis.from_url(url))

    async def broadcast_all(self, event: str, payload: Any) -> None:
        receivers = await self._client.publish(BROADCAST_CHANNEL, encode_event(event, payload))
        await logger.adebug("notification_broadcast", notify_event=event, receivers=receivers)

    async def send_to_user(self, user_id: UUID | str, event: str, payload: Any) -> None:
        channel = f"{USER_CHANNEL_PREFIX}{user_id}"
        receivers = await self._client.publish(channel, encode_event(event, payload))
        await logger.adebug(
            "notification_sent", notify_event=event, user_id=str(user_id), receivers=receivers
        )

    async def close(self) -> None:
        await self._client.aclose()
