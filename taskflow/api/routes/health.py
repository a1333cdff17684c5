from __future__ import annotations

from datetime import UTC, datetime

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter
from sqlalchemy import text

from taskflow.core.config import get_settings
from taskflow.infrastructure.db.session import get_session_factory

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database() -> dict:
    """Check database connection."""
    try:
        session_factory = get_session_factory()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


async def check_redis() -> dict:
    """Check Redis connection used for notifications."""
    try:
        client = aioredis.from_url(get_settings().redis_url)
        try:
            await client.ping()
        finally:
            await client.aclose()
        return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


@router.get("/health", summary="Service health probe")
async def health_check() -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()

    database_status = await check_database()
    redis_status = await check_redis()

    overall_status = "ok"
    if database_status.get("status") != "ok" or redis_status.get("status") != "ok":
        overall_status = "degraded"

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": overall_status,
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {
            "database": database_status,
            "redis": redis_status,
        },
    }
    await logger.ainfo("health_probe", **payload)
    return payload
