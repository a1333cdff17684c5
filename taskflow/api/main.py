from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

from taskflow.api.deps import get_notification_sink
from taskflow.api.errors import error_handling_middleware
from taskflow.api.routes import register_routes
from taskflow.core.config import get_settings
from taskflow.core.logging import setup_logging
from taskflow.infrastructure.db.session import dispose_engine, get_session_factory
from taskflow.infrastructure.identity import seed_identity

logger = structlog.get_logger()


def create_app() -> FastAPI:
    """Application factory for the public API."""
    settings = get_settings()
    setup_logging(json_logs=not settings.is_development)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await logger.ainfo(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
        )
        if settings.seed_on_startup:
            await seed_identity(get_session_factory(), settings)
        yield
        await get_notification_sink().close()
        await dispose_engine()
        await logger.ainfo("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    register_routes(app)

    # Registered first so it runs inside the correlation middleware and its
    # log lines carry the request id.
    app.middleware("http")(error_handling_middleware)

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
