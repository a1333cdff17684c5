from fastapi import FastAPI

from taskflow.core.config import get_settings

from . import accounts, auth, developers, health, tasks


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    prefix = get_settings().api_prefix
    app.include_router(health.router)
    app.include_router(auth.router, prefix=prefix)
    app.include_router(accounts.router, prefix=prefix)
    app.include_router(developers.router, prefix=prefix)
    app.include_router(tasks.router, prefix=prefix)
