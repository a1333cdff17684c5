from . import models  # noqa: F401
from .base import Base, mapper_registry
from .session import build_session_factory, dispose_engine, get_session, get_session_factory

__all__ = [
    "Base",
    "build_session_factory",
    "dispose_engine",
    "get_session",
    "get_session_factory",
    "mapper_registry",
]
