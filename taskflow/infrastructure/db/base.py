from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase, registry

mapper_registry = registry()


class Base(DeclarativeBase):
    """Declarative base for persistence-only models.

    Domain entities are mapped imperatively against the same registry so every
    table shares one ``MetaData``.
    """

    registry = mapper_registry
    metadata = mapper_registry.metadata
