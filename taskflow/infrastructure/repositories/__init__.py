from taskflow.infrastructure.db import models  # noqa: F401

from .generic import ChangeTracker, GenericRepository
from .tasks import TaskRepository
from .unit_of_work import UnitOfWork

__all__ = ["ChangeTracker", "GenericRepository", "TaskRepository", "UnitOfWork"]
