"""Domain services."""

from taskflow.domain.services.account_service import AccountService
from taskflow.domain.services.auth_service import AuthenticationService
from taskflow.domain.services.compensation import CompensationScope
from taskflow.domain.services.developer_service import DeveloperService
from taskflow.domain.services.task_service import TaskService

__all__ = [
    "AccountService",
    "AuthenticationService",
    "CompensationScope",
    "DeveloperService",
    "TaskService",
]
