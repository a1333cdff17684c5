from taskflow.domain.entities import Comment, Developer, JobLevel, TaskEntity, TaskProgress
from taskflow.domain.identity import ApplicationUser, CurrentUser, RefreshToken
from taskflow.domain.results import Error, ErrorType, Result, ValueResult

__all__ = [
    "ApplicationUser",
    "Comment",
    "CurrentUser",
    "Developer",
    "Error",
    "ErrorType",
    "JobLevel",
    "RefreshToken",
    "Result",
    "TaskEntity",
    "TaskProgress",
    "ValueResult",
]
