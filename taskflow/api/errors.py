"""Translation of failed results and unhandled exceptions into HTTP responses."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from http import HTTPStatus
from typing import TypeVar

import structlog
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.responses import Response

from taskflow.core.config import get_settings
from taskflow.domain.results import Error, ErrorType, Result, ValueResult

logger = structlog.get_logger()

T = TypeVar("T")

STATUS_BY_ERROR_TYPE: dict[ErrorType, int] = {
    ErrorType.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.CONFLICT: status.HTTP_409_CONFLICT,
}


def status_for(error: Error) -> int:
    return STATUS_BY_ERROR_TYPE.get(error.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)


def problem(error: Error) -> HTTPException:
    return HTTPException(
        status_code=status_for(error),
        detail={"code": error.code, "description": error.description},
    )


def unwrap(result: ValueResult[T]) -> T:
    """Return the value of a successful result or raise the matching HTTP error."""
    if result.is_failure:
        raise problem(result.error)
    return result.value  # type: ignore[return-value]


def ensure_success(result: Result) -> None:
    if result.is_failure:
        raise problem(result.error)


def status_for_exception(exc: BaseException) -> int:
    if isinstance(exc, PermissionError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, LookupError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValueError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def error_handling_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Last line of defence for faults no route handled.

    The raw exception message is only exposed in local and development
    environments.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        status_code = status_for_exception(exc)
        await logger.aexception(
            "unhandled_exception", status_code=status_code, error_type=type(exc).__name__
        )
        detail = str(exc) if get_settings().is_development else "An unexpected error occurred."
        return JSONResponse(
            status_code=status_code,
            content={
                "status": status_code,
                "title": HTTPStatus(status_code).phrase,
                "detail": detail,
                "instance": request.url.path,
            },
        )
