"""Outcome types used for expected business failures.

Services return a ``Result`` (or ``ValueResult`` when they produce a value)
instead of raising for validation, not-found and conflict cases. Exceptions
are kept for programmer errors and infrastructure faults.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar

T = TypeVar("T")


class ErrorType(int, enum.Enum):
    NONE = 0
    FAILURE = 1
    VALIDATION = 2
    NOT_FOUND = 3
    CONFLICT = 4
    INTERNAL_SERVER_ERROR = 5


@dataclass(frozen=True, slots=True)
class Error:
    """Immutable description of a business failure."""

    code: str
    description: str
    error_type: ErrorType = ErrorType.FAILURE

    NONE: ClassVar[Error]

    def __str__(self) -> str:
        return f"{self.code}: {self.description}"


Error.NONE = Error("", "", ErrorType.NONE)


class Result:
    """Success flag plus the error explaining a failure."""

    __slots__ = ("_is_success", "_error")

    def __init__(self, is_success: bool, error: Error) -> None:
        if is_success and error != Error.NONE:
            raise ValueError("A successful result cannot carry an error")
        if not is_success and error == Error.NONE:
            raise ValueError("A failed result must carry an error")
        self._is_success = is_success
        self._error = error

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def error(self) -> Error:
        return self._error

    @classmethod
    def success(cls) -> Result:
        return cls(True, Error.NONE)

    @classmethod
    def failure(cls, error: Error) -> Result:
        return cls(False, error)

    def __repr__(self) -> str:
        if self._is_success:
            return f"{type(self).__name__}(success)"
        return f"{type(self).__name__}(failure={self._error.code!r})"


class ValueResult(Result, Generic[T]):
    """Result that also carries a value when successful."""

    __slots__ = ("_value",)

    def __init__(self, is_success: bool, value: T | None, error: Error) -> None:
        super().__init__(is_success, error)
        self._value = value

    @property
    def value(self) -> T | None:
        return self._value

    @classmethod
    def success(cls, value: T) -> ValueResult[T]:  # type: ignore[override]
        return cls(True, value, Error.NONE)

    @classmethod
    def failure(cls, error: Error) -> ValueResult[T]:
        return cls(False, None, error)
