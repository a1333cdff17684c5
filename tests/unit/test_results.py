from __future__ import annotations

import pytest

from taskflow.domain.errors import DeveloperErrors, TaskErrors
from taskflow.domain.results import Error, ErrorType, Result, ValueResult


def test_success_carries_no_error() -> None:
    result = Result.success()

    assert result.is_success
    assert not result.is_failure
    assert result.error == Error.NONE


def test_failure_exposes_error() -> None:
    result = Result.failure(TaskErrors.NotFound)

    assert result.is_failure
    assert result.error.code == "Task.NotFound"
    assert result.error.error_type is ErrorType.NOT_FOUND


def test_success_with_error_is_rejected() -> None:
    with pytest.raises(ValueError):
        Result(True, TaskErrors.NotFound)


def test_failure_without_error_is_rejected() -> None:
    with pytest.raises(ValueError):
        Result(False, Error.NONE)


def test_value_result_holds_value_only_on_success() -> None:
    ok = ValueResult.success(42)
    failed: ValueResult[int] = ValueResult.failure(DeveloperErrors.NotFound)

    assert ok.value == 42
    assert failed.value is None
    assert failed.error is DeveloperErrors.NotFound


def test_errors_compare_by_value() -> None:
    assert Error("A.B", "desc", ErrorType.VALIDATION) == Error("A.B", "desc", ErrorType.VALIDATION)
    assert str(TaskErrors.NotFound) == "Task.NotFound: Task not found"
