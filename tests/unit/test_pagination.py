from __future__ import annotations

import pytest

from taskflow.domain.pagination import MAX_PAGE_SIZE, PagedResult, clamp_paging


def test_page_metadata() -> None:
    page = PagedResult(items=[1, 2, 3], page_number=2, page_size=10, total_count=25)

    assert page.total_pages == 3
    assert page.has_previous is True
    assert page.has_forward is True


def test_last_page_has_no_forward() -> None:
    page = PagedResult(items=[], page_number=3, page_size=10, total_count=25)

    assert page.has_forward is False


def test_empty_result() -> None:
    page = PagedResult(items=None, page_number=1, page_size=10, total_count=0)  # type: ignore[arg-type]

    assert page.items == []
    assert page.total_pages == 0
    assert page.has_forward is False
    assert page.has_previous is False


@pytest.mark.parametrize(
    ("page_number", "page_size", "total_count"),
    [(0, 10, 0), (1, 0, 0), (1, 10, -1)],
)
def test_invalid_arguments(page_number: int, page_size: int, total_count: int) -> None:
    with pytest.raises(ValueError):
        PagedResult(items=[], page_number=page_number, page_size=page_size, total_count=total_count)


def test_clamp_paging() -> None:
    assert clamp_paging(0, 0) == (1, 1)
    assert clamp_paging(3, 500) == (3, MAX_PAGE_SIZE)
