from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

MAX_PAGE_SIZE = 10


def clamp_paging(page_number: int, page_size: int) -> tuple[int, int]:
    """Clamp client paging input to page_number >= 1 and page_size in [1, MAX_PAGE_SIZE]."""
    return max(page_number, 1), min(max(page_size, 1), MAX_PAGE_SIZE)


@dataclass(slots=True)
class PagedResult(Generic[T]):
    items: Sequence[T] = field(default_factory=list)
    page_number: int = 1
    page_size: int = MAX_PAGE_SIZE
    total_count: int = 0

    def __post_init__(self) -> None:
        if self.page_number <= 0:
            raise ValueError("page index can't be less than or equal zero")
        if self.page_size <= 0:
            raise ValueError("page size can't be less than or equal zero")
        if self.total_count < 0:
            raise ValueError("total count can't be less than zero")
        self.items = list(self.items or [])

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_forward(self) -> bool:
        return self.total_pages > self.page_number

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1
