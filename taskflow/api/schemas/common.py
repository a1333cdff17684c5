from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

ItemT = TypeVar("ItemT")


class Page(BaseModel, Generic[ItemT]):
    """One page of results plus the paging metadata."""

    model_config = ConfigDict(from_attributes=True)

    items: list[ItemT] = Field(default_factory=list)
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_forward: bool
    has_previous: bool
