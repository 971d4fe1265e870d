"""Paginated list response."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ListResult(BaseModel, Generic[T]):
    """One page of records as returned by ``GET .../records``."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    page: int = 1
    per_page: int = 0
    total_items: int = 0
    total_pages: int = 0
    items: list[T] = Field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
