from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from member_directory.models.record import Record
from member_directory.view.filters import FilterCriteria

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Page:
    """One page of a filtered record set.  Derived, never persisted."""

    items: list[Record]
    page_number: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def item_ids(self) -> list[str]:
        return [r.id for r in self.items if r.id is not None]


def total_pages(item_count: int, page_size: int) -> int:
    """Number of pages, never less than one."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(item_count / page_size))


def clamp_page(page_number: int, pages: int) -> int:
    return max(1, min(page_number, pages))


def paginate(
    records: Sequence[Record],
    page_size: int,
    page_number: int,
) -> Page:
    """Slice *records* into the requested page, clamping the page number."""
    pages = total_pages(len(records), page_size)
    number = clamp_page(page_number, pages)
    start = (number - 1) * page_size
    return Page(
        items=list(records[start : start + page_size]),
        page_number=number,
        total_pages=pages,
        total_items=len(records),
        page_size=page_size,
    )


class PageCursor:
    """Remembers the current page across re-renders.

    The cursor goes back to page 1 whenever it is asked to paginate under
    criteria that differ from the previous call; with unchanged criteria
    the page number is stable (but still clamped if the set shrank).
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.page_number = 1
        self._criteria: FilterCriteria | None = None
        self._total_pages = 1

    def page(self, records: Sequence[Record], criteria: FilterCriteria) -> Page:
        if criteria != self._criteria:
            self._criteria = criteria
            self.page_number = 1
        result = paginate(records, self.page_size, self.page_number)
        self.page_number = result.page_number
        self._total_pages = result.total_pages
        return result

    def go_to(self, page_number: int) -> int:
        """Move to *page_number*, clamped to the last known page range."""
        self.page_number = clamp_page(page_number, self._total_pages)
        return self.page_number

    def next(self) -> int:
        return self.go_to(self.page_number + 1)

    def previous(self) -> int:
        return self.go_to(self.page_number - 1)

    def reset(self) -> None:
        self.page_number = 1
