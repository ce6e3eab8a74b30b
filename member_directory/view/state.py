"""Explicit view state for one directory screen.

:class:`DirectoryView` owns the current :class:`FilterCriteria`, the page
cursor and the selection, so that none of it lives in ambient globals and
all of it can be exercised without a UI.
"""

from __future__ import annotations

from collections.abc import Sequence

from member_directory.models.record import Record
from member_directory.view.filters import (
    ALL,
    FilterCriteria,
    Tab,
    filter_records,
)
from member_directory.view.pagination import DEFAULT_PAGE_SIZE, Page, PageCursor
from member_directory.view.selection import SelectionTracker


class DirectoryView:
    """Criteria + page cursor + selection for one directory screen.

    Usage::

        view = DirectoryView(page_size=20)
        view.set_tab(Tab.visitors)
        view.set_search("ann")
        page = view.page(records)
        view.select_all(records)
        targets = view.selected(records)
    """

    def __init__(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        tab: Tab | str = Tab.all,
        branch_id: str = ALL,
    ) -> None:
        self.criteria = FilterCriteria(tab=Tab(tab), branch_id=branch_id)
        self.cursor = PageCursor(page_size)
        self.selection = SelectionTracker(tab)

    # ── Criteria ─────────────────────────────────────────────────────

    @property
    def tab(self) -> Tab:
        return self.criteria.tab

    def set_tab(self, tab: Tab | str) -> None:
        """Switch tabs; this is the only criteria change that clears the selection."""
        self.criteria = self.criteria.replace(tab=Tab(tab))
        self.selection.switch_tab(tab)

    def set_search(self, term: str) -> None:
        self.criteria = self.criteria.replace(search_term=term)

    def set_membership_level(self, level: str) -> None:
        self.criteria = self.criteria.replace(membership_level=level or ALL)

    def set_branch(self, branch_id: str) -> None:
        self.criteria = self.criteria.replace(branch_id=branch_id or ALL)

    # ── Rendering ────────────────────────────────────────────────────

    def filtered(self, records: Sequence[Record]) -> list[Record]:
        return filter_records(records, self.criteria)

    def page(self, records: Sequence[Record]) -> Page:
        return self.cursor.page(self.filtered(records), self.criteria)

    def go_to_page(self, page_number: int) -> int:
        return self.cursor.go_to(page_number)

    def next_page(self) -> int:
        return self.cursor.next()

    def previous_page(self) -> int:
        return self.cursor.previous()

    # ── Selection ────────────────────────────────────────────────────

    def toggle(self, record_id: str) -> bool:
        return self.selection.toggle(record_id)

    def select_all(self, records: Sequence[Record]) -> None:
        """Select every record that passes the current filters."""
        self.selection.select_all(
            r.id for r in self.filtered(records) if r.id is not None
        )

    def clear_selection(self) -> None:
        self.selection.clear_all()

    def all_selected(self, records: Sequence[Record]) -> bool:
        return self.selection.all_selected(
            r.id for r in self.filtered(records) if r.id is not None
        )

    def selected(self, records: Sequence[Record]) -> list[Record]:
        """Resolve the selection against *records* (any filter state)."""
        return self.selection.resolve(records)
