from __future__ import annotations

import logging
from collections.abc import Iterable

from member_directory.models.record import Record
from member_directory.view.filters import Tab

logger = logging.getLogger(__name__)


class SelectionTracker:
    """Selected record ids for one tab.

    Ids are kept in the order they were selected.  The selection outlives
    page changes and filter changes within the tab; only
    :meth:`switch_tab` (to a different tab) and :meth:`clear_all` empty it.
    """

    def __init__(self, tab: Tab | str = Tab.all) -> None:
        self.tab = Tab(tab)
        self._ids: dict[str, None] = {}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def __bool__(self) -> bool:
        return bool(self._ids)

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def is_selected(self, record_id: str) -> bool:
        return record_id in self._ids

    def toggle(self, record_id: str) -> bool:
        """Flip *record_id*; return whether it is selected afterwards."""
        if record_id in self._ids:
            del self._ids[record_id]
            return False
        self._ids[record_id] = None
        return True

    def set(self, record_id: str, checked: bool) -> None:
        if checked:
            self._ids.setdefault(record_id, None)
        else:
            self._ids.pop(record_id, None)

    def select_all(self, filtered_ids: Iterable[str]) -> None:
        """Replace the selection with exactly the currently filtered ids.

        Records hidden by the active filters are never picked up, and
        earlier picks outside the filtered set are dropped.
        """
        self._ids = dict.fromkeys(filtered_ids)

    def clear_all(self) -> None:
        self._ids.clear()

    def all_selected(self, filtered_ids: Iterable[str]) -> bool:
        """Header-checkbox state: every filtered id is selected."""
        ids = list(filtered_ids)
        return bool(ids) and all(i in self._ids for i in ids)

    def switch_tab(self, tab: Tab | str) -> None:
        new_tab = Tab(tab)
        if new_tab == self.tab:
            return
        if self._ids:
            logger.debug(
                "Clearing %d selected id(s) on switch from %s to %s",
                len(self._ids),
                self.tab,
                new_tab,
            )
        self.tab = new_tab
        self._ids.clear()

    def resolve(self, records: Iterable[Record]) -> list[Record]:
        """Return the selected records present in *records*, in record order."""
        return [r for r in records if r.id is not None and r.id in self._ids]
