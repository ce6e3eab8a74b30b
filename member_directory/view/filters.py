"""Tab predicates and the record filter.

Filtering is a pure function over an already-loaded record set.  It
never re-sorts: the result is a subsequence of the input in input order.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from member_directory.models.record import (
    LeaderRole,
    MembershipLevel,
    Record,
    SubLevel,
)

ALL = "all"

SEARCH_FIELDS: tuple[str, ...] = ("display_name", "email", "phone")
"""Record attributes matched by the free-text search."""


class Tab(enum.StrEnum):
    all = "all"
    workers = "workers"
    disciples = "disciples"
    leaders = "leaders"
    pastors = "pastors"
    converts = "converts"
    visitors = "visitors"


def _is_baptized(record: Record, *sub_levels: SubLevel) -> bool:
    return (
        record.membership_level == MembershipLevel.baptized.value
        and record.sub_level in {s.value for s in sub_levels}
    )


_TAB_PREDICATES: dict[Tab, Callable[[Record], bool]] = {
    Tab.all: lambda r: r.is_member,
    Tab.workers: lambda r: (
        r.is_member and _is_baptized(r, SubLevel.worker, SubLevel.disciple)
    ),
    Tab.disciples: lambda r: r.is_member and _is_baptized(r, SubLevel.disciple),
    Tab.leaders: lambda r: r.is_member and _is_baptized(r, SubLevel.leader),
    Tab.pastors: lambda r: (
        r.is_member
        and r.leader_role
        in {LeaderRole.pastor.value, LeaderRole.assistant_pastor.value}
    ),
    Tab.converts: lambda r: (
        r.is_member and r.membership_level == MembershipLevel.convert.value
    ),
    Tab.visitors: lambda r: r.is_visitor,
}


def matches_tab(record: Record, tab: Tab | str) -> bool:
    """Return whether *record* belongs to *tab*."""
    return _TAB_PREDICATES[Tab(tab)](record)


@dataclass(frozen=True)
class FilterCriteria:
    """Everything the filter needs for one evaluation.

    ``membership_level`` and ``branch_id`` accept the wildcard ``"all"``.
    Instances are immutable; build a new one (see :meth:`replace`) for
    every change so that the page cursor can detect it.
    """

    tab: Tab = Tab.all
    search_term: str = ""
    membership_level: str = ALL
    branch_id: str = ALL

    def __post_init__(self) -> None:
        object.__setattr__(self, "tab", Tab(self.tab))

    def replace(self, **changes: object) -> FilterCriteria:
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    @property
    def is_wildcard(self) -> bool:
        return (
            not self.search_term.strip()
            and self.membership_level == ALL
            and self.branch_id == ALL
        )


def matches_search(record: Record, term: str) -> bool:
    """Case-insensitive substring match over :data:`SEARCH_FIELDS`."""
    needle = term.strip().lower()
    if not needle:
        return True
    for name in SEARCH_FIELDS:
        value = getattr(record, name)
        if value and needle in str(value).lower():
            return True
    return False


def matches(record: Record, criteria: FilterCriteria) -> bool:
    """Evaluate *criteria* against one record, cheapest check first."""
    if not matches_tab(record, criteria.tab):
        return False
    if criteria.branch_id != ALL and record.branch_id != criteria.branch_id:
        return False
    if criteria.membership_level != ALL and record.level != criteria.membership_level:
        return False
    return matches_search(record, criteria.search_term)


def filter_records(
    records: Iterable[Record],
    criteria: FilterCriteria,
) -> list[Record]:
    """Return the records matching *criteria*, in input order."""
    return [r for r in records if matches(r, criteria)]
