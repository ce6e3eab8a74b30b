from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from member_directory.models.record import MembershipLevel, Record, SubLevel
from member_directory.view.filters import Tab, matches_tab


@dataclass(frozen=True)
class DirectoryStats:
    """Head counts shown above the directory tabs."""

    total_members: int = 0
    workers: int = 0
    disciples: int = 0
    leaders: int = 0
    pastors: int = 0
    converts: int = 0
    visitors: int = 0


def directory_stats(records: Iterable[Record]) -> DirectoryStats:
    """Count records per tab.

    Unlike the ``workers`` tab, the ``workers`` count excludes disciples,
    who have their own counter.
    """
    counts = dict.fromkeys(
        (
            "members",
            "workers",
            "disciples",
            "leaders",
            "pastors",
            "converts",
            "visitors",
        ),
        0,
    )
    for record in records:
        if record.is_visitor:
            counts["visitors"] += 1
            continue
        counts["members"] += 1
        if (
            record.membership_level == MembershipLevel.baptized.value
            and record.sub_level == SubLevel.worker.value
        ):
            counts["workers"] += 1
        for tab in (Tab.disciples, Tab.leaders, Tab.pastors, Tab.converts):
            if matches_tab(record, tab):
                counts[tab.value] += 1

    return DirectoryStats(
        total_members=counts["members"],
        workers=counts["workers"],
        disciples=counts["disciples"],
        leaders=counts["leaders"],
        pastors=counts["pastors"],
        converts=counts["converts"],
        visitors=counts["visitors"],
    )
