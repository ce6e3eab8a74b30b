from member_directory.view.filters import (
    ALL,
    SEARCH_FIELDS,
    FilterCriteria,
    Tab,
    filter_records,
    matches_tab,
)
from member_directory.view.pagination import (
    DEFAULT_PAGE_SIZE,
    Page,
    PageCursor,
    paginate,
    total_pages,
)
from member_directory.view.selection import SelectionTracker
from member_directory.view.state import DirectoryView
from member_directory.view.stats import DirectoryStats, directory_stats

__all__ = [
    "ALL",
    "DEFAULT_PAGE_SIZE",
    "DirectoryStats",
    "DirectoryView",
    "FilterCriteria",
    "Page",
    "PageCursor",
    "SEARCH_FIELDS",
    "SelectionTracker",
    "Tab",
    "directory_stats",
    "filter_records",
    "matches_tab",
    "paginate",
    "total_pages",
]
