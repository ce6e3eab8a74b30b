"""Public return types for the member_directory API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TransferSummary:
    """Public representation of a transfer request."""

    id: str
    record_id: str
    category: str
    from_branch_id: str
    to_branch_id: str
    reason: str
    status: str
    created_at: datetime
    notes: str | None = None


@dataclass
class ReloadSummary:
    """Result from :meth:`MemberDirectory.reload`."""

    branch_scope: str
    member_count: int = 0
    visitor_count: int = 0

    @property
    def total(self) -> int:
        return self.member_count + self.visitor_count
