from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime

from member_directory.models.utils import generate_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TransferStatus(enum.StrEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


@dataclass
class TransferRequest:
    """A request to move one record from its branch to another.

    Requests are reviewed outside this package; the engine only creates
    them in the ``pending`` state.
    """

    record_id: str
    category: str
    from_branch_id: str
    to_branch_id: str
    reason: str

    id: str = field(default_factory=generate_id)
    notes: str | None = None
    status: str = TransferStatus.pending.value
    created_at: datetime = field(default_factory=_utcnow)
