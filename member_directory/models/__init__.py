"""Domain models: plain dataclasses with no infrastructure dependencies.

These are the canonical types passed between the store, the view state,
the importer and the batch coordinator.  The SQLAlchemy ORM rows used by
:class:`~member_directory.store.sql.SqlStore` live separately in
``db/models.py`` and are mapped to/from these dataclasses at the store
boundary.
"""

from member_directory.models.record import (
    Category,
    FollowUpStatus,
    Gender,
    LeaderRole,
    MaritalStatus,
    MemberStatus,
    MembershipLevel,
    Record,
    SubLevel,
)
from member_directory.models.transfer import TransferRequest, TransferStatus
from member_directory.models.utils import generate_id

__all__ = [
    "Category",
    "FollowUpStatus",
    "Gender",
    "LeaderRole",
    "MaritalStatus",
    "MemberStatus",
    "MembershipLevel",
    "Record",
    "SubLevel",
    "TransferRequest",
    "TransferStatus",
    "generate_id",
]
