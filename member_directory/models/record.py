from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, date, datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Category(enum.StrEnum):
    member = "member"
    visitor = "visitor"


class MembershipLevel(enum.StrEnum):
    baptized = "baptized"
    convert = "convert"
    visitor = "visitor"


class SubLevel(enum.StrEnum):
    leader = "leader"
    worker = "worker"
    disciple = "disciple"


class LeaderRole(enum.StrEnum):
    pastor = "pastor"
    assistant_pastor = "assistant_pastor"
    department_head = "department_head"
    ministry_head = "ministry_head"


class MemberStatus(enum.StrEnum):
    active = "active"
    inactive = "inactive"
    archived = "archived"
    suspended = "suspended"
    transferred = "transferred"


class FollowUpStatus(enum.StrEnum):
    pending = "pending"
    called = "called"
    visited = "visited"
    completed = "completed"


class Gender(enum.StrEnum):
    male = "male"
    female = "female"


class MaritalStatus(enum.StrEnum):
    single = "single"
    married = "married"
    divorced = "divorced"
    widowed = "widowed"


@dataclass
class Record:
    """A member or first-time visitor owned by exactly one branch.

    ``id`` is ``None`` until the store persists the record; after that
    it never changes.  Member-only and visitor-only attributes are left
    at ``None`` on the other category.
    """

    category: str
    branch_id: str
    display_name: str

    id: str | None = None
    status: str = MemberStatus.active.value
    email: str | None = None
    phone: str | None = None
    street: str | None = None
    area: str | None = None
    community: str | None = None
    gender: str | None = None
    marital_status: str | None = None
    date_of_birth: date | None = None
    date_joined: date | None = None

    # member attributes
    membership_level: str | None = None
    sub_level: str | None = None
    leader_role: str | None = None

    # visitor attributes
    service_date: date | None = None
    invited_by: str | None = None
    follow_up_status: str | None = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def is_member(self) -> bool:
        return self.category == Category.member.value

    @property
    def is_visitor(self) -> bool:
        return self.category == Category.visitor.value

    @property
    def level(self) -> str | None:
        """The attribute the level filter compares against.

        Members are filtered by membership level, visitors by follow-up
        stage.
        """
        if self.is_visitor:
            return self.follow_up_status
        return self.membership_level
