"""Turn loosely-typed input rows into canonical :class:`Record` objects.

Rows come from spreadsheets and exports with inconsistent headers
(``Full Name``, ``full_name``, ``fullName``) and free-text values.  The
normalizer maps them onto :class:`Record` fields, validates them and
applies defaults.  It never raises for bad data: every problem becomes a
:class:`RowError` so that a caller can report all of them at once.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

from member_directory.core.types import RowError
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

UNKNOWN_ADDRESS = "Unknown"
DEFAULT_MEMBER_STATUS = MemberStatus.active.value
DEFAULT_FOLLOW_UP_STATUS = FollowUpStatus.pending.value
DEFAULT_MEMBERSHIP_LEVEL = MembershipLevel.convert.value

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# normalized header -> Record field
_ALIASES: dict[str, str] = {
    "name": "display_name",
    "full_name": "display_name",
    "fullname": "display_name",
    "display_name": "display_name",
    "phone": "phone",
    "phone_number": "phone",
    "mobile": "phone",
    "telephone": "phone",
    "email": "email",
    "email_address": "email",
    "e_mail": "email",
    "status": "status",
    "gender": "gender",
    "sex": "gender",
    "marital_status": "marital_status",
    "street": "street",
    "area": "area",
    "community": "community",
    "date_of_birth": "date_of_birth",
    "dob": "date_of_birth",
    "birthday": "date_of_birth",
    "date_joined": "date_joined",
    "joined": "date_joined",
    "membership_level": "membership_level",
    "level": "membership_level",
    "sub_level": "sub_level",
    "baptized_sub_level": "sub_level",
    "leader_role": "leader_role",
    "service_date": "service_date",
    "invited_by": "invited_by",
    "follow_up_status": "follow_up_status",
}

_LABELS: dict[str, str] = {
    "display_name": "Full Name",
    "phone": "Phone",
    "email": "Email",
    "date_of_birth": "Date of Birth",
    "date_joined": "Date Joined",
    "service_date": "Service Date",
}

_MEMBER_ENUMS: dict[str, type[enum.StrEnum]] = {
    "status": MemberStatus,
    "gender": Gender,
    "marital_status": MaritalStatus,
    "membership_level": MembershipLevel,
    "sub_level": SubLevel,
    "leader_role": LeaderRole,
}

_VISITOR_ENUMS: dict[str, type[enum.StrEnum]] = {
    "status": MemberStatus,
    "gender": Gender,
    "follow_up_status": FollowUpStatus,
}

_MEMBER_DATES = ("date_of_birth", "date_joined")
_VISITOR_DATES = ("date_of_birth", "service_date")

_ENUM_FIELDS = {**_MEMBER_ENUMS, **_VISITOR_ENUMS}
_DATE_FIELDS = frozenset(_MEMBER_DATES + _VISITOR_DATES)
_COERCED_FIELDS = {"phone", "email", *_ENUM_FIELDS, *_DATE_FIELDS}


def normalize_key(key: str) -> str:
    """``"Full Name"``, ``"full-name"`` and ``"fullName"`` → ``"full_name"``."""
    key = _CAMEL_RE.sub("_", str(key).strip())
    key = re.sub(r"[\s\-\.]+", "_", key.lower())
    return key.strip("_")


def _clean(value: Any) -> Any:
    """Strip strings and treat blanks (and NaN from spreadsheets) as missing."""
    if value is None:
        return None
    if isinstance(value, float) and value != value:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_date(value: Any) -> date | None:
    """Parse anything that looks like a date; ``None`` if it does not."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.parse(str(value)).date()
    except (ValueError, OverflowError):
        return None


def _label(name: str) -> str:
    return _LABELS.get(name, name.replace("_", " ").capitalize())


def coerce_value(name: str, value: Any) -> Any:
    """Canonicalise a single field value the way imported rows are stored.

    Enum values are matched case-insensitively, dates parsed and emails
    lowercased; a blank value clears the field.  Fields without rules are
    returned unchanged.

    Raises:
        ValueError: if the value is not valid for the field.
    """
    if name not in _COERCED_FIELDS:
        return value
    value = _clean(value)
    if value is None:
        return None
    if name == "phone":
        return str(value)
    if name == "email":
        value = str(value).lower()
        if not _EMAIL_RE.match(value):
            raise ValueError(f"Invalid {_label('email')}")
        return value
    if name in _DATE_FIELDS:
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Invalid {_label(name)}")
        return parsed
    try:
        return _ENUM_FIELDS[name](normalize_key(str(value))).value
    except ValueError:
        raise ValueError(f"Invalid {_label(name)}: {value}") from None


@dataclass
class NormalizedRows:
    """Accepted records and rejected rows for one input file."""

    records: list[Record] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    rejected_rows: list[int] = field(default_factory=list)
    total_rows: int = 0


def normalize_row(
    row: Mapping[str, Any],
    *,
    category: str,
    branch_id: str,
    row_number: int,
    today: date | None = None,
) -> tuple[Record | None, list[RowError]]:
    """Normalize one row.

    Returns ``(record, [])`` when the row is accepted and ``(None, errors)``
    otherwise, with one error per missing or invalid field.
    """
    category = Category(category).value
    is_visitor = category == Category.visitor.value
    today = today or date.today()

    values: dict[str, Any] = {}
    for key, raw in row.items():
        name = _ALIASES.get(normalize_key(key))
        if name is None:
            continue
        value = _clean(raw)
        if value is not None and name not in values:
            values[name] = value

    errors: list[RowError] = []

    def fail(name: str, message: str) -> None:
        errors.append(RowError(row=row_number, field=name, message=message))

    if not values.get("display_name"):
        fail("display_name", f"{_label('display_name')} is required")
    if not values.get("phone") and not values.get("email"):
        fail("phone", "Phone or email is required")

    enums = _VISITOR_ENUMS if is_visitor else _MEMBER_ENUMS
    dates = _VISITOR_DATES if is_visitor else _MEMBER_DATES
    for name in ("phone", "email", *enums, *dates):
        if name not in values:
            continue
        try:
            values[name] = coerce_value(name, values[name])
        except ValueError as exc:
            fail(name, str(exc))

    if errors:
        return None, errors

    record = Record(
        category=category,
        branch_id=branch_id,
        display_name=str(values["display_name"]),
        email=values.get("email"),
        phone=values.get("phone"),
        gender=values.get("gender"),
        date_of_birth=values.get("date_of_birth"),
        street=values.get("street") or UNKNOWN_ADDRESS,
        area=values.get("area") or UNKNOWN_ADDRESS,
        community=values.get("community") or UNKNOWN_ADDRESS,
    )
    record.status = values.get("status") or DEFAULT_MEMBER_STATUS
    if is_visitor:
        record.service_date = values.get("service_date") or today
        record.invited_by = values.get("invited_by")
        record.follow_up_status = (
            values.get("follow_up_status") or DEFAULT_FOLLOW_UP_STATUS
        )
    else:
        record.marital_status = values.get("marital_status")
        record.date_joined = values.get("date_joined") or today
        record.membership_level = (
            values.get("membership_level") or DEFAULT_MEMBERSHIP_LEVEL
        )
        record.sub_level = values.get("sub_level")
        record.leader_role = values.get("leader_role")
    return record, []


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    category: str,
    branch_id: str,
    today: date | None = None,
) -> NormalizedRows:
    """Normalize every row, collecting all errors instead of failing fast.

    Row numbers are 1-based positions in *rows*.  Rows read with
    :func:`~member_directory.importing.sources.load_rows` have already lost
    the header and any blank lines, so a number counts data rows and is
    not a spreadsheet line number.
    """
    result = NormalizedRows()
    for index, row in enumerate(rows, 1):
        result.total_rows += 1
        record, errors = normalize_row(
            row,
            category=category,
            branch_id=branch_id,
            row_number=index,
            today=today,
        )
        if record is None:
            result.rejected_rows.append(index)
            result.errors.extend(errors)
        else:
            result.records.append(record)
            result.row_numbers.append(index)
    return result
