from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest

from member_directory.core.exceptions import (
    CollaboratorUnavailableError,
    MessageDispatchFailedException,
    WriteFailedException,
)
from member_directory.messaging.outbox import OutboxMessenger
from member_directory.models import Category, Record
from member_directory.store.memory import InMemoryStore
from member_directory.store.sql import SqlStore

BRANCH = "accra"
OTHER_BRANCH = "kumasi"


def make_member(
    name: str = "Ann Mensah",
    *,
    branch_id: str = BRANCH,
    membership_level: str = "convert",
    sub_level: str | None = None,
    leader_role: str | None = None,
    **fields: Any,
) -> Record:
    fields.setdefault("phone", "0244000000")
    return Record(
        category=Category.member.value,
        branch_id=branch_id,
        display_name=name,
        membership_level=membership_level,
        sub_level=sub_level,
        leader_role=leader_role,
        **fields,
    )


def make_visitor(
    name: str = "Kofi Boateng",
    *,
    branch_id: str = BRANCH,
    follow_up_status: str = "pending",
    **fields: Any,
) -> Record:
    fields.setdefault("phone", "0200000000")
    return Record(
        category=Category.visitor.value,
        branch_id=branch_id,
        display_name=name,
        follow_up_status=follow_up_status,
        **fields,
    )


def with_ids(*records: Record) -> list[Record]:
    """Give unsaved records stable ids (``r1``, ``r2``, ...) for pure tests."""
    for i, record in enumerate(records, 1):
        record.id = f"r{i}"
    return list(records)


def member_rows(count: int, *, start: int = 1) -> list[dict[str, str]]:
    """Valid spreadsheet-style rows for the importer."""
    return [
        {"Full Name": f"Member {n}", "Phone": f"024{n:07d}"}
        for n in range(start, start + count)
    ]


# ── Failing collaborators ────────────────────────────────────────────


class FlakyStore(InMemoryStore):
    """In-memory store that fails chosen calls.

    ``fail_batches`` holds 1-based ``write_batch`` call numbers to reject,
    ``fail_records`` holds record ids whose writes are rejected, and
    ``unavailable_after`` makes every call past that many record-level
    writes raise :class:`CollaboratorUnavailableError`.
    """

    def __init__(
        self,
        *,
        fail_batches: set[int] | None = None,
        fail_records: set[str] | None = None,
        unavailable_after: int | None = None,
    ) -> None:
        super().__init__()
        self.fail_batches = fail_batches or set()
        self.fail_records = fail_records or set()
        self.unavailable_after = unavailable_after
        self.batch_calls = 0
        self.record_calls = 0

    def _tick(self, record_id: str | None = None) -> None:
        self.record_calls += 1
        if (
            self.unavailable_after is not None
            and self.record_calls > self.unavailable_after
        ):
            raise CollaboratorUnavailableError("connection lost")
        if record_id in self.fail_records:
            raise WriteFailedException(f"record {record_id} is locked")

    async def write_batch(self, category: str, records: list[Record]) -> int:
        self.batch_calls += 1
        if (
            self.unavailable_after is not None
            and self.batch_calls > self.unavailable_after
        ):
            raise CollaboratorUnavailableError("connection lost")
        if self.batch_calls in self.fail_batches:
            raise WriteFailedException("duplicate phone number")
        return await super().write_batch(category, records)

    async def write_record(self, category: str, record: Record) -> Record:
        self._tick(record.id)
        return await super().write_record(category, record)

    async def delete_record(self, category: str, record_id: str) -> None:
        self._tick(record_id)
        await super().delete_record(category, record_id)

    async def create_transfer_request(self, record_id: str, *args, **kwargs):
        self._tick(record_id)
        return await super().create_transfer_request(record_id, *args, **kwargs)


class RefusingMessenger(OutboxMessenger):
    async def send_bulk_message(self, recipient_ids, channel, subject, body) -> None:
        raise MessageDispatchFailedException("quota exceeded")


class UnreachableMessenger(OutboxMessenger):
    async def send_bulk_message(self, recipient_ids, channel, subject, body) -> None:
        raise CollaboratorUnavailableError("gateway timeout")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def messenger() -> OutboxMessenger:
    return OutboxMessenger()


@pytest.fixture()
async def sql_store() -> AsyncGenerator[SqlStore]:
    store = SqlStore("sqlite+aiosqlite://")
    await store.init()
    yield store
    await store.close()
