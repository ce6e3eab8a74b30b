from __future__ import annotations

from datetime import date

import pytest

from member_directory.batch.coordinator import BatchCoordinator
from member_directory.batch.operations import (
    DeleteOperation,
    NotifyOperation,
    TransferOperation,
    UpdateOperation,
)
from member_directory.core.exceptions import BatchAbortedError, PreconditionFailedError
from member_directory.messaging.outbox import OutboxMessenger
from member_directory.models import Record
from member_directory.store.memory import InMemoryStore
from member_directory.store.sql import SqlStore
from member_directory.view.filters import FilterCriteria, Tab, filter_records
from tests.conftest import (
    OTHER_BRANCH,
    FlakyStore,
    RefusingMessenger,
    UnreachableMessenger,
    make_member,
)


async def _seed(store: InMemoryStore, count: int) -> list[Record]:
    return [
        await store.write_record("member", make_member(f"Member {n}"))
        for n in range(1, count + 1)
    ]


# ── Transfer ─────────────────────────────────────────────────────────


async def test_transfer_continues_past_a_pending_request(
    store: InMemoryStore, messenger: OutboxMessenger
):
    selection = await _seed(store, 5)
    third = selection[2]
    await store.create_transfer_request(
        third.id, third.branch_id, OTHER_BRANCH, "moved", category="member"
    )
    coordinator = BatchCoordinator(store, messenger)

    result = await coordinator.execute(
        TransferOperation(to_branch_id=OTHER_BRANCH, reason="relocated"),
        selection,
    )

    assert result.success_count == 4
    assert result.failure_count == 1
    assert result.failed_ids == [third.id]
    assert "pending transfer" in result.errors[0].message
    assert result.reconciliation_needed

    pending = await store.list_transfer_requests(status="pending")
    assert len(pending) == 5
    assert {t.reason for t in pending} == {"moved", "relocated"}


async def test_transfer_to_own_branch_is_an_item_failure(
    store: InMemoryStore, messenger: OutboxMessenger
):
    selection = await _seed(store, 2)
    coordinator = BatchCoordinator(store, messenger)

    result = await coordinator.execute(
        TransferOperation(to_branch_id="accra", reason="no-op"), selection
    )

    assert result.success_count == 0
    assert result.failure_count == 2
    assert not result.reconciliation_needed
    assert await store.list_transfer_requests() == []


@pytest.mark.parametrize(
    "operation",
    [
        TransferOperation(to_branch_id=OTHER_BRANCH, reason="  "),
        TransferOperation(to_branch_id="", reason="relocated"),
    ],
)
async def test_incomplete_transfer_writes_nothing(operation, messenger):
    store = FlakyStore()
    selection = await _seed(store, 3)
    store.record_calls = 0
    coordinator = BatchCoordinator(store, messenger)

    with pytest.raises(PreconditionFailedError):
        await coordinator.execute(operation, selection)

    assert store.record_calls == 0
    assert await store.list_transfer_requests() == []


# ── Notify ───────────────────────────────────────────────────────────


async def test_notify_sends_one_bulk_message(store: InMemoryStore):
    messenger = OutboxMessenger()
    selection = await _seed(store, 3)
    coordinator = BatchCoordinator(store, messenger)

    result = await coordinator.execute(
        NotifyOperation(channel="email", subject="Service", body="See you Sunday"),
        selection,
    )

    assert result.success_count == 3
    assert result.failure_count == 0
    assert len(messenger.outbox) == 1
    message = messenger.outbox[0]
    assert message.recipient_ids == [r.id for r in selection]
    assert message.channel == "email"
    assert message.subject == "Service"


async def test_refused_notification_fails_every_recipient(store: InMemoryStore):
    selection = await _seed(store, 3)
    coordinator = BatchCoordinator(store, RefusingMessenger())

    result = await coordinator.execute(
        NotifyOperation(channel="sms", body="Hello"), selection
    )

    assert result.success_count == 0
    assert result.failure_count == 3
    assert result.failed_ids == [r.id for r in selection]
    assert all("quota exceeded" in e.message for e in result.errors)


async def test_unreachable_messenger_aborts(store: InMemoryStore):
    selection = await _seed(store, 2)
    coordinator = BatchCoordinator(store, UnreachableMessenger())

    with pytest.raises(BatchAbortedError) as excinfo:
        await coordinator.execute(NotifyOperation(body="Hello"), selection)

    assert excinfo.value.result.total == 0


async def test_email_requires_a_subject(store: InMemoryStore):
    messenger = OutboxMessenger()
    selection = await _seed(store, 1)
    coordinator = BatchCoordinator(store, messenger)

    with pytest.raises(PreconditionFailedError):
        await coordinator.execute(
            NotifyOperation(channel="email", body="Hello"), selection
        )
    assert messenger.outbox == []


# ── Delete / update ──────────────────────────────────────────────────


async def test_delete_skips_missing_records(store: InMemoryStore, messenger):
    selection = await _seed(store, 3)
    await store.delete_record("member", selection[1].id)
    coordinator = BatchCoordinator(store, messenger)

    result = await coordinator.execute(DeleteOperation(), selection)

    assert result.success_count == 2
    assert result.failed_ids == [selection[1].id]
    assert await store.query_records("member") == []


async def test_update_applies_changes(store: InMemoryStore, messenger):
    selection = await _seed(store, 2)
    coordinator = BatchCoordinator(store, messenger)

    result = await coordinator.execute(
        UpdateOperation(changes={"membership_level": "baptized"}), selection
    )

    assert result.success_count == 2
    stored = await store.query_records("member")
    assert {r.membership_level for r in stored} == {"baptized"}


async def test_update_stores_canonical_values(store: InMemoryStore, messenger):
    selection = await _seed(store, 2)
    coordinator = BatchCoordinator(store, messenger)

    await coordinator.execute(
        UpdateOperation(
            changes={"membership_level": "Baptized", "sub_level": "Worker"}
        ),
        selection,
    )

    stored = await store.query_records("member")
    assert {(r.membership_level, r.sub_level) for r in stored} == {
        ("baptized", "worker")
    }
    assert len(filter_records(stored, FilterCriteria(tab=Tab.workers))) == 2


async def test_invalid_update_writes_nothing(store: InMemoryStore, messenger):
    selection = await _seed(store, 2)
    coordinator = BatchCoordinator(store, messenger)

    with pytest.raises(PreconditionFailedError, match="Membership level"):
        await coordinator.execute(
            UpdateOperation(changes={"membership_level": "elder"}), selection
        )

    stored = await store.query_records("member")
    assert {r.membership_level for r in stored} == {"convert"}


async def test_update_parses_dates_before_writing_to_sql(
    sql_store: SqlStore, messenger
):
    selection = [
        await sql_store.write_record("member", make_member(name))
        for name in ("Ann", "Kofi")
    ]
    coordinator = BatchCoordinator(sql_store, messenger)

    result = await coordinator.execute(
        UpdateOperation(changes={"date_of_birth": "1990-01-01"}), selection
    )

    assert result.success_count == 2
    stored = await sql_store.query_records("member")
    assert {r.date_of_birth for r in stored} == {date(1990, 1, 1)}


async def test_item_failures_do_not_stop_the_batch(messenger):
    store = FlakyStore()
    selection = await _seed(store, 4)
    store.fail_records = {selection[0].id, selection[2].id}
    coordinator = BatchCoordinator(store, messenger)

    result = await coordinator.execute(DeleteOperation(), selection)

    assert result.success_count == 2
    assert result.failed_ids == [selection[0].id, selection[2].id]


async def test_unavailable_store_aborts_with_partial_result(messenger):
    store = FlakyStore()
    selection = await _seed(store, 5)
    store.record_calls = 0
    store.unavailable_after = 2
    coordinator = BatchCoordinator(store, messenger)

    with pytest.raises(BatchAbortedError) as excinfo:
        await coordinator.execute(DeleteOperation(), selection)

    partial = excinfo.value.result
    assert partial.success_count == 2
    assert partial.failure_count == 0
    assert len(await store.query_records("member")) == 3


async def test_empty_selection_is_a_no_op(messenger):
    store = FlakyStore()
    coordinator = BatchCoordinator(store, messenger)

    # an incomplete operation is not even checked when nothing is selected
    result = await coordinator.execute(TransferOperation(), [])

    assert result.total == 0
    assert store.record_calls == 0
    assert messenger.outbox == []
