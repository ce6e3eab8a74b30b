from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from member_directory.batch.operations import (
    BatchOperation,
    DeleteOperation,
    NotifyOperation,
    TransferOperation,
    UpdateOperation,
)
from member_directory.core.exceptions import (
    BatchAbortedError,
    CollaboratorUnavailableError,
    MessageDispatchFailedException,
    PreconditionFailedError,
    WriteFailedException,
)
from member_directory.core.types import BatchResult
from member_directory.messaging.base import Messenger
from member_directory.models.record import Record
from member_directory.store.base import DirectoryStore

logger = logging.getLogger(__name__)


class BatchCoordinator:
    """Applies one operation to a selection of records.

    Records are processed one at a time, in selection order.  A record the
    store rejects is recorded in the result and the batch moves on; a
    collaborator that becomes unavailable stops the batch with
    :class:`BatchAbortedError`, which carries everything completed so far.

    Notifications are the exception: the whole selection goes to the
    messenger in a single call and is acknowledged or refused as a unit.
    """

    def __init__(self, store: DirectoryStore, messenger: Messenger) -> None:
        self.store = store
        self.messenger = messenger

    async def execute(
        self,
        operation: BatchOperation,
        selection: Sequence[Record],
    ) -> BatchResult:
        result = BatchResult()
        if not selection:
            logger.info("Empty selection, nothing to %s", operation.kind)
            return result

        operation.check()

        logger.info("Running %s on %d record(s)", operation.kind, len(selection))
        if isinstance(operation, NotifyOperation):
            await self._notify(operation, selection, result)
        else:
            step = self._step_for(operation)
            for record in selection:
                await self._apply(step, record, result)

        logger.info(
            "%s finished: %d succeeded, %d failed",
            operation.kind.capitalize(),
            result.success_count,
            result.failure_count,
        )
        return result

    def _step_for(
        self, operation: BatchOperation
    ) -> Callable[[Record], Awaitable[None]]:
        if isinstance(operation, TransferOperation):
            return lambda record: self._transfer(operation, record)
        if isinstance(operation, DeleteOperation):
            return self._delete
        if isinstance(operation, UpdateOperation):
            changes = operation.normalized_changes()
            return lambda record: self._update(changes, record)
        raise PreconditionFailedError(f"unsupported operation: {operation!r}")

    async def _apply(
        self,
        step: Callable[[Record], Awaitable[None]],
        record: Record,
        result: BatchResult,
    ) -> None:
        item_id = record.id or ""
        if record.id is None:
            result.record_failure(item_id, "record has not been saved")
            return
        try:
            await step(record)
        except WriteFailedException as exc:
            logger.warning("Record %s failed: %s", item_id, exc)
            result.record_failure(item_id, str(exc))
            return
        except CollaboratorUnavailableError as exc:
            logger.error(
                "Batch aborted at record %s after %d succeeded: %s",
                item_id,
                result.success_count,
                exc,
            )
            raise BatchAbortedError(result, exc) from exc
        result.record_success()

    # ── Per-record steps ─────────────────────────────────────────────

    async def _transfer(self, operation: TransferOperation, record: Record) -> None:
        if record.branch_id == operation.to_branch_id:
            raise WriteFailedException(
                f"record {record.id} is already in branch {operation.to_branch_id}"
            )
        assert record.id is not None
        await self.store.create_transfer_request(
            record.id,
            record.branch_id,
            operation.to_branch_id,
            operation.reason,
            category=record.category,
            notes=operation.notes,
        )

    async def _delete(self, record: Record) -> None:
        assert record.id is not None
        await self.store.delete_record(record.category, record.id)

    async def _update(self, changes: dict[str, Any], record: Record) -> None:
        updated = dataclasses.replace(record, **changes, updated_at=datetime.now(UTC))
        await self.store.write_record(record.category, updated)

    # ── Notifications ────────────────────────────────────────────────

    async def _notify(
        self,
        operation: NotifyOperation,
        selection: Sequence[Record],
        result: BatchResult,
    ) -> None:
        recipients = [r.id for r in selection if r.id is not None]
        if not recipients:
            raise PreconditionFailedError("no saved recipients selected")
        try:
            await self.messenger.send_bulk_message(
                recipients,
                operation.channel,
                operation.subject,
                operation.body,
            )
        except MessageDispatchFailedException as exc:
            logger.warning(
                "%s message to %d recipient(s) refused: %s",
                operation.channel,
                len(recipients),
                exc,
            )
            for recipient in recipients:
                result.record_failure(recipient, str(exc))
            return
        except CollaboratorUnavailableError as exc:
            logger.error("Messenger unavailable: %s", exc)
            raise BatchAbortedError(result, exc) from exc
        result.record_success(len(recipients))
