from __future__ import annotations

import dataclasses
from datetime import UTC, datetime

from member_directory.core.exceptions import RecordNotFoundError, WriteFailedException
from member_directory.models import (
    Category,
    Record,
    TransferRequest,
    TransferStatus,
    generate_id,
)
from member_directory.store.base import ALL_BRANCHES, DirectoryStore


class InMemoryStore(DirectoryStore):
    """Store backed by plain Python dicts.

    Safe within a single asyncio event loop (no concurrent mutation).
    Records are copied on the way in and on the way out so callers can
    never patch stored state by mutating a returned object.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Record]] = {c.value: {} for c in Category}
        self._transfers: dict[str, TransferRequest] = {}

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        pass

    async def reset(self) -> None:
        self.__init__()  # type: ignore[misc]

    async def close(self) -> None:
        pass

    # ── Records ──────────────────────────────────────────────────────

    def _bucket(self, category: str) -> dict[str, Record]:
        try:
            return self._records[Category(category).value]
        except ValueError as exc:
            raise WriteFailedException(f"unknown category '{category}'") from exc

    @staticmethod
    def _check(category: str, record: Record) -> None:
        if record.category != category:
            raise WriteFailedException(
                f"record category '{record.category}' does not match '{category}'"
            )
        if not record.branch_id:
            raise WriteFailedException("branch_id is required")
        if not record.display_name:
            raise WriteFailedException("display_name is required")

    async def query_records(
        self,
        category: str,
        branch_scope: str = ALL_BRANCHES,
    ) -> list[Record]:
        records = list(self._bucket(category).values())
        if branch_scope != ALL_BRANCHES:
            records = [r for r in records if r.branch_id == branch_scope]
        records.sort(key=lambda r: r.created_at)
        return [dataclasses.replace(r) for r in records]

    async def get_record(self, category: str, record_id: str) -> Record | None:
        record = self._bucket(category).get(record_id)
        return dataclasses.replace(record) if record is not None else None

    async def write_record(self, category: str, record: Record) -> Record:
        bucket = self._bucket(category)
        self._check(category, record)
        now = datetime.now(UTC)
        if record.id is None:
            stored = dataclasses.replace(
                record, id=generate_id(), created_at=now, updated_at=now
            )
        else:
            existing = bucket.get(record.id)
            if existing is None:
                raise RecordNotFoundError(record.id)
            stored = dataclasses.replace(
                record, created_at=existing.created_at, updated_at=now
            )
        bucket[stored.id] = stored  # type: ignore[index]
        return dataclasses.replace(stored)

    async def write_batch(self, category: str, records: list[Record]) -> int:
        bucket = self._bucket(category)
        for record in records:
            self._check(category, record)
            if record.id is not None:
                raise WriteFailedException(
                    f"batch writes only create records (got id {record.id})"
                )
        now = datetime.now(UTC)
        for record in records:
            stored = dataclasses.replace(
                record, id=generate_id(), created_at=now, updated_at=now
            )
            bucket[stored.id] = stored  # type: ignore[index]
        return len(records)

    async def delete_record(self, category: str, record_id: str) -> None:
        bucket = self._bucket(category)
        if record_id not in bucket:
            raise RecordNotFoundError(record_id)
        del bucket[record_id]

    # ── Transfer requests ────────────────────────────────────────────

    async def create_transfer_request(
        self,
        record_id: str,
        from_branch_id: str,
        to_branch_id: str,
        reason: str,
        *,
        category: str,
        notes: str | None = None,
    ) -> TransferRequest:
        if record_id not in self._bucket(category):
            raise RecordNotFoundError(record_id)
        for existing in self._transfers.values():
            if (
                existing.record_id == record_id
                and existing.status == TransferStatus.pending.value
            ):
                raise WriteFailedException(
                    f"record {record_id} already has a pending transfer request"
                )
        request = TransferRequest(
            record_id=record_id,
            category=category,
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            reason=reason,
            notes=notes,
        )
        self._transfers[request.id] = request
        return request

    async def list_transfer_requests(
        self,
        *,
        status: str | None = None,
    ) -> list[TransferRequest]:
        requests = list(self._transfers.values())
        if status is not None:
            requests = [t for t in requests if t.status == status]
        return sorted(requests, key=lambda t: t.created_at)
