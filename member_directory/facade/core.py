"""Main facade for the member_directory library."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

from member_directory.batch.coordinator import BatchCoordinator
from member_directory.batch.operations import (
    BatchOperation,
    DeleteOperation,
    NotifyOperation,
    TransferOperation,
    UpdateOperation,
)
from member_directory.config import EngineSettings, parse_config
from member_directory.core.exceptions import BatchAbortedError
from member_directory.core.types import BatchResult, ImportResult
from member_directory.facade.types import ReloadSummary, TransferSummary
from member_directory.importing.importer import ChunkedImporter
from member_directory.importing.sources import load_rows
from member_directory.models.record import Category, Record
from member_directory.view.pagination import Page
from member_directory.view.state import DirectoryView
from member_directory.view.stats import DirectoryStats, directory_stats

if TYPE_CHECKING:
    from member_directory.messaging.base import Messenger
    from member_directory.store.base import DirectoryStore

logger = logging.getLogger(__name__)


class MemberDirectory:
    """Main entry point for the member_directory library.

    Holds the records loaded for one branch scope together with the view
    state (filters, page, selection) of a directory screen, and runs
    batch operations and imports against the store.  After any batch or
    import that changed data the records are re-queried from the store;
    the in-memory list is never patched by hand.

    Usage::

        from member_directory.messaging import OutboxMessenger
        from member_directory.store import InMemoryStore

        directory = MemberDirectory(InMemoryStore(), OutboxMessenger())
        await directory.init()
        await directory.import_file("members.csv", branch_id="accra")
        directory.view.set_tab("converts")
        directory.select_all()
        result = await directory.notify("sms", "Welcome!")
    """

    def __init__(
        self,
        store: DirectoryStore,
        messenger: Messenger,
        settings: EngineSettings | None = None,
    ) -> None:
        settings = settings or EngineSettings()
        self._store = store
        self._messenger = messenger
        self._settings = settings
        self._coordinator = BatchCoordinator(store, messenger)
        self._importer = ChunkedImporter(store, chunk_size=settings.chunk_size)
        self._records: list[Record] = []
        self.branch_scope = settings.default_branch
        self.view = DirectoryView(page_size=settings.page_size)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> MemberDirectory:
        """Build a directory from a config dict, see :func:`parse_config`."""
        store, messenger, settings = parse_config(config)
        return cls(store, messenger, settings)

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        """Create missing tables / indices and load the current scope."""
        await self._store.init()
        await self.reload()

    async def reset(self) -> None:
        """Drop all data and recreate from scratch."""
        await self._store.reset()
        self.view.clear_selection()
        await self.reload()

    async def close(self) -> None:
        await self._messenger.close()
        await self._store.close()

    async def __aenter__(self) -> MemberDirectory:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── Records ──────────────────────────────────────────────────────

    @property
    def records(self) -> list[Record]:
        """Members followed by visitors, as last loaded from the store."""
        return list(self._records)

    async def reload(self) -> ReloadSummary:
        """Re-query both categories for the current branch scope."""
        members = await self._store.query_records(
            Category.member.value, self.branch_scope
        )
        visitors = await self._store.query_records(
            Category.visitor.value, self.branch_scope
        )
        self._records = members + visitors
        logger.debug(
            "Loaded %d member(s) and %d visitor(s) for branch scope %s",
            len(members),
            len(visitors),
            self.branch_scope,
        )
        return ReloadSummary(
            branch_scope=self.branch_scope,
            member_count=len(members),
            visitor_count=len(visitors),
        )

    async def set_branch_scope(self, branch_id: str) -> ReloadSummary:
        """Load a different branch (or ``"all"``) from the store."""
        self.branch_scope = branch_id
        return await self.reload()

    def page(self) -> Page:
        return self.view.page(self._records)

    def stats(self) -> DirectoryStats:
        return directory_stats(self._records)

    # ── Selection ────────────────────────────────────────────────────

    def toggle(self, record_id: str) -> bool:
        return self.view.toggle(record_id)

    def select_all(self) -> None:
        self.view.select_all(self._records)

    def clear_selection(self) -> None:
        self.view.clear_selection()

    def all_selected(self) -> bool:
        return self.view.all_selected(self._records)

    def selected(self) -> list[Record]:
        return self.view.selected(self._records)

    # ── Batch operations ─────────────────────────────────────────────

    async def transfer(
        self,
        to_branch_id: str,
        reason: str,
        notes: str | None = None,
    ) -> BatchResult:
        """Create a pending transfer request for every selected record."""
        return await self.run(
            TransferOperation(to_branch_id=to_branch_id, reason=reason, notes=notes)
        )

    async def notify(
        self,
        channel: str,
        body: str,
        subject: str | None = None,
    ) -> BatchResult:
        """Send one message to every selected record."""
        return await self.run(
            NotifyOperation(channel=channel, body=body, subject=subject)
        )

    async def delete(self) -> BatchResult:
        return await self.run(DeleteOperation())

    async def update(self, changes: dict[str, Any]) -> BatchResult:
        """Apply the same field changes to every selected record."""
        return await self.run(UpdateOperation(changes=changes))

    async def run(self, operation: BatchOperation) -> BatchResult:
        """Run *operation* over the current selection.

        Afterwards the selection holds only the records that failed, so a
        retry targets exactly those.
        """
        selection = self.selected()
        try:
            result = await self._coordinator.execute(operation, selection)
        except BatchAbortedError as exc:
            if exc.result.success_count > 0:
                await self.reload()
            raise
        if result.reconciliation_needed:
            await self.reload()
        if result.total:
            self.view.selection.select_all(result.failed_ids)
        return result

    # ── Import ───────────────────────────────────────────────────────

    async def import_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        *,
        branch_id: str,
        category: str = Category.member.value,
    ) -> ImportResult:
        """Validate and write *rows* into *branch_id* in fixed-size chunks."""
        try:
            result = await self._importer.run(
                rows, category=category, branch_id=branch_id
            )
        except BatchAbortedError as exc:
            if exc.result.success_count > 0:
                await self.reload()
            raise
        if result.success_count > 0:
            await self.reload()
        return result

    async def import_file(
        self,
        path: str | Path,
        *,
        branch_id: str,
        category: str = Category.member.value,
    ) -> ImportResult:
        """Import a ``.csv`` / ``.xlsx`` / ``.xls`` export."""
        rows = load_rows(path)
        return await self.import_rows(rows, branch_id=branch_id, category=category)

    # ── Transfers ────────────────────────────────────────────────────

    async def list_transfers(self, status: str | None = None) -> list[TransferSummary]:
        requests = await self._store.list_transfer_requests(status=status)
        return [
            TransferSummary(
                id=r.id,
                record_id=r.record_id,
                category=r.category,
                from_branch_id=r.from_branch_id,
                to_branch_id=r.to_branch_id,
                reason=r.reason,
                status=r.status,
                created_at=r.created_at,
                notes=r.notes,
            )
            for r in requests
        ]
