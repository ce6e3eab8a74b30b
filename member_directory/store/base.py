from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType

from member_directory.models import Record, TransferRequest

ALL_BRANCHES = "all"


class DirectoryStore(ABC):
    """Abstract system of record for members, visitors and transfer requests.

    Implementations must override every ``@abstractmethod``.

    Failure contract: a write that is rejected for this item only raises
    :class:`~member_directory.core.exceptions.WriteFailedException`; a
    failure that makes every further call pointless (lost auth, no
    connection) raises
    :class:`~member_directory.core.exceptions.CollaboratorUnavailableError`.

    The default ``atomic()`` is a no-op suitable for in-memory stores;
    database-backed stores override it to provide a transactional boundary.
    """

    # ── Lifecycle ────────────────────────────────────────────────────

    @abstractmethod
    async def init(self) -> None:
        """Create tables / indices (idempotent)."""
        ...

    @abstractmethod
    async def reset(self) -> None:
        """Drop all data and recreate from scratch."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any held resources (connections, file handles)."""
        ...

    async def __aenter__(self) -> DirectoryStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Wrap multiple operations in a single commit.

        The default implementation is a no-op (each operation is
        auto-committed).
        """
        yield

    # ── Records ──────────────────────────────────────────────────────

    @abstractmethod
    async def query_records(
        self,
        category: str,
        branch_scope: str = ALL_BRANCHES,
    ) -> list[Record]:
        """Return every record of *category*, optionally limited to one branch.

        Ordered by creation time so that repeated queries are stable.
        """
        ...

    @abstractmethod
    async def get_record(self, category: str, record_id: str) -> Record | None:
        """Return a record by ID, or ``None``."""
        ...

    @abstractmethod
    async def write_record(self, category: str, record: Record) -> Record:
        """Create (``record.id is None``) or update a single record.

        Returns the stored record with its ``id`` set.
        """
        ...

    @abstractmethod
    async def write_batch(self, category: str, records: list[Record]) -> int:
        """Create all *records* or none of them.

        Returns the number of records written.
        """
        ...

    @abstractmethod
    async def delete_record(self, category: str, record_id: str) -> None:
        """Delete a record; unknown ids raise ``RecordNotFoundError``."""
        ...

    # ── Transfer requests ────────────────────────────────────────────

    @abstractmethod
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
        """Persist a pending transfer request for one record.

        A record may have at most one pending request at a time.
        """
        ...

    @abstractmethod
    async def list_transfer_requests(
        self,
        *,
        status: str | None = None,
    ) -> list[TransferRequest]:
        """Return transfer requests, optionally filtered by status."""
        ...
