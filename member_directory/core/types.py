"""Result types produced by batch operations and imports."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ItemError:
    """One failed item of a batch: a record id or a source row number."""

    item_id: str
    message: str


@dataclass(frozen=True)
class RowError:
    """A validation error for one field of one input row (1-based)."""

    row: int
    field: str
    message: str


@dataclass
class BatchResult:
    """Outcome of one batch or import submission.

    Never persisted.  ``errors`` is in submission order so failures map
    back to the selection or to source rows.
    """

    success_count: int = 0
    failure_count: int = 0
    errors: list[ItemError] = field(default_factory=list)

    @property
    def reconciliation_needed(self) -> bool:
        """Whether the caller should re-query the store."""
        return self.success_count > 0

    @property
    def failed_ids(self) -> list[str]:
        """Item ids to retry, without duplicates, in failure order."""
        return list(dict.fromkeys(e.item_id for e in self.errors))

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    def record_success(self, count: int = 1) -> None:
        self.success_count += count

    def record_failure(self, item_id: str, message: str) -> None:
        self.failure_count += 1
        self.errors.append(ItemError(item_id=item_id, message=message))

    def merge(self, other: BatchResult) -> None:
        self.success_count += other.success_count
        self.failure_count += other.failure_count
        self.errors.extend(other.errors)


@dataclass
class ChunkOutcome:
    """What happened to one import chunk."""

    chunk_number: int
    first_row: int
    last_row: int
    size: int
    written: bool
    error: str | None = None

    @property
    def span(self) -> str:
        return f"rows {self.first_row} to {self.last_row}"


@dataclass
class ImportResult:
    """Result from :meth:`ChunkedImporter.run`.

    Validation failures are reported separately from write failures:
    ``validation_errors`` covers rows that never reached a chunk, while
    ``batch`` counts only rows that were submitted.
    """

    total_rows: int = 0
    rejected_rows: list[int] = field(default_factory=list)
    validation_errors: list[RowError] = field(default_factory=list)
    batch: BatchResult = field(default_factory=BatchResult)
    chunks: list[ChunkOutcome] = field(default_factory=list)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected_rows)

    @property
    def success_count(self) -> int:
        return self.batch.success_count

    @property
    def failure_count(self) -> int:
        return self.batch.failure_count

    @property
    def failed_chunks(self) -> list[ChunkOutcome]:
        return [c for c in self.chunks if not c.written]
