from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from member_directory.core.exceptions import (
    BatchAbortedError,
    CollaboratorUnavailableError,
    WriteFailedException,
)
from member_directory.core.types import ChunkOutcome, ImportResult
from member_directory.importing.normalizer import normalize_rows
from member_directory.models.record import Record
from member_directory.store.base import DirectoryStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50


@dataclass
class ImportChunk:
    """A contiguous slice of accepted rows, written in one ``write_batch``."""

    number: int
    records: list[Record]
    row_numbers: list[int]

    @property
    def first_row(self) -> int:
        return self.row_numbers[0]

    @property
    def last_row(self) -> int:
        return self.row_numbers[-1]


def partition(
    records: list[Record],
    row_numbers: list[int],
    chunk_size: int,
) -> list[ImportChunk]:
    """Split *records* into chunks of at most *chunk_size*, in input order."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    chunks: list[ImportChunk] = []
    for i in range(0, len(records), chunk_size):
        chunks.append(
            ImportChunk(
                number=len(chunks) + 1,
                records=records[i : i + chunk_size],
                row_numbers=row_numbers[i : i + chunk_size],
            )
        )
    return chunks


class ChunkedImporter:
    """Validates rows up front and writes the accepted ones chunk by chunk.

    A chunk that the store rejects is reported with the span of rows it
    covered and the import moves on to the next chunk.  Chunks already
    written stay written; there is no rollback across chunks.
    """

    def __init__(
        self,
        store: DirectoryStore,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.store = store
        self.chunk_size = chunk_size

    async def run(
        self,
        rows: Iterable[Mapping[str, Any]],
        *,
        category: str,
        branch_id: str,
        today: date | None = None,
    ) -> ImportResult:
        normalized = normalize_rows(
            rows, category=category, branch_id=branch_id, today=today
        )
        result = ImportResult(
            total_rows=normalized.total_rows,
            rejected_rows=normalized.rejected_rows,
            validation_errors=normalized.errors,
        )
        if normalized.rejected_rows:
            logger.warning(
                "%d of %d row(s) failed validation",
                len(normalized.rejected_rows),
                normalized.total_rows,
            )

        chunks = partition(
            normalized.records, normalized.row_numbers, self.chunk_size
        )
        if not chunks:
            logger.info("No valid rows to import")
            return result

        logger.info(
            "Importing %d %s record(s) into branch %s in %d chunk(s)",
            len(normalized.records),
            category,
            branch_id,
            len(chunks),
        )

        for chunk in chunks:
            await self._submit(chunk, category, result)

        logger.info(
            "Import finished: %d imported, %d failed, %d rejected",
            result.success_count,
            result.failure_count,
            result.rejected_count,
        )
        return result

    async def _submit(
        self,
        chunk: ImportChunk,
        category: str,
        result: ImportResult,
    ) -> None:
        outcome = ChunkOutcome(
            chunk_number=chunk.number,
            first_row=chunk.first_row,
            last_row=chunk.last_row,
            size=len(chunk.records),
            written=False,
        )
        result.chunks.append(outcome)
        batch = result.batch
        try:
            written = await self.store.write_batch(category, chunk.records)
        except WriteFailedException as exc:
            outcome.error = str(exc)
            message = f"Failed to import {outcome.span}: {exc}"
            for row in chunk.row_numbers:
                batch.record_failure(str(row), message)
            logger.warning("Chunk %d (%s) failed: %s", chunk.number, outcome.span, exc)
            return
        except CollaboratorUnavailableError as exc:
            outcome.error = str(exc)
            logger.error(
                "Import aborted at chunk %d (%s): %s", chunk.number, outcome.span, exc
            )
            raise BatchAbortedError(result, exc) from exc

        outcome.written = True
        batch.record_success(written)
        logger.info(
            "Chunk %d (%s): %d record(s) written", chunk.number, outcome.span, written
        )
