from __future__ import annotations

import dataclasses
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import exc as sa_exc
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from member_directory.core.exceptions import (
    CollaboratorUnavailableError,
    RecordNotFoundError,
    WriteFailedException,
)
from member_directory.db.models import Base, RecordRow, TransferRequestRow
from member_directory.models import (
    Category,
    Record,
    TransferRequest,
    TransferStatus,
    generate_id,
)
from member_directory.store.base import ALL_BRANCHES, DirectoryStore

logger = logging.getLogger(__name__)

_RECORD_FIELDS = tuple(f.name for f in dataclasses.fields(Record))
_WRITABLE_FIELDS = tuple(
    name for name in _RECORD_FIELDS if name not in ("id", "created_at", "updated_at")
)


class SqlStore(DirectoryStore):
    """Store backed by any SQLAlchemy asyncio dialect.

    PostgreSQL (``postgresql+asyncpg://``) in production, SQLite
    (``sqlite+aiosqlite://``) for tests and single-operator installs.
    Domain dataclasses are translated to/from ORM rows at the boundary.
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any) -> None:
        if url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url):
            # one shared connection, otherwise every session sees an empty DB
            engine_kwargs.setdefault("poolclass", StaticPool)
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        self._engine = create_async_engine(url, echo=echo, **engine_kwargs)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        self._scoped_session: AsyncSession | None = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> SqlStore:
        """Build from ``{"url": ...}`` or discrete Postgres settings."""
        url = config.get("url")
        if not url:
            url = (
                "postgresql+asyncpg://"
                f"{config.get('user', 'postgres')}:{config.get('password', 'postgres')}"
                f"@{config.get('host', 'localhost')}:{config.get('port', 5432)}"
                f"/{config.get('database', 'member_directory')}"
            )
            return cls(
                url,
                pool_size=config.get("pool_size", 10),
                max_overflow=config.get("max_overflow", 20),
            )
        return cls(url, echo=config.get("echo", False))

    @asynccontextmanager
    async def _auto_session(self) -> AsyncIterator[AsyncSession]:
        """Yield the scoped session if inside ``atomic()``, else a fresh
        auto-committing session that is closed after use."""
        if self._scoped_session is not None:
            yield self._scoped_session
            return
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @staticmethod
    @contextmanager
    def _translate_errors() -> Iterator[None]:
        """Map driver errors onto the store failure contract."""
        try:
            yield
        except (sa_exc.IntegrityError, sa_exc.DataError) as exc:
            raise WriteFailedException(str(exc.orig)) from exc
        except (sa_exc.OperationalError, sa_exc.InterfaceError, OSError) as exc:
            logger.error("Database unavailable: %s", exc)
            raise CollaboratorUnavailableError(str(exc)) from exc
        except sa_exc.StatementError as exc:
            # a value the dialect could not bind, e.g. a string in a Date column
            raise WriteFailedException(str(exc.orig)) from exc

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        with self._translate_errors():
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def reset(self) -> None:
        with self._translate_errors():
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        await self.init()

    async def close(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        session = self._session_factory()
        self._scoped_session = session
        try:
            yield
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
            self._scoped_session = None

    # ── Records ──────────────────────────────────────────────────────

    @staticmethod
    def _check(category: str, record: Record) -> None:
        if category not in {c.value for c in Category}:
            raise WriteFailedException(f"unknown category '{category}'")
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
        stmt = (
            select(RecordRow)
            .where(RecordRow.category == category)
            .order_by(RecordRow.created_at, RecordRow.id)
        )
        if branch_scope != ALL_BRANCHES:
            stmt = stmt.where(RecordRow.branch_id == branch_scope)
        with self._translate_errors():
            async with self._auto_session() as s:
                rows = list((await s.execute(stmt)).scalars().all())
        return [_record_from_orm(r) for r in rows]

    async def get_record(self, category: str, record_id: str) -> Record | None:
        with self._translate_errors():
            async with self._auto_session() as s:
                row = await s.get(RecordRow, record_id)
        if row is None or row.category != category:
            return None
        return _record_from_orm(row)

    async def write_record(self, category: str, record: Record) -> Record:
        self._check(category, record)
        now = datetime.now(UTC)
        with self._translate_errors():
            async with self._auto_session() as s:
                if record.id is None:
                    row = RecordRow(
                        **_writable_values(record),
                        id=generate_id(),
                        created_at=now,
                        updated_at=now,
                    )
                    s.add(row)
                else:
                    row = await s.get(RecordRow, record.id)
                    if row is None or row.category != category:
                        raise RecordNotFoundError(record.id)
                    for name, value in _writable_values(record).items():
                        setattr(row, name, value)
                    row.updated_at = now
                await s.flush()
                stored = _record_from_orm(row)
        return stored

    async def write_batch(self, category: str, records: list[Record]) -> int:
        for record in records:
            self._check(category, record)
            if record.id is not None:
                raise WriteFailedException(
                    f"batch writes only create records (got id {record.id})"
                )
        # explicit, strictly increasing timestamps keep input order on reload
        base = datetime.now(UTC)
        rows = [
            RecordRow(
                **_writable_values(record),
                id=generate_id(),
                created_at=base + timedelta(microseconds=i),
                updated_at=base,
            )
            for i, record in enumerate(records)
        ]
        with self._translate_errors():
            async with self._auto_session() as s:
                s.add_all(rows)
                await s.flush()
        return len(rows)

    async def delete_record(self, category: str, record_id: str) -> None:
        with self._translate_errors():
            async with self._auto_session() as s:
                row = await s.get(RecordRow, record_id)
                if row is None or row.category != category:
                    raise RecordNotFoundError(record_id)
                await s.delete(row)

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
        with self._translate_errors():
            async with self._auto_session() as s:
                record = await s.get(RecordRow, record_id)
                if record is None or record.category != category:
                    raise RecordNotFoundError(record_id)

                pending = await s.execute(
                    select(TransferRequestRow.id).where(
                        TransferRequestRow.record_id == record_id,
                        TransferRequestRow.status == TransferStatus.pending.value,
                    )
                )
                if pending.first() is not None:
                    raise WriteFailedException(
                        f"record {record_id} already has a pending transfer request"
                    )

                row = TransferRequestRow(
                    id=generate_id(),
                    created_at=datetime.now(UTC),
                    record_id=record_id,
                    category=category,
                    from_branch_id=from_branch_id,
                    to_branch_id=to_branch_id,
                    reason=reason,
                    notes=notes,
                    status=TransferStatus.pending.value,
                )
                s.add(row)
                await s.flush()
                request = _transfer_from_orm(row)
        return request

    async def list_transfer_requests(
        self,
        *,
        status: str | None = None,
    ) -> list[TransferRequest]:
        stmt = select(TransferRequestRow).order_by(TransferRequestRow.created_at)
        if status is not None:
            stmt = stmt.where(TransferRequestRow.status == status)
        with self._translate_errors():
            async with self._auto_session() as s:
                rows = list((await s.execute(stmt)).scalars().all())
        return [_transfer_from_orm(r) for r in rows]


# ── ORM ↔ domain mapping ────────────────────────────────────────────


def _writable_values(record: Record) -> dict[str, Any]:
    return {name: getattr(record, name) for name in _WRITABLE_FIELDS}


def _record_from_orm(row: RecordRow) -> Record:
    return Record(**{name: getattr(row, name) for name in _RECORD_FIELDS})


def _transfer_from_orm(row: TransferRequestRow) -> TransferRequest:
    return TransferRequest(
        id=row.id,
        record_id=row.record_id,
        category=row.category,
        from_branch_id=row.from_branch_id,
        to_branch_id=row.to_branch_id,
        reason=row.reason,
        notes=row.notes,
        status=row.status,
        created_at=row.created_at,
    )
