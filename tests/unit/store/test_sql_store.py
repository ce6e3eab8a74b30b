from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import inspect

from member_directory.core.exceptions import (
    CollaboratorUnavailableError,
    WriteFailedException,
)
from member_directory.store.sql import SqlStore
from tests.conftest import make_member


async def test_init_creates_tables(sql_store: SqlStore) -> None:
    async with sql_store._engine.connect() as conn:
        names = await conn.run_sync(lambda c: inspect(c).get_table_names())
    assert {"records", "transfer_requests"} <= set(names)


async def test_atomic_rolls_back_on_error(sql_store: SqlStore) -> None:
    with pytest.raises(RuntimeError):
        async with sql_store.atomic():
            await sql_store.write_record("member", make_member("Ann"))
            raise RuntimeError("boom")

    assert await sql_store.query_records("member") == []


async def test_atomic_commits_once(sql_store: SqlStore) -> None:
    async with sql_store.atomic():
        await sql_store.write_record("member", make_member("Ann"))
        await sql_store.write_record("member", make_member("Kofi"))

    assert len(await sql_store.query_records("member")) == 2


async def test_dates_round_trip(sql_store: SqlStore) -> None:
    created = await sql_store.write_record(
        "member", make_member("Ann", date_of_birth=date(1990, 5, 17))
    )
    fetched = await sql_store.get_record("member", created.id)
    assert fetched is not None
    assert fetched.date_of_birth == date(1990, 5, 17)


async def test_unbindable_value_is_a_write_failure(sql_store: SqlStore) -> None:
    with pytest.raises(WriteFailedException):
        await sql_store.write_record(
            "member", make_member("Ann", date_of_birth="1990-01-01")
        )

    assert await sql_store.query_records("member") == []


async def test_unreachable_database_is_fatal(tmp_path: Path) -> None:
    missing = tmp_path / "no-such-dir" / "directory.db"
    store = SqlStore(f"sqlite+aiosqlite:///{missing}")
    try:
        with pytest.raises(CollaboratorUnavailableError):
            await store.init()
    finally:
        await store.close()


def test_from_config_with_url() -> None:
    store = SqlStore.from_config({"url": "sqlite+aiosqlite://"})
    assert isinstance(store, SqlStore)
    assert store._engine.url.drivername == "sqlite+aiosqlite"
