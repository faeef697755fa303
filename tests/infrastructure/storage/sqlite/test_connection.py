"""Unit tests for SQLite connection pool."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.infrastructure.storage.sqlite import connection as conn_module
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
    parse_timestamp,
)


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool._initialized is False
        assert pool.available == 0


class TestConnectionPoolLifecycle:
    """Tests for initialize / acquire / transaction / close."""

    async def test_initialize_creates_directory(self, tmp_path: Path):
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        assert pool.available == 1
        await pool.close()

    async def test_connections_use_wal_and_foreign_keys(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.acquire() as conn:
            cursor = await conn.execute("PRAGMA journal_mode")
            assert (await cursor.fetchone())[0] == "wal"
            cursor = await conn.execute("PRAGMA foreign_keys")
            assert (await cursor.fetchone())[0] == 1
        await pool.close()

    async def test_acquire_returns_connection_to_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        async with pool.acquire():
            assert pool.available == 1
        assert pool.available == 2
        await pool.close()

    async def test_transaction_commits(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")
            await conn.execute("INSERT INTO t VALUES (1)")

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 1
        await pool.close()

    async def test_immediate_transaction_rolls_back(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")

        with pytest.raises(ValueError):
            async with pool.transaction(immediate=True) as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                raise ValueError("boom")

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 0
        await pool.close()

    async def test_close_resets_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()
        await pool.close()
        assert pool._initialized is False
        assert pool.available == 0


class TestGlobalPool:
    async def test_get_pool_uses_settings(self, temp_db_path: Path):
        settings = MagicMock()
        settings.storage.db_path = temp_db_path
        settings.storage.pool_size = 1
        settings.storage.busy_timeout = 1000
        conn_module._pool = None

        with patch.object(conn_module, "get_settings", return_value=settings):
            pool = await get_pool()
            assert pool.db_path == temp_db_path
            assert await get_pool() is pool

        await close_pool()
        assert conn_module._pool is None


class TestParseTimestamp:
    def test_parses_iso(self):
        assert parse_timestamp("2024-01-02T03:04:05").year == 2024

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_tolerates_bad_values(self, value):
        assert parse_timestamp(value) is None
