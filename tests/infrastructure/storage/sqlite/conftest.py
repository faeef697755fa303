"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from src.core.entities.branch import Branch
from src.infrastructure.storage.sqlite import (
    SQLiteBranchStore,
    SQLiteMovementLog,
    SQLiteStockStore,
    SQLiteTransferStore,
    reset_stores,
)
from src.infrastructure.storage.sqlite import connection as conn_module
from src.infrastructure.storage.sqlite.connection import ConnectionPool, close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> AsyncGenerator[Path, None]:
    """Migrated database wired in as the global pool."""
    await initialize_database(temp_db_path)

    conn_module._pool = ConnectionPool(temp_db_path, pool_size=3, busy_timeout=5000)
    reset_stores()
    yield temp_db_path
    await close_pool()
    reset_stores()


@pytest.fixture
async def branch_store(initialized_db: Path) -> SQLiteBranchStore:
    store = SQLiteBranchStore()
    await store.create_branch(Branch(id="A", name="Central"))
    await store.create_branch(Branch(id="B", name="North"))
    return store


@pytest.fixture
def stock_store(branch_store: SQLiteBranchStore) -> SQLiteStockStore:
    return SQLiteStockStore(default_minimum_threshold=5.0)


@pytest.fixture
def movement_log(branch_store: SQLiteBranchStore) -> SQLiteMovementLog:
    return SQLiteMovementLog()


@pytest.fixture
def transfer_store(branch_store: SQLiteBranchStore) -> SQLiteTransferStore:
    return SQLiteTransferStore()
