"""SQLite storage implementations."""

from src.config import get_settings
from src.infrastructure.storage.sqlite.branch_store import SQLiteBranchStore
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.stock_store import SQLiteMovementLog, SQLiteStockStore
from src.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore
from src.infrastructure.storage.sqlite.unit_of_work import SQLiteUnitOfWork

# Aliases used by the API lifespan
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_branch_store: SQLiteBranchStore | None = None
_stock_store: SQLiteStockStore | None = None
_movement_log: SQLiteMovementLog | None = None
_transfer_store: SQLiteTransferStore | None = None


async def get_branch_store() -> SQLiteBranchStore:
    """Get singleton branch store instance."""
    global _branch_store
    if _branch_store is None:
        _branch_store = SQLiteBranchStore()
    return _branch_store


async def get_stock_store() -> SQLiteStockStore:
    """Get singleton stock store instance."""
    global _stock_store
    if _stock_store is None:
        _stock_store = SQLiteStockStore(
            default_minimum_threshold=get_settings().stock.default_minimum_threshold
        )
    return _stock_store


async def get_movement_log() -> SQLiteMovementLog:
    """Get singleton movement log instance."""
    global _movement_log
    if _movement_log is None:
        _movement_log = SQLiteMovementLog()
    return _movement_log


async def get_transfer_store() -> SQLiteTransferStore:
    """Get singleton transfer store instance."""
    global _transfer_store
    if _transfer_store is None:
        _transfer_store = SQLiteTransferStore()
    return _transfer_store


def create_unit_of_work() -> SQLiteUnitOfWork:
    """Fresh unit of work; each one is single-use."""
    return SQLiteUnitOfWork(
        default_minimum_threshold=get_settings().stock.default_minimum_threshold
    )


def reset_stores() -> None:
    """Drop store singletons (for testing)."""
    global _branch_store, _stock_store, _movement_log, _transfer_store
    _branch_store = None
    _stock_store = None
    _movement_log = None
    _transfer_store = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLiteBranchStore",
    "SQLiteStockStore",
    "SQLiteMovementLog",
    "SQLiteTransferStore",
    "SQLiteUnitOfWork",
    # Factory functions
    "get_branch_store",
    "get_stock_store",
    "get_movement_log",
    "get_transfer_store",
    "create_unit_of_work",
    "reset_stores",
]
