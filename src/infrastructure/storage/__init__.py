"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteBranchStore,
    SQLiteMovementLog,
    SQLiteStockStore,
    SQLiteTransferStore,
    SQLiteUnitOfWork,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteBranchStore",
    "SQLiteStockStore",
    "SQLiteMovementLog",
    "SQLiteTransferStore",
    "SQLiteUnitOfWork",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
