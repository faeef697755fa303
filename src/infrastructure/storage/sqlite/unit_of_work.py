"""SQLite unit of work: one pooled connection, one BEGIN IMMEDIATE transaction."""

from contextlib import AbstractAsyncContextManager
from types import TracebackType

import aiosqlite

from src.config import get_logger
from src.core.exceptions import PersistenceError
from src.core.interfaces.unit_of_work import IUnitOfWork
from src.infrastructure.storage.sqlite.branch_store import SQLiteBranchStore
from src.infrastructure.storage.sqlite.connection import get_pool
from src.infrastructure.storage.sqlite.stock_store import SQLiteMovementLog, SQLiteStockStore
from src.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore

logger = get_logger(__name__)


class SQLiteUnitOfWork(IUnitOfWork):
    """
    Binds all stores to a single write transaction.

    The write lock is taken on entry, so concurrent units of work touching
    the same stock records run one after another. sqlite errors raised
    inside the block, or while committing, surface as PersistenceError
    after the rollback.
    """

    def __init__(self, default_minimum_threshold: float = 5.0):
        self.default_minimum_threshold = default_minimum_threshold
        self._tx: AbstractAsyncContextManager[aiosqlite.Connection] | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        if self._tx is not None:
            raise RuntimeError("Unit of work is already active")

        pool = await get_pool()
        tx = pool.transaction(immediate=True)
        try:
            conn = await tx.__aenter__()
        except aiosqlite.Error as e:
            logger.error("unit_of_work_begin_failed", error=str(e))
            raise PersistenceError("begin transaction", str(e)) from e

        self._tx = tx
        self.branches = SQLiteBranchStore(conn)
        self.stock = SQLiteStockStore(
            conn, default_minimum_threshold=self.default_minimum_threshold
        )
        self.movements = SQLiteMovementLog(conn)
        self.transfers = SQLiteTransferStore(conn)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        tx, self._tx = self._tx, None
        if tx is None:
            return

        try:
            await tx.__aexit__(exc_type, exc, tb)
        except aiosqlite.Error as e:
            stage = "commit" if exc is None else "rollback"
            logger.error("unit_of_work_failed", stage=stage, error=str(e))
            raise PersistenceError(stage, str(e)) from e

        if isinstance(exc, aiosqlite.Error):
            logger.error("unit_of_work_rolled_back", error=str(exc), exc_info=exc)
            raise PersistenceError("write", str(exc)) from exc
