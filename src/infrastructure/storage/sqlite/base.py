"""Shared plumbing for SQLite stores."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction


class SQLiteStore:
    """
    Base class for stores that may be bound to a unit of work.

    Unbound stores borrow a pooled connection per call and commit their own
    writes. Bound stores run every statement on the unit of work's
    connection and leave commit/rollback to it.
    """

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    @property
    def is_bound(self) -> bool:
        return self._conn is not None

    @asynccontextmanager
    async def _reading(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is not None:
            yield self._conn
        else:
            async with get_connection() as conn:
                yield conn

    @asynccontextmanager
    async def _writing(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is not None:
            yield self._conn
        else:
            async with get_transaction(immediate=immediate) as conn:
                yield conn
