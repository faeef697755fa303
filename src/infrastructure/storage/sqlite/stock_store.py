"""
SQLite implementation of stock records and the movement log.

quantity >= 0 is enforced twice: apply_delta refuses negative results and
the stock_records table carries a CHECK constraint.
"""

from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.stock import (
    QUANTITY_EPSILON,
    MovementReason,
    MovementType,
    StockChange,
    StockMovement,
    StockRecord,
    StockShortage,
)
from src.core.exceptions import InsufficientStockError
from src.core.interfaces.stock_store import IMovementLog, IStockStore
from src.infrastructure.storage.sqlite.base import SQLiteStore
from src.infrastructure.storage.sqlite.connection import parse_timestamp

logger = get_logger(__name__)

_UPSERT_RECORD = """
    INSERT INTO stock_records (
        product_id, branch_id, quantity, minimum_threshold,
        created_at, updated_at
    ) VALUES (?, ?, ?, ?, ?, ?)
    ON CONFLICT (product_id, branch_id) DO UPDATE SET
        quantity = excluded.quantity,
        minimum_threshold = excluded.minimum_threshold,
        updated_at = excluded.updated_at
"""


class SQLiteStockStore(SQLiteStore, IStockStore):
    """SQLite implementation of per-branch stock records."""

    def __init__(
        self,
        conn: aiosqlite.Connection | None = None,
        default_minimum_threshold: float = 5.0,
    ):
        super().__init__(conn)
        self.default_minimum_threshold = default_minimum_threshold

    async def get_record(self, product_id: str, branch_id: str) -> StockRecord | None:
        """Get the stock record for a product at a branch."""
        async with self._reading() as conn:
            return await self._fetch(conn, product_id, branch_id)

    async def upsert_record(self, record: StockRecord) -> StockRecord:
        """Insert or replace quantity and threshold for (product, branch)."""
        now = datetime.utcnow()
        async with self._writing() as conn:
            await conn.execute(
                _UPSERT_RECORD,
                (
                    record.product_id,
                    record.branch_id,
                    record.quantity,
                    record.minimum_threshold,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            stored = await self._fetch(conn, record.product_id, record.branch_id)
        logger.info(
            "stock_record_upserted",
            product_id=record.product_id,
            branch_id=record.branch_id,
            quantity=record.quantity,
        )
        return stored or record

    async def apply_delta(
        self,
        product_id: str,
        branch_id: str,
        delta: float,
        floor_at_zero: bool = False,
        minimum_threshold: float | None = None,
    ) -> StockChange:
        """Add delta to a record, creating it at zero if missing."""
        async with self._writing(immediate=True) as conn:
            current = await self._fetch(conn, product_id, branch_id)
            if current is None:
                current = StockRecord(
                    product_id=product_id,
                    branch_id=branch_id,
                    quantity=0.0,
                    minimum_threshold=(
                        minimum_threshold
                        if minimum_threshold is not None
                        else self.default_minimum_threshold
                    ),
                )

            previous = current.quantity
            new_quantity = previous + delta
            if new_quantity < -QUANTITY_EPSILON and not floor_at_zero:
                raise InsufficientStockError(
                    [
                        StockShortage(
                            product_id=product_id,
                            branch_id=branch_id,
                            requested=-delta,
                            available=previous,
                        )
                    ]
                )
            new_quantity = max(0.0, new_quantity)

            now = datetime.utcnow()
            await conn.execute(
                _UPSERT_RECORD,
                (
                    product_id,
                    branch_id,
                    new_quantity,
                    current.minimum_threshold,
                    current.created_at.isoformat(),
                    now.isoformat(),
                ),
            )
            stored = await self._fetch(conn, product_id, branch_id)

        logger.debug(
            "stock_delta_applied",
            product_id=product_id,
            branch_id=branch_id,
            previous=previous,
            new=new_quantity,
        )
        return StockChange(previous_quantity=previous, record=stored)

    async def list_by_branch(self, branch_id: str) -> list[StockRecord]:
        """All stock records at a branch ordered by product."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_records WHERE branch_id = ? ORDER BY product_id",
                (branch_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    async def list_by_product(self, product_id: str) -> list[StockRecord]:
        """Stock of one product across all branches."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_records WHERE product_id = ? ORDER BY branch_id",
                (product_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    async def list_low_stock(self, branch_id: str) -> list[StockRecord]:
        """Records at or below their minimum threshold, largest deficit first."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_records
                WHERE branch_id = ? AND quantity <= minimum_threshold
                ORDER BY (minimum_threshold - quantity) DESC, product_id
                """,
                (branch_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    async def _fetch(
        self, conn: aiosqlite.Connection, product_id: str, branch_id: str
    ) -> StockRecord | None:
        cursor = await conn.execute(
            "SELECT * FROM stock_records WHERE product_id = ? AND branch_id = ?",
            (product_id, branch_id),
        )
        row = await cursor.fetchone()
        return self._row_to_record(row) if row else None

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> StockRecord:
        """Convert a database row to a StockRecord entity."""
        return StockRecord(
            id=row["id"],
            product_id=row["product_id"],
            branch_id=row["branch_id"],
            quantity=float(row["quantity"]),
            minimum_threshold=float(row["minimum_threshold"]),
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
            updated_at=parse_timestamp(row["updated_at"]) or datetime.utcnow(),
        )


class SQLiteMovementLog(SQLiteStore, IMovementLog):
    """Append-only stock movement ledger in SQLite."""

    async def append(self, movement: StockMovement) -> StockMovement:
        """Record a movement."""
        async with self._writing() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO stock_movements (
                    branch_id, product_id, movement_type, quantity,
                    previous_quantity, new_quantity, reason,
                    reference_type, reference_id, notes, acting_user_id,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.branch_id,
                    movement.product_id,
                    movement.movement_type.value,
                    movement.quantity,
                    movement.previous_quantity,
                    movement.new_quantity,
                    movement.reason.value,
                    movement.reference_type,
                    movement.reference_id,
                    movement.notes,
                    movement.acting_user_id,
                    movement.created_at.isoformat(),
                ),
            )
            movement.id = cursor.lastrowid
        logger.info(
            "stock_movement_recorded",
            movement_id=movement.id,
            branch_id=movement.branch_id,
            product_id=movement.product_id,
            type=movement.movement_type.value,
            qty=movement.quantity,
        )
        return movement

    async def list_by_branch(
        self,
        branch_id: str,
        movement_type: MovementType | None = None,
        limit: int = 100,
    ) -> list[StockMovement]:
        """Movements at a branch, newest first."""
        query = "SELECT * FROM stock_movements WHERE branch_id = ?"
        params: list = [branch_id]
        if movement_type is not None:
            query += " AND movement_type = ?"
            params.append(movement_type.value)
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)

        async with self._reading() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_by_product(
        self, product_id: str, limit: int = 200
    ) -> list[StockMovement]:
        """Movements of one product across branches, newest first."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                WHERE product_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (product_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_by_reference(
        self, reference_type: str, reference_id: str
    ) -> list[StockMovement]:
        """Movements caused by one business document, in insertion order."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                WHERE reference_type = ? AND reference_id = ?
                ORDER BY id
                """,
                (reference_type, reference_id),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        """Convert a database row to a StockMovement entity."""
        return StockMovement(
            id=row["id"],
            branch_id=row["branch_id"],
            product_id=row["product_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity=float(row["quantity"]),
            previous_quantity=float(row["previous_quantity"]),
            new_quantity=float(row["new_quantity"]),
            reason=MovementReason(row["reason"]),
            reference_type=row["reference_type"],
            reference_id=row["reference_id"],
            notes=row["notes"],
            acting_user_id=row["acting_user_id"],
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
        )
