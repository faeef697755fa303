"""
SQLite implementation of transfer request storage.

Items live in transfer_items and are written once at creation. Updates
use the version column for optimistic concurrency.
"""

import json
from datetime import datetime
from uuid import uuid4

import aiosqlite

from src.config import get_logger
from src.core.entities.transfer import TransferItem, TransferRequest, TransferStatus
from src.core.exceptions import (
    ConcurrentModificationError,
    PersistenceError,
    TransferNotFoundError,
)
from src.core.interfaces.transfer_store import ITransferStore, TransferDirection
from src.infrastructure.storage.sqlite.base import SQLiteStore
from src.infrastructure.storage.sqlite.connection import parse_timestamp

logger = get_logger(__name__)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class SQLiteTransferStore(SQLiteStore, ITransferStore):
    """SQLite implementation of transfer storage."""

    async def create(self, transfer: TransferRequest) -> TransferRequest:
        """Persist a new transfer with its item snapshot."""
        if transfer.id is None:
            transfer.id = uuid4().hex
        transfer.version = 1
        transfer.updated_at = datetime.utcnow()

        async with self._writing() as conn:
            await conn.execute(
                """
                INSERT INTO transfers (
                    id, source_branch_id, destination_branch_id, reason,
                    requesting_user_id, status, requested_at,
                    decided_at, deciding_user_id, rejection_reason,
                    returned_quantities_json, cancelled, cancellation_reason,
                    cancelled_at, cancelling_user_id, version, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transfer.id,
                    transfer.source_branch_id,
                    transfer.destination_branch_id,
                    transfer.reason,
                    transfer.requesting_user_id,
                    transfer.status.value,
                    transfer.requested_at.isoformat(),
                    _iso(transfer.decided_at),
                    transfer.deciding_user_id,
                    transfer.rejection_reason,
                    json.dumps(transfer.returned_quantities),
                    1 if transfer.cancelled else 0,
                    transfer.cancellation_reason,
                    _iso(transfer.cancelled_at),
                    transfer.cancelling_user_id,
                    transfer.version,
                    transfer.updated_at.isoformat(),
                ),
            )
            await conn.executemany(
                """
                INSERT INTO transfer_items (
                    transfer_id, position, product_id, requested_quantity
                ) VALUES (?, ?, ?, ?)
                """,
                [
                    (transfer.id, position, item.product_id, item.requested_quantity)
                    for position, item in enumerate(transfer.items)
                ],
            )

        logger.info(
            "transfer_stored",
            transfer_id=transfer.id,
            items=len(transfer.items),
        )
        return transfer

    async def get(self, transfer_id: str) -> TransferRequest | None:
        """Get transfer by ID with its items."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM transfers WHERE id = ?", (transfer_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            items = await self._load_items(conn, [transfer_id])
            return self._row_to_transfer(row, items.get(transfer_id, []))

    async def update(self, transfer: TransferRequest) -> TransferRequest:
        """Save mutable fields if nobody else has written since transfer was read."""
        expected = transfer.version
        now = datetime.utcnow()

        async with self._writing() as conn:
            cursor = await conn.execute(
                """
                UPDATE transfers SET
                    status = ?,
                    decided_at = ?,
                    deciding_user_id = ?,
                    rejection_reason = ?,
                    returned_quantities_json = ?,
                    cancelled = ?,
                    cancellation_reason = ?,
                    cancelled_at = ?,
                    cancelling_user_id = ?,
                    version = version + 1,
                    updated_at = ?
                WHERE id = ? AND version = ?
                """,
                (
                    transfer.status.value,
                    _iso(transfer.decided_at),
                    transfer.deciding_user_id,
                    transfer.rejection_reason,
                    json.dumps(transfer.returned_quantities),
                    1 if transfer.cancelled else 0,
                    transfer.cancellation_reason,
                    _iso(transfer.cancelled_at),
                    transfer.cancelling_user_id,
                    now.isoformat(),
                    transfer.id,
                    expected,
                ),
            )
            if cursor.rowcount == 0:
                exists = await conn.execute(
                    "SELECT 1 FROM transfers WHERE id = ?", (transfer.id,)
                )
                if await exists.fetchone() is None:
                    raise TransferNotFoundError(transfer.id or "")
                raise ConcurrentModificationError(transfer.id or "", expected)

        transfer.version = expected + 1
        transfer.updated_at = now
        logger.info(
            "transfer_updated",
            transfer_id=transfer.id,
            status=transfer.status.value,
            version=transfer.version,
        )
        return transfer

    async def list_transfers(
        self,
        status: TransferStatus | None = None,
        branch_id: str | None = None,
        direction: TransferDirection = "both",
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransferRequest]:
        """List transfers, newest request first."""
        clauses: list[str] = []
        params: list = []
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if branch_id is not None:
            if direction == "outgoing":
                clauses.append("source_branch_id = ?")
                params.append(branch_id)
            elif direction == "incoming":
                clauses.append("destination_branch_id = ?")
                params.append(branch_id)
            else:
                clauses.append("(source_branch_id = ? OR destination_branch_id = ?)")
                params.extend([branch_id, branch_id])

        query = "SELECT * FROM transfers"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY requested_at DESC, id LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        async with self._reading() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            items = await self._load_items(conn, [row["id"] for row in rows])
            return [self._row_to_transfer(row, items.get(row["id"], [])) for row in rows]

    @staticmethod
    async def _load_items(
        conn: aiosqlite.Connection, transfer_ids: list[str]
    ) -> dict[str, list[TransferItem]]:
        if not transfer_ids:
            return {}
        placeholders = ",".join("?" for _ in transfer_ids)
        cursor = await conn.execute(
            f"""
            SELECT transfer_id, product_id, requested_quantity
            FROM transfer_items
            WHERE transfer_id IN ({placeholders})
            ORDER BY transfer_id, position
            """,
            transfer_ids,
        )
        grouped: dict[str, list[TransferItem]] = {}
        for row in await cursor.fetchall():
            grouped.setdefault(row["transfer_id"], []).append(
                TransferItem(
                    product_id=row["product_id"],
                    requested_quantity=float(row["requested_quantity"]),
                )
            )
        return grouped

    @staticmethod
    def _row_to_transfer(row: aiosqlite.Row, items: list[TransferItem]) -> TransferRequest:
        """Convert a transfers row plus its items to a TransferRequest entity."""
        returned: dict[str, float] = {}
        if row["returned_quantities_json"]:
            try:
                returned = {
                    k: float(v) for k, v in json.loads(row["returned_quantities_json"]).items()
                }
            except (ValueError, TypeError, AttributeError) as e:
                logger.error("transfer_returns_unreadable", transfer_id=row["id"], error=str(e))
                raise PersistenceError(
                    "load transfer", f"returned quantities of {row['id']} are unreadable"
                ) from e

        return TransferRequest(
            id=row["id"],
            source_branch_id=row["source_branch_id"],
            destination_branch_id=row["destination_branch_id"],
            items=items,
            reason=row["reason"],
            requesting_user_id=row["requesting_user_id"],
            status=TransferStatus(row["status"]),
            requested_at=parse_timestamp(row["requested_at"]) or datetime.utcnow(),
            decided_at=parse_timestamp(row["decided_at"]),
            deciding_user_id=row["deciding_user_id"],
            rejection_reason=row["rejection_reason"],
            returned_quantities=returned,
            cancelled=bool(row["cancelled"]),
            cancellation_reason=row["cancellation_reason"],
            cancelled_at=parse_timestamp(row["cancelled_at"]),
            cancelling_user_id=row["cancelling_user_id"],
            version=row["version"],
            updated_at=parse_timestamp(row["updated_at"]) or datetime.utcnow(),
        )
