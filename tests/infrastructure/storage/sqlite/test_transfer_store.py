"""Tests for SQLite transfer and branch stores."""

from datetime import datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest

from src.core.entities.branch import Branch
from src.core.entities.transfer import TransferItem, TransferRequest, TransferStatus
from src.core.exceptions import (
    ConcurrentModificationError,
    PersistenceError,
    TransferNotFoundError,
    ValidationError,
)
from src.infrastructure.storage.sqlite import SQLiteBranchStore, SQLiteTransferStore


def _transfer(source: str = "A", destination: str = "B", **overrides) -> TransferRequest:
    data = {
        "source_branch_id": source,
        "destination_branch_id": destination,
        "items": [
            TransferItem(product_id="P", requested_quantity=10),
            TransferItem(product_id="Q", requested_quantity=2.5),
        ],
        "reason": "Restock",
        "requesting_user_id": "u1",
    }
    data.update(overrides)
    return TransferRequest(**data)


class TestSQLiteBranchStore:
    async def test_get_branch(self, branch_store: SQLiteBranchStore):
        branch = await branch_store.get_branch("A")
        assert branch is not None
        assert branch.name == "Central"
        assert branch.is_active is True

    async def test_get_missing_branch(self, branch_store: SQLiteBranchStore):
        assert await branch_store.get_branch("Z") is None

    async def test_duplicate_id_rejected(self, branch_store: SQLiteBranchStore):
        with pytest.raises(ValidationError):
            await branch_store.create_branch(Branch(id="A", name="Again"))

    async def test_list_hides_inactive(self, branch_store: SQLiteBranchStore):
        await branch_store.create_branch(Branch(id="C", name="Closed", is_active=False))

        active = await branch_store.list_branches()
        everything = await branch_store.list_branches(include_inactive=True)

        assert [b.id for b in active] == ["A", "B"]
        assert {b.id for b in everything} == {"A", "B", "C"}


class TestSQLiteTransferStore:
    async def test_create_and_get_round_trip(self, transfer_store: SQLiteTransferStore):
        created = await transfer_store.create(_transfer())

        assert created.id is not None
        assert created.version == 1

        loaded = await transfer_store.get(created.id)
        assert loaded is not None
        assert loaded.status == TransferStatus.PENDING
        assert [i.product_id for i in loaded.items] == ["P", "Q"]
        assert loaded.items[1].requested_quantity == 2.5
        assert loaded.returned_quantities == {}
        assert loaded.version == 1

    async def test_get_missing(self, transfer_store: SQLiteTransferStore):
        assert await transfer_store.get("missing") is None

    async def test_update_persists_state_and_bumps_version(
        self, transfer_store: SQLiteTransferStore
    ):
        transfer = await transfer_store.create(_transfer())
        transfer.approve("boss")
        transfer.apply_returns([("P", 3)])

        updated = await transfer_store.update(transfer)
        loaded = await transfer_store.get(transfer.id)

        assert updated.version == 2
        assert loaded.version == 2
        assert loaded.status == TransferStatus.APPROVED
        assert loaded.deciding_user_id == "boss"
        assert loaded.decided_at is not None
        assert loaded.returned_quantities == {"P": 3.0}

    async def test_stale_update_rejected(self, transfer_store: SQLiteTransferStore):
        created = await transfer_store.create(_transfer())
        first = await transfer_store.get(created.id)
        second = await transfer_store.get(created.id)

        first.reject("boss")
        await transfer_store.update(first)

        second.approve("other")
        with pytest.raises(ConcurrentModificationError):
            await transfer_store.update(second)

        loaded = await transfer_store.get(created.id)
        assert loaded.status == TransferStatus.REJECTED

    async def test_update_missing_transfer(self, transfer_store: SQLiteTransferStore):
        with pytest.raises(TransferNotFoundError):
            await transfer_store.update(_transfer(id="missing", version=1))

    async def test_unreadable_returned_quantities_fail_loudly(
        self, transfer_store: SQLiteTransferStore, initialized_db: Path
    ):
        transfer = await transfer_store.create(_transfer())
        async with aiosqlite.connect(initialized_db) as conn:
            await conn.execute(
                "UPDATE transfers SET returned_quantities_json = ? WHERE id = ?",
                ("{bad", transfer.id),
            )
            await conn.commit()

        with pytest.raises(PersistenceError) as exc_info:
            await transfer_store.get(transfer.id)
        assert exc_info.value.details["operation"] == "load transfer"

    async def test_cancellation_fields_round_trip(self, transfer_store: SQLiteTransferStore):
        transfer = await transfer_store.create(_transfer())
        transfer.approve("boss")
        transfer = await transfer_store.update(transfer)
        transfer.cancel("boss", "wrong branch")
        await transfer_store.update(transfer)

        loaded = await transfer_store.get(transfer.id)
        assert loaded.cancelled is True
        assert loaded.status == TransferStatus.CANCELLED
        assert loaded.cancellation_reason == "wrong branch"
        assert loaded.cancelled_at is not None

    async def test_list_filters(self, transfer_store: SQLiteTransferStore):
        now = datetime.utcnow()
        outgoing = await transfer_store.create(_transfer(requested_at=now - timedelta(hours=2)))
        incoming = await transfer_store.create(_transfer("B", "A", requested_at=now))
        incoming.reject("boss")
        await transfer_store.update(incoming)

        everything = await transfer_store.list_transfers()
        pending = await transfer_store.list_transfers(status=TransferStatus.PENDING)
        out_of_a = await transfer_store.list_transfers(branch_id="A", direction="outgoing")
        into_a = await transfer_store.list_transfers(branch_id="A", direction="incoming")
        both = await transfer_store.list_transfers(branch_id="A")

        assert [t.id for t in everything] == [incoming.id, outgoing.id]
        assert [t.id for t in pending] == [outgoing.id]
        assert [t.id for t in out_of_a] == [outgoing.id]
        assert [t.id for t in into_a] == [incoming.id]
        assert len(both) == 2
        assert all(len(t.items) == 2 for t in both)

    async def test_list_pagination(self, transfer_store: SQLiteTransferStore):
        now = datetime.utcnow()
        for hours in range(3):
            await transfer_store.create(_transfer(requested_at=now - timedelta(hours=hours)))

        page = await transfer_store.list_transfers(limit=2, offset=1)

        assert len(page) == 2
