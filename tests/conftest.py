"""Pytest configuration and fixtures."""

import asyncio
import copy
from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from types import TracebackType
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.main import app
from src.config import StockSettings
from src.core.entities import (
    Branch,
    MovementType,
    StockChange,
    StockMovement,
    StockRecord,
    StockShortage,
    TransferRequest,
    TransferStatus,
)
from src.core.exceptions import (
    ConcurrentModificationError,
    InsufficientStockError,
    PersistenceError,
    TransferNotFoundError,
    ValidationError,
)
from src.core.interfaces import (
    IBranchStore,
    IMovementLog,
    IStockStore,
    ITransferStore,
    IUnitOfWork,
)


# In-memory stores sharing one state dict, so a unit of work can snapshot
# and restore everything at once.


class MemoryState:
    def __init__(self) -> None:
        self.branches: dict[str, Branch] = {}
        self.records: dict[tuple[str, str], StockRecord] = {}
        self.movements: list[StockMovement] = []
        self.transfers: dict[str, TransferRequest] = {}

    def snapshot(self) -> dict:
        return copy.deepcopy(self.__dict__)

    def restore(self, snapshot: dict) -> None:
        self.__dict__.update(snapshot)


class MemoryBranchStore(IBranchStore):
    def __init__(self, state: MemoryState):
        self.state = state

    async def create_branch(self, branch: Branch) -> Branch:
        if branch.id in self.state.branches:
            raise ValidationError("id", "Branch already exists", branch.id)
        self.state.branches[branch.id] = branch.model_copy()
        return branch

    async def get_branch(self, branch_id: str) -> Branch | None:
        branch = self.state.branches.get(branch_id)
        return branch.model_copy() if branch else None

    async def list_branches(self, include_inactive: bool = False) -> list[Branch]:
        return [
            b.model_copy()
            for b in self.state.branches.values()
            if include_inactive or b.is_active
        ]


class MemoryStockStore(IStockStore):
    def __init__(self, state: MemoryState, default_minimum_threshold: float = 5.0):
        self.state = state
        self.default_minimum_threshold = default_minimum_threshold

    async def get_record(self, product_id: str, branch_id: str) -> StockRecord | None:
        record = self.state.records.get((product_id, branch_id))
        return record.model_copy() if record else None

    async def upsert_record(self, record: StockRecord) -> StockRecord:
        stored = record.model_copy(update={"updated_at": datetime.utcnow()})
        self.state.records[(record.product_id, record.branch_id)] = stored
        return stored.model_copy()

    async def apply_delta(
        self,
        product_id: str,
        branch_id: str,
        delta: float,
        floor_at_zero: bool = False,
        minimum_threshold: float | None = None,
    ) -> StockChange:
        key = (product_id, branch_id)
        current = self.state.records.get(key) or StockRecord(
            product_id=product_id,
            branch_id=branch_id,
            minimum_threshold=(
                minimum_threshold
                if minimum_threshold is not None
                else self.default_minimum_threshold
            ),
        )
        previous = current.quantity
        new_quantity = previous + delta
        if new_quantity < 0 and not floor_at_zero:
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
        stored = current.model_copy(update={"quantity": max(0.0, new_quantity)})
        self.state.records[key] = stored
        return StockChange(previous_quantity=previous, record=stored.model_copy())

    async def list_by_branch(self, branch_id: str) -> list[StockRecord]:
        return sorted(
            (r for r in self.state.records.values() if r.branch_id == branch_id),
            key=lambda r: r.product_id,
        )

    async def list_by_product(self, product_id: str) -> list[StockRecord]:
        return sorted(
            (r for r in self.state.records.values() if r.product_id == product_id),
            key=lambda r: r.branch_id,
        )

    async def list_low_stock(self, branch_id: str) -> list[StockRecord]:
        low = [r for r in await self.list_by_branch(branch_id) if r.is_low]
        return sorted(low, key=lambda r: r.deficit, reverse=True)


class MemoryMovementLog(IMovementLog):
    def __init__(self, state: MemoryState):
        self.state = state

    async def append(self, movement: StockMovement) -> StockMovement:
        movement.id = len(self.state.movements) + 1
        self.state.movements.append(movement.model_copy())
        return movement

    async def list_by_branch(
        self,
        branch_id: str,
        movement_type: MovementType | None = None,
        limit: int = 100,
    ) -> list[StockMovement]:
        found = [
            m
            for m in reversed(self.state.movements)
            if m.branch_id == branch_id
            and (movement_type is None or m.movement_type == movement_type)
        ]
        return found[:limit]

    async def list_by_product(self, product_id: str, limit: int = 200) -> list[StockMovement]:
        return [m for m in reversed(self.state.movements) if m.product_id == product_id][:limit]

    async def list_by_reference(
        self, reference_type: str, reference_id: str
    ) -> list[StockMovement]:
        return [
            m
            for m in self.state.movements
            if m.reference_type == reference_type and m.reference_id == reference_id
        ]


class MemoryTransferStore(ITransferStore):
    def __init__(self, state: MemoryState):
        self.state = state

    async def create(self, transfer: TransferRequest) -> TransferRequest:
        if transfer.id is None:
            transfer.id = uuid4().hex
        transfer.version = 1
        self.state.transfers[transfer.id] = transfer.model_copy(deep=True)
        return transfer

    async def get(self, transfer_id: str) -> TransferRequest | None:
        transfer = self.state.transfers.get(transfer_id)
        return transfer.model_copy(deep=True) if transfer else None

    async def update(self, transfer: TransferRequest) -> TransferRequest:
        stored = self.state.transfers.get(transfer.id or "")
        if stored is None:
            raise TransferNotFoundError(transfer.id or "")
        if stored.version != transfer.version:
            raise ConcurrentModificationError(transfer.id or "", transfer.version)
        transfer.version += 1
        self.state.transfers[transfer.id] = transfer.model_copy(deep=True)
        return transfer

    async def list_transfers(
        self,
        status: TransferStatus | None = None,
        branch_id: str | None = None,
        direction: str = "both",
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransferRequest]:
        def matches(t: TransferRequest) -> bool:
            if status is not None and t.status != status:
                return False
            if branch_id is None:
                return True
            if direction == "outgoing":
                return t.source_branch_id == branch_id
            if direction == "incoming":
                return t.destination_branch_id == branch_id
            return branch_id in (t.source_branch_id, t.destination_branch_id)

        found = sorted(
            (t for t in self.state.transfers.values() if matches(t)),
            key=lambda t: t.requested_at,
            reverse=True,
        )
        return found[offset : offset + limit]


class MemoryUnitOfWork(IUnitOfWork):
    """
    Serialized, all-or-nothing unit of work over MemoryState.

    fail_on_append makes the n-th movement append raise PersistenceError,
    which exercises rollback.
    """

    def __init__(self, state: MemoryState, lock: asyncio.Lock, fail_on_append: int | None = None):
        self.state = state
        self.lock = lock
        self.fail_on_append = fail_on_append
        self.branches = MemoryBranchStore(state)
        self.stock = MemoryStockStore(state)
        self.movements = MemoryMovementLog(state)
        self.transfers = MemoryTransferStore(state)
        self._snapshot: dict | None = None

        if fail_on_append is not None:
            original = self.movements.append
            calls = {"n": 0}

            async def failing_append(movement: StockMovement) -> StockMovement:
                calls["n"] += 1
                if calls["n"] == fail_on_append:
                    raise PersistenceError("write", "disk I/O error")
                return await original(movement)

            self.movements.append = failing_append  # type: ignore[method-assign]

    async def __aenter__(self) -> "MemoryUnitOfWork":
        await self.lock.acquire()
        self._snapshot = self.state.snapshot()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc is not None and self._snapshot is not None:
                self.state.restore(self._snapshot)
        finally:
            self._snapshot = None
            self.lock.release()


class MemoryBackend:
    """State plus a unit of work factory for use case tests."""

    def __init__(self) -> None:
        self.state = MemoryState()
        self.lock = asyncio.Lock()
        self.fail_on_append: int | None = None

    def unit_of_work(self) -> MemoryUnitOfWork:
        uow = MemoryUnitOfWork(self.state, self.lock, self.fail_on_append)
        # Only the next unit of work fails
        self.fail_on_append = None
        return uow

    def stores(self) -> MemoryUnitOfWork:
        """Stores outside any transaction, for read endpoints."""
        return MemoryUnitOfWork(self.state, self.lock)

    def add_branch(self, branch_id: str, is_active: bool = True) -> Branch:
        branch = Branch(id=branch_id, name=f"Branch {branch_id}", is_active=is_active)
        self.state.branches[branch_id] = branch
        return branch

    def set_stock(self, branch_id: str, product_id: str, quantity: float) -> StockRecord:
        record = StockRecord(product_id=product_id, branch_id=branch_id, quantity=quantity)
        self.state.records[(product_id, branch_id)] = record
        return record

    def quantity(self, branch_id: str, product_id: str) -> float | None:
        record = self.state.records.get((product_id, branch_id))
        return record.quantity if record else None


@pytest.fixture
def stock_settings() -> StockSettings:
    """Stock settings independent of the environment."""
    return StockSettings(
        default_minimum_threshold=5.0,
        system_user_id="system",
    )


@pytest.fixture
def backend() -> MemoryBackend:
    """In-memory backend with branches A and B."""
    memory = MemoryBackend()
    memory.add_branch("A")
    memory.add_branch("B")
    return memory


@pytest.fixture
def uow_factory(backend: MemoryBackend) -> Callable[[], MemoryUnitOfWork]:
    return backend.unit_of_work


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def sample_transfer_data() -> dict:
    """Sample transfer creation body."""
    return {
        "source_branch_id": "A",
        "destination_branch_id": "B",
        "items": [
            {"product_id": "P1", "quantity": 10},
            {"product_id": "P2", "quantity": 5},
        ],
        "reason": "Restock branch B",
        "requesting_user_id": "u1",
    }
