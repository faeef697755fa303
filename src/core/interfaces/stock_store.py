"""Abstract interfaces for per-branch stock records and the movement log."""

from abc import ABC, abstractmethod

from src.core.entities.stock import (
    MovementType,
    StockChange,
    StockMovement,
    StockRecord,
)


class IStockStore(ABC):
    """Interface for (product, branch) stock record persistence."""

    @abstractmethod
    async def get_record(self, product_id: str, branch_id: str) -> StockRecord | None:
        """Get the stock record for a product at a branch."""
        pass

    @abstractmethod
    async def upsert_record(self, record: StockRecord) -> StockRecord:
        """Insert or replace quantity and threshold for (product, branch)."""
        pass

    @abstractmethod
    async def apply_delta(
        self,
        product_id: str,
        branch_id: str,
        delta: float,
        floor_at_zero: bool = False,
        minimum_threshold: float | None = None,
    ) -> StockChange:
        """
        Add delta to a record, creating it at zero if missing.

        Raises InsufficientStockError if the result would be negative,
        unless floor_at_zero clamps it to 0. minimum_threshold applies only
        when the record is created.
        """
        pass

    @abstractmethod
    async def list_by_branch(self, branch_id: str) -> list[StockRecord]:
        """All stock records at a branch ordered by product."""
        pass

    @abstractmethod
    async def list_by_product(self, product_id: str) -> list[StockRecord]:
        """Stock of one product across all branches."""
        pass

    @abstractmethod
    async def list_low_stock(self, branch_id: str) -> list[StockRecord]:
        """Records at or below their minimum threshold, largest deficit first."""
        pass


class IMovementLog(ABC):
    """Append-only ledger of stock movements."""

    @abstractmethod
    async def append(self, movement: StockMovement) -> StockMovement:
        """Record a movement and return it with its ID."""
        pass

    @abstractmethod
    async def list_by_branch(
        self,
        branch_id: str,
        movement_type: MovementType | None = None,
        limit: int = 100,
    ) -> list[StockMovement]:
        """Movements at a branch, newest first."""
        pass

    @abstractmethod
    async def list_by_product(
        self, product_id: str, limit: int = 200
    ) -> list[StockMovement]:
        """Movements of one product across branches, newest first."""
        pass

    @abstractmethod
    async def list_by_reference(
        self, reference_type: str, reference_id: str
    ) -> list[StockMovement]:
        """Movements caused by one business document, in insertion order."""
        pass
