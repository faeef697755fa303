"""
Stock ledger service.

Every stock mutation goes through here so that each change to a stock
record is paired with exactly one movement log entry.
"""

from src.config import get_logger
from src.core.entities.stock import MovementReason, MovementType, StockMovement
from src.core.interfaces.stock_store import IMovementLog, IStockStore

logger = get_logger(__name__)


class StockLedgerService:
    """Applies stock deltas and journals them in the movement log."""

    def __init__(self, stock_store: IStockStore, movement_log: IMovementLog) -> None:
        self._stock = stock_store
        self._movements = movement_log

    async def record_change(
        self,
        product_id: str,
        branch_id: str,
        delta: float,
        reason: MovementReason,
        reference_type: str | None = None,
        reference_id: str | None = None,
        notes: str | None = None,
        acting_user_id: str | None = None,
        floor_at_zero: bool = False,
        minimum_threshold: float | None = None,
    ) -> StockMovement:
        """
        Apply delta to (product, branch) and append the matching movement.

        The movement records the quantity actually applied, which differs
        from delta only when floor_at_zero clamps a decrement. Its direction
        always follows the sign of the requested delta.
        """
        change = await self._stock.apply_delta(
            product_id,
            branch_id,
            delta,
            floor_at_zero=floor_at_zero,
            minimum_threshold=minimum_threshold,
        )
        movement = StockMovement.from_change(
            change,
            reason,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            acting_user_id=acting_user_id,
            movement_type=MovementType.IN if delta >= 0 else MovementType.OUT,
        )
        movement = await self._movements.append(movement)

        logger.debug(
            "stock_change_recorded",
            product_id=product_id,
            branch_id=branch_id,
            movement_type=movement.movement_type.value,
            previous=movement.previous_quantity,
            new=movement.new_quantity,
            reason=reason.value,
        )
        return movement
