"""
Stock maintenance use cases outside the transfer workflow.

Each one journals its quantity changes in the movement log, the same way
transfers do.
"""

from dataclasses import dataclass, field

from src.application.dto.requests import (
    AdjustStockRequest,
    InitializeBranchStockRequest,
    SetStockLevelRequest,
)
from src.application.dto.responses import (
    InitializeBranchStockResponse,
    StockLevelResponse,
    StockMovementResponse,
    StockRecordResponse,
)
from src.application.use_cases.base import TransactionalUseCase, require_branch
from src.config import get_logger
from src.core.entities.stock import MovementReason, StockMovement, StockRecord
from src.core.exceptions import StockRecordNotFoundError
from src.core.services.stock_ledger import StockLedgerService

logger = get_logger(__name__)

ADJUSTMENT_REFERENCE = "adjustment"


@dataclass
class StockLevelResult:
    """A stock record after it was set or adjusted."""

    record: StockRecord
    movement: StockMovement | None = None
    created: bool = False


@dataclass
class InitializeBranchStockResult:
    """Records created by an opening stock load."""

    branch_id: str
    created: list[StockRecord] = field(default_factory=list)
    skipped_product_ids: list[str] = field(default_factory=list)


def _level_response(result: StockLevelResult) -> StockLevelResponse:
    return StockLevelResponse(
        record=StockRecordResponse.from_entity(result.record),
        movement=StockMovementResponse.from_entity(result.movement) if result.movement else None,
        created=result.created,
    )


class SetStockLevelUseCase(TransactionalUseCase):
    """Set absolute quantity and/or threshold, creating the record if needed."""

    async def execute(
        self, branch_id: str, product_id: str, request: SetStockLevelRequest
    ) -> StockLevelResult:
        """Execute set stock level use case."""
        logger.info(
            "set_stock_level_started",
            branch_id=branch_id,
            product_id=product_id,
            quantity=request.quantity,
            minimum_threshold=request.minimum_threshold,
        )

        async with self._unit_of_work() as uow:
            await require_branch(uow, branch_id)
            existing = await uow.stock.get_record(product_id, branch_id)

            current_quantity = existing.quantity if existing else 0.0
            threshold = request.minimum_threshold
            if threshold is None:
                threshold = (
                    existing.minimum_threshold
                    if existing
                    else self.settings.default_minimum_threshold
                )
            target = request.quantity if request.quantity is not None else current_quantity

            movement = None
            if target != current_quantity:
                movement = await StockLedgerService(uow.stock, uow.movements).record_change(
                    product_id,
                    branch_id,
                    target - current_quantity,
                    MovementReason.ADJUSTMENT,
                    reference_type=ADJUSTMENT_REFERENCE,
                    notes=request.notes or "Stock level set",
                    acting_user_id=self._user_or_system(request.acting_user_id),
                    minimum_threshold=threshold,
                )

            record = await uow.stock.upsert_record(
                StockRecord(
                    product_id=product_id,
                    branch_id=branch_id,
                    quantity=target,
                    minimum_threshold=threshold,
                )
            )

        logger.info(
            "stock_level_set",
            branch_id=branch_id,
            product_id=product_id,
            quantity=record.quantity,
            created=existing is None,
        )
        return StockLevelResult(record=record, movement=movement, created=existing is None)

    def to_response(self, result: StockLevelResult) -> StockLevelResponse:
        """Convert result to API response."""
        return _level_response(result)


class AdjustStockUseCase(TransactionalUseCase):
    """Apply a signed correction to an existing record, flooring at zero."""

    async def execute(self, request: AdjustStockRequest) -> StockLevelResult:
        """Execute adjust stock use case."""
        logger.info(
            "adjust_stock_started",
            branch_id=request.branch_id,
            product_id=request.product_id,
            adjustment=request.adjustment,
        )

        async with self._unit_of_work() as uow:
            existing = await uow.stock.get_record(request.product_id, request.branch_id)
            if existing is None:
                raise StockRecordNotFoundError(request.product_id, request.branch_id)

            movement = await StockLedgerService(uow.stock, uow.movements).record_change(
                request.product_id,
                request.branch_id,
                request.adjustment,
                MovementReason.ADJUSTMENT,
                reference_type=ADJUSTMENT_REFERENCE,
                notes=request.reason,
                acting_user_id=self._user_or_system(request.acting_user_id),
                floor_at_zero=True,
            )
            record = await uow.stock.get_record(request.product_id, request.branch_id)

        logger.info(
            "stock_adjusted",
            branch_id=request.branch_id,
            product_id=request.product_id,
            previous=movement.previous_quantity,
            new=movement.new_quantity,
        )
        return StockLevelResult(record=record or existing, movement=movement)

    def to_response(self, result: StockLevelResult) -> StockLevelResponse:
        """Convert result to API response."""
        return _level_response(result)


class InitializeBranchStockUseCase(TransactionalUseCase):
    """Create records for products a branch lacks; existing ones are untouched."""

    async def execute(
        self, request: InitializeBranchStockRequest
    ) -> InitializeBranchStockResult:
        """Execute initialize branch stock use case."""
        logger.info(
            "initialize_branch_stock_started",
            branch_id=request.branch_id,
            products=len(request.products),
        )
        result = InitializeBranchStockResult(branch_id=request.branch_id)
        user_id = self._user_or_system(request.acting_user_id)

        async with self._unit_of_work() as uow:
            await require_branch(uow, request.branch_id)
            ledger = StockLedgerService(uow.stock, uow.movements)

            for item in request.products:
                if await uow.stock.get_record(item.product_id, request.branch_id):
                    result.skipped_product_ids.append(item.product_id)
                    continue

                threshold = (
                    item.minimum_threshold
                    if item.minimum_threshold is not None
                    else self.settings.default_minimum_threshold
                )
                if item.quantity > 0:
                    await ledger.record_change(
                        item.product_id,
                        request.branch_id,
                        item.quantity,
                        MovementReason.INITIAL_LOAD,
                        notes="Opening stock",
                        acting_user_id=user_id,
                        minimum_threshold=threshold,
                    )
                    record = await uow.stock.get_record(item.product_id, request.branch_id)
                else:
                    record = await uow.stock.upsert_record(
                        StockRecord(
                            product_id=item.product_id,
                            branch_id=request.branch_id,
                            quantity=0.0,
                            minimum_threshold=threshold,
                        )
                    )
                if record is not None:
                    result.created.append(record)

        logger.info(
            "branch_stock_initialized",
            branch_id=request.branch_id,
            created=len(result.created),
            skipped=len(result.skipped_product_ids),
        )
        return result

    def to_response(
        self, result: InitializeBranchStockResult
    ) -> InitializeBranchStockResponse:
        """Convert result to API response."""
        return InitializeBranchStockResponse(
            branch_id=result.branch_id,
            created=[StockRecordResponse.from_entity(r) for r in result.created],
            skipped_product_ids=result.skipped_product_ids,
        )
