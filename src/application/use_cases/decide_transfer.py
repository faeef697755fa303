"""
Decide Transfer Use Case.

Resolves a pending transfer. Approval moves every item from source to
destination inside one unit of work: the source stock is re-checked, then
each item gets an out movement at the source and an in movement at the
destination. If anything fails, none of it is kept.
"""

from dataclasses import dataclass, field

from src.application.dto.requests import DecideTransferRequest
from src.application.dto.responses import (
    StockMovementResponse,
    TransferMutationResponse,
    TransferNotificationResponse,
    TransferResponse,
)
from src.application.use_cases.base import TransactionalUseCase
from src.config import get_logger
from src.core.entities.stock import MovementReason, StockMovement
from src.core.entities.transfer import (
    TransferDecision,
    TransferNotification,
    TransferRequest,
    TransferStatus,
)
from src.core.exceptions import TransferNotFoundError
from src.core.interfaces.unit_of_work import IUnitOfWork
from src.core.services.stock_availability import StockAvailabilityService
from src.core.services.stock_ledger import StockLedgerService

logger = get_logger(__name__)

TRANSFER_REFERENCE = "transfer"


@dataclass
class DecideTransferResult:
    """Result of deciding a transfer."""

    transfer: TransferRequest
    notification: TransferNotification
    movements: list[StockMovement] = field(default_factory=list)


class DecideTransferUseCase(TransactionalUseCase):
    """Approve (moving stock) or reject (no stock I/O) a pending transfer."""

    async def execute(
        self, transfer_id: str, request: DecideTransferRequest
    ) -> DecideTransferResult:
        """Execute decide transfer use case."""
        logger.info(
            "decide_transfer_started",
            transfer_id=transfer_id,
            decision=request.decision.value,
        )
        user_id = self._user_or_system(request.deciding_user_id)
        movements: list[StockMovement] = []

        async with self._unit_of_work() as uow:
            transfer = await uow.transfers.get(transfer_id)
            if transfer is None:
                raise TransferNotFoundError(transfer_id)

            if request.decision == TransferDecision.REJECTED:
                transfer.reject(user_id, request.rejection_reason)
            else:
                transfer.ensure_transition(TransferStatus.APPROVED, "approve")
                movements = await self._move_stock(uow, transfer, user_id)
                transfer.approve(user_id)

            transfer = await uow.transfers.update(transfer)

        logger.info(
            "transfer_decided",
            transfer_id=transfer.id,
            status=transfer.status.value,
            movements=len(movements),
        )
        return DecideTransferResult(
            transfer=transfer,
            notification=transfer.build_notification(),
            movements=movements,
        )

    async def _move_stock(
        self, uow: IUnitOfWork, transfer: TransferRequest, user_id: str
    ) -> list[StockMovement]:
        # Stock may have changed since the transfer was requested
        await StockAvailabilityService(uow.stock).ensure_available(
            transfer.source_branch_id, transfer.items
        )

        ledger = StockLedgerService(uow.stock, uow.movements)
        movements: list[StockMovement] = []
        for item in transfer.items:
            movements.append(
                await ledger.record_change(
                    item.product_id,
                    transfer.source_branch_id,
                    -item.requested_quantity,
                    MovementReason.TRANSFER,
                    reference_type=TRANSFER_REFERENCE,
                    reference_id=transfer.id,
                    notes=f"Transfer to branch {transfer.destination_branch_id}",
                    acting_user_id=user_id,
                )
            )
            movements.append(
                await ledger.record_change(
                    item.product_id,
                    transfer.destination_branch_id,
                    item.requested_quantity,
                    MovementReason.TRANSFER,
                    reference_type=TRANSFER_REFERENCE,
                    reference_id=transfer.id,
                    notes=f"Transfer from branch {transfer.source_branch_id}",
                    acting_user_id=user_id,
                    minimum_threshold=self.settings.default_minimum_threshold,
                )
            )
        return movements

    def to_response(self, result: DecideTransferResult) -> TransferMutationResponse:
        """Convert result to API response."""
        return TransferMutationResponse(
            transfer=TransferResponse.from_entity(result.transfer),
            movements=[StockMovementResponse.from_entity(m) for m in result.movements],
            notification=TransferNotificationResponse.from_entity(result.notification),
        )
