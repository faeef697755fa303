"""
Cancel Transfer Use Case.

Reverses an approved transfer: every item's full requested quantity goes
back into the source, and the same amount is taken out of the destination
(never below zero). Returns recorded earlier do not reduce the reversal.
"""

from dataclasses import dataclass, field

from src.application.dto.requests import CancelTransferRequest
from src.application.dto.responses import (
    StockMovementResponse,
    TransferMutationResponse,
    TransferResponse,
)
from src.application.use_cases.base import TransactionalUseCase
from src.application.use_cases.decide_transfer import TRANSFER_REFERENCE
from src.config import get_logger
from src.core.entities.stock import MovementReason, StockMovement
from src.core.entities.transfer import TransferRequest, TransferStatus
from src.core.exceptions import TransferNotFoundError
from src.core.services.stock_ledger import StockLedgerService

logger = get_logger(__name__)


@dataclass
class CancelTransferResult:
    """Result of cancelling a transfer."""

    transfer: TransferRequest
    movements: list[StockMovement] = field(default_factory=list)


class CancelTransferUseCase(TransactionalUseCase):
    """Cancel an approved transfer with a full stock rollback."""

    async def execute(
        self, transfer_id: str, request: CancelTransferRequest
    ) -> CancelTransferResult:
        """Execute cancel transfer use case."""
        logger.info("cancel_transfer_started", transfer_id=transfer_id)
        user_id = self._user_or_system(request.cancelling_user_id)

        async with self._unit_of_work() as uow:
            transfer = await uow.transfers.get(transfer_id)
            if transfer is None:
                raise TransferNotFoundError(transfer_id)
            transfer.ensure_transition(TransferStatus.CANCELLED, "cancel")

            ledger = StockLedgerService(uow.stock, uow.movements)
            movements: list[StockMovement] = []
            for item in transfer.items:
                movements.append(
                    await ledger.record_change(
                        item.product_id,
                        transfer.source_branch_id,
                        item.requested_quantity,
                        MovementReason.TRANSFER_CANCELLATION,
                        reference_type=TRANSFER_REFERENCE,
                        reference_id=transfer.id,
                        notes=f"Cancelled transfer: {request.reason}",
                        acting_user_id=user_id,
                        minimum_threshold=self.settings.default_minimum_threshold,
                    )
                )
                movements.append(
                    await ledger.record_change(
                        item.product_id,
                        transfer.destination_branch_id,
                        -item.requested_quantity,
                        MovementReason.TRANSFER_CANCELLATION,
                        reference_type=TRANSFER_REFERENCE,
                        reference_id=transfer.id,
                        notes=f"Cancelled transfer: {request.reason}",
                        acting_user_id=user_id,
                        floor_at_zero=True,
                        minimum_threshold=self.settings.default_minimum_threshold,
                    )
                )

            transfer.cancel(user_id, request.reason)
            transfer = await uow.transfers.update(transfer)

        logger.info(
            "transfer_cancelled",
            transfer_id=transfer.id,
            movements=len(movements),
        )
        return CancelTransferResult(transfer=transfer, movements=movements)

    def to_response(self, result: CancelTransferResult) -> TransferMutationResponse:
        """Convert result to API response."""
        return TransferMutationResponse(
            transfer=TransferResponse.from_entity(result.transfer),
            movements=[StockMovementResponse.from_entity(m) for m in result.movements],
        )
