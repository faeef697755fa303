"""Create Transfer Use Case: availability check, then persist as pending."""

from dataclasses import dataclass

from src.application.dto.requests import CreateTransferRequest
from src.application.dto.responses import TransferResponse
from src.application.use_cases.base import TransactionalUseCase, require_branch
from src.config import get_logger
from src.core.entities.transfer import TransferItem, TransferRequest
from src.core.services.stock_availability import StockAvailabilityService

logger = get_logger(__name__)


@dataclass
class CreateTransferResult:
    """Result of creating a transfer."""

    transfer: TransferRequest


class CreateTransferUseCase(TransactionalUseCase):
    """Validate source stock and record a pending transfer. Stock is not moved."""

    async def execute(self, request: CreateTransferRequest) -> CreateTransferResult:
        """Execute create transfer use case."""
        logger.info(
            "create_transfer_started",
            source_branch_id=request.source_branch_id,
            destination_branch_id=request.destination_branch_id,
            items=len(request.items),
        )

        items = [
            TransferItem(product_id=item.product_id, requested_quantity=item.quantity)
            for item in request.items
        ]

        async with self._unit_of_work() as uow:
            await require_branch(uow, request.source_branch_id, "source_branch_id")
            await require_branch(uow, request.destination_branch_id, "destination_branch_id")

            await StockAvailabilityService(uow.stock).ensure_available(
                request.source_branch_id, items
            )

            transfer = await uow.transfers.create(
                TransferRequest(
                    source_branch_id=request.source_branch_id,
                    destination_branch_id=request.destination_branch_id,
                    items=items,
                    reason=request.reason,
                    requesting_user_id=request.requesting_user_id,
                )
            )

        logger.info(
            "transfer_created",
            transfer_id=transfer.id,
            source_branch_id=transfer.source_branch_id,
            destination_branch_id=transfer.destination_branch_id,
        )
        return CreateTransferResult(transfer=transfer)

    def to_response(self, result: CreateTransferResult) -> TransferResponse:
        """Convert result to API response."""
        return TransferResponse.from_entity(result.transfer)
