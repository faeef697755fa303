"""Record Transfer Return Use Case: counter-only, stock is not moved."""

from dataclasses import dataclass

from src.application.dto.requests import RecordReturnRequest
from src.application.dto.responses import TransferResponse, TransferReturnResponse
from src.application.use_cases.base import TransactionalUseCase
from src.config import get_logger
from src.core.entities.transfer import TransferRequest
from src.core.exceptions import TransferNotFoundError

logger = get_logger(__name__)


@dataclass
class RecordTransferReturnResult:
    """Result of recording returns."""

    transfer: TransferRequest
    applied: dict[str, float]


class RecordTransferReturnUseCase(TransactionalUseCase):
    """Add returned quantities to an approved transfer, capped per product."""

    async def execute(
        self, transfer_id: str, request: RecordReturnRequest
    ) -> RecordTransferReturnResult:
        """Execute record return use case."""
        logger.info(
            "record_transfer_return_started",
            transfer_id=transfer_id,
            entries=len(request.returns),
        )

        async with self._unit_of_work() as uow:
            transfer = await uow.transfers.get(transfer_id)
            if transfer is None:
                raise TransferNotFoundError(transfer_id)

            applied = transfer.apply_returns(
                [(entry.product_id, entry.quantity) for entry in request.returns]
            )
            transfer = await uow.transfers.update(transfer)

        logger.info("transfer_return_recorded", transfer_id=transfer.id, applied=applied)
        return RecordTransferReturnResult(transfer=transfer, applied=applied)

    def to_response(self, result: RecordTransferReturnResult) -> TransferReturnResponse:
        """Convert result to API response."""
        return TransferReturnResponse(
            transfer=TransferResponse.from_entity(result.transfer),
            applied=result.applied,
        )
