"""Stock transfer endpoints: create, decide, return, cancel and queries."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_app_settings,
    get_cancel_transfer_use_case,
    get_create_transfer_use_case,
    get_decide_transfer_use_case,
    get_movements,
    get_record_return_use_case,
    get_transfers,
)
from src.application.dto.requests import (
    CancelTransferRequest,
    CreateTransferRequest,
    DecideTransferRequest,
    RecordReturnRequest,
)
from src.application.dto.responses import (
    BranchTransfersResponse,
    ErrorResponse,
    StockMovementResponse,
    TransferListResponse,
    TransferMutationResponse,
    TransferResponse,
    TransferReturnResponse,
)
from src.application.use_cases import (
    CancelTransferUseCase,
    CreateTransferUseCase,
    DecideTransferUseCase,
    RecordTransferReturnUseCase,
)
from src.application.use_cases.decide_transfer import TRANSFER_REFERENCE
from src.config import Settings
from src.core.entities.transfer import TransferStatus
from src.core.exceptions import TransferNotFoundError
from src.core.interfaces import IMovementLog, ITransferStore

router = APIRouter(prefix="/api/transfers", tags=["transfers"])


@router.post(
    "",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def create_transfer(
    request: CreateTransferRequest,
    use_case: CreateTransferUseCase = Depends(get_create_transfer_use_case),
) -> TransferResponse:
    """Create a pending transfer after checking source stock."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=TransferListResponse)
async def list_transfers(
    status_filter: TransferStatus | None = Query(default=None, alias="status"),
    branch_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: ITransferStore = Depends(get_transfers),
) -> TransferListResponse:
    """List transfers, newest first, optionally by status and branch."""
    transfers = await store.list_transfers(
        status=status_filter, branch_id=branch_id, limit=limit, offset=offset
    )
    return TransferListResponse(
        transfers=[TransferResponse.from_entity(t) for t in transfers],
        total=len(transfers),
    )


@router.get("/pending", response_model=TransferListResponse)
async def list_pending_transfers(
    store: ITransferStore = Depends(get_transfers),
) -> TransferListResponse:
    """Transfers awaiting a decision."""
    transfers = await store.list_transfers(status=TransferStatus.PENDING)
    return TransferListResponse(
        transfers=[TransferResponse.from_entity(t) for t in transfers],
        total=len(transfers),
    )


@router.get("/branch/{branch_id}", response_model=BranchTransfersResponse)
async def list_branch_transfers(
    branch_id: str,
    direction: str = Query(default="both", pattern="^(outgoing|incoming|both)$"),
    store: ITransferStore = Depends(get_transfers),
    settings: Settings = Depends(get_app_settings),
) -> BranchTransfersResponse:
    """Recent transfers leaving and/or arriving at a branch."""
    limit = settings.stock.branch_transfer_limit
    response = BranchTransfersResponse(branch_id=branch_id)
    if direction in ("outgoing", "both"):
        outgoing = await store.list_transfers(
            branch_id=branch_id, direction="outgoing", limit=limit
        )
        response.outgoing = [TransferResponse.from_entity(t) for t in outgoing]
    if direction in ("incoming", "both"):
        incoming = await store.list_transfers(
            branch_id=branch_id, direction="incoming", limit=limit
        )
        response.incoming = [TransferResponse.from_entity(t) for t in incoming]
    return response


@router.get(
    "/{transfer_id}",
    response_model=TransferResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_transfer(
    transfer_id: str,
    store: ITransferStore = Depends(get_transfers),
) -> TransferResponse:
    """Get a transfer by ID."""
    transfer = await store.get(transfer_id)
    if transfer is None:
        raise TransferNotFoundError(transfer_id)
    return TransferResponse.from_entity(transfer)


@router.get(
    "/{transfer_id}/movements",
    response_model=list[StockMovementResponse],
)
async def get_transfer_movements(
    transfer_id: str,
    movements: IMovementLog = Depends(get_movements),
) -> list[StockMovementResponse]:
    """Stock movements produced by a transfer's approval and cancellation."""
    entries = await movements.list_by_reference(TRANSFER_REFERENCE, transfer_id)
    return [StockMovementResponse.from_entity(m) for m in entries]


@router.put(
    "/{transfer_id}/decision",
    response_model=TransferMutationResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def decide_transfer(
    transfer_id: str,
    request: DecideTransferRequest,
    use_case: DecideTransferUseCase = Depends(get_decide_transfer_use_case),
) -> TransferMutationResponse:
    """Approve (moving stock) or reject a pending transfer."""
    result = await use_case.execute(transfer_id, request)
    return use_case.to_response(result)


@router.post(
    "/{transfer_id}/returns",
    response_model=TransferReturnResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_transfer_return(
    transfer_id: str,
    request: RecordReturnRequest,
    use_case: RecordTransferReturnUseCase = Depends(get_record_return_use_case),
) -> TransferReturnResponse:
    """Record returned quantities against an approved transfer."""
    result = await use_case.execute(transfer_id, request)
    return use_case.to_response(result)


@router.post(
    "/{transfer_id}/cancel",
    response_model=TransferMutationResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def cancel_transfer(
    transfer_id: str,
    request: CancelTransferRequest,
    use_case: CancelTransferUseCase = Depends(get_cancel_transfer_use_case),
) -> TransferMutationResponse:
    """Cancel an approved transfer and reverse its stock movement."""
    result = await use_case.execute(transfer_id, request)
    return use_case.to_response(result)
