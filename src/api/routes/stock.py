"""Per-branch stock endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_adjust_stock_use_case,
    get_app_settings,
    get_initialize_stock_use_case,
    get_movements,
    get_set_stock_level_use_case,
    get_stock,
)
from src.application.dto.requests import (
    AdjustStockRequest,
    InitializeBranchStockRequest,
    SetStockLevelRequest,
)
from src.application.dto.responses import (
    BranchStockResponse,
    ErrorResponse,
    InitializeBranchStockResponse,
    StockLevelResponse,
    StockMovementResponse,
    StockRecordResponse,
)
from src.application.use_cases import (
    AdjustStockUseCase,
    InitializeBranchStockUseCase,
    SetStockLevelUseCase,
)
from src.config import Settings
from src.core.entities.stock import MovementType
from src.core.interfaces import IMovementLog, IStockStore

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.get("/branch/{branch_id}", response_model=BranchStockResponse)
async def get_branch_stock(
    branch_id: str,
    store: IStockStore = Depends(get_stock),
) -> BranchStockResponse:
    """All stock records at a branch."""
    records = await store.list_by_branch(branch_id)
    return BranchStockResponse(
        branch_id=branch_id,
        records=[StockRecordResponse.from_entity(r) for r in records],
        total=len(records),
    )


@router.get("/branch/{branch_id}/low", response_model=BranchStockResponse)
async def get_low_stock(
    branch_id: str,
    store: IStockStore = Depends(get_stock),
) -> BranchStockResponse:
    """Records at or below their minimum threshold, largest deficit first."""
    records = await store.list_low_stock(branch_id)
    return BranchStockResponse(
        branch_id=branch_id,
        records=[StockRecordResponse.from_entity(r) for r in records],
        total=len(records),
    )


@router.get("/branch/{branch_id}/movements", response_model=list[StockMovementResponse])
async def get_branch_movements(
    branch_id: str,
    movement_type: MovementType | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    movements: IMovementLog = Depends(get_movements),
    settings: Settings = Depends(get_app_settings),
) -> list[StockMovementResponse]:
    """Movement history at a branch, newest first."""
    entries = await movements.list_by_branch(
        branch_id,
        movement_type=movement_type,
        limit=limit or settings.stock.branch_movement_limit,
    )
    return [StockMovementResponse.from_entity(m) for m in entries]


@router.get("/product/{product_id}", response_model=list[StockRecordResponse])
async def get_product_stock(
    product_id: str,
    store: IStockStore = Depends(get_stock),
) -> list[StockRecordResponse]:
    """Stock of one product at every branch."""
    records = await store.list_by_product(product_id)
    return [StockRecordResponse.from_entity(r) for r in records]


@router.get("/product/{product_id}/movements", response_model=list[StockMovementResponse])
async def get_product_movements(
    product_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    movements: IMovementLog = Depends(get_movements),
    settings: Settings = Depends(get_app_settings),
) -> list[StockMovementResponse]:
    """Movement history of one product across branches."""
    entries = await movements.list_by_product(
        product_id, limit=limit or settings.stock.product_movement_limit
    )
    return [StockMovementResponse.from_entity(m) for m in entries]


@router.put(
    "/{branch_id}/{product_id}",
    response_model=StockLevelResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def set_stock_level(
    branch_id: str,
    product_id: str,
    request: SetStockLevelRequest,
    use_case: SetStockLevelUseCase = Depends(get_set_stock_level_use_case),
) -> StockLevelResponse:
    """Set quantity and/or minimum threshold, creating the record if needed."""
    result = await use_case.execute(branch_id, product_id, request)
    return use_case.to_response(result)


@router.post(
    "/adjust",
    response_model=StockLevelResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def adjust_stock(
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> StockLevelResponse:
    """Apply a signed correction; the result never goes below zero."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/initialize",
    response_model=InitializeBranchStockResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def initialize_branch_stock(
    request: InitializeBranchStockRequest,
    use_case: InitializeBranchStockUseCase = Depends(get_initialize_stock_use_case),
) -> InitializeBranchStockResponse:
    """Create records for products the branch does not carry yet."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
