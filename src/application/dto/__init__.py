"""Data transfer objects for the API boundary."""

from src.application.dto.requests import (
    AdjustStockRequest,
    CancelTransferRequest,
    CreateBranchRequest,
    CreateTransferRequest,
    DecideTransferRequest,
    InitialStockItem,
    InitializeBranchStockRequest,
    RecordReturnRequest,
    ReturnEntryRequest,
    SetStockLevelRequest,
    TransferItemRequest,
)
from src.application.dto.responses import (
    BranchResponse,
    BranchStockResponse,
    BranchTransfersResponse,
    ErrorResponse,
    HealthResponse,
    InitializeBranchStockResponse,
    ProviderHealthResponse,
    StockLevelResponse,
    StockMovementResponse,
    StockRecordResponse,
    TransferItemResponse,
    TransferListResponse,
    TransferMutationResponse,
    TransferNotificationResponse,
    TransferResponse,
    TransferReturnResponse,
)

__all__ = [
    # Requests
    "CreateBranchRequest",
    "CreateTransferRequest",
    "TransferItemRequest",
    "DecideTransferRequest",
    "RecordReturnRequest",
    "ReturnEntryRequest",
    "CancelTransferRequest",
    "SetStockLevelRequest",
    "AdjustStockRequest",
    "InitialStockItem",
    "InitializeBranchStockRequest",
    # Responses
    "BranchResponse",
    "StockRecordResponse",
    "StockMovementResponse",
    "BranchStockResponse",
    "StockLevelResponse",
    "InitializeBranchStockResponse",
    "TransferItemResponse",
    "TransferResponse",
    "TransferListResponse",
    "BranchTransfersResponse",
    "TransferNotificationResponse",
    "TransferMutationResponse",
    "TransferReturnResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ErrorResponse",
]
