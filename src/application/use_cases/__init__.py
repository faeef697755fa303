"""Application use cases."""

from src.application.use_cases.cancel_transfer import CancelTransferResult, CancelTransferUseCase
from src.application.use_cases.create_transfer import CreateTransferResult, CreateTransferUseCase
from src.application.use_cases.decide_transfer import DecideTransferResult, DecideTransferUseCase
from src.application.use_cases.record_transfer_return import (
    RecordTransferReturnResult,
    RecordTransferReturnUseCase,
)
from src.application.use_cases.stock_levels import (
    AdjustStockUseCase,
    InitializeBranchStockResult,
    InitializeBranchStockUseCase,
    SetStockLevelUseCase,
    StockLevelResult,
)

__all__ = [
    # Transfer workflow
    "CreateTransferUseCase",
    "CreateTransferResult",
    "DecideTransferUseCase",
    "DecideTransferResult",
    "RecordTransferReturnUseCase",
    "RecordTransferReturnResult",
    "CancelTransferUseCase",
    "CancelTransferResult",
    # Stock maintenance
    "SetStockLevelUseCase",
    "AdjustStockUseCase",
    "InitializeBranchStockUseCase",
    "StockLevelResult",
    "InitializeBranchStockResult",
]
