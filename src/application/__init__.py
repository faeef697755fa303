"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services inside a unit of work

Use cases are the only entry point for API handlers that change stock.
"""

from src.application.use_cases import (
    AdjustStockUseCase,
    CancelTransferUseCase,
    CreateTransferUseCase,
    DecideTransferUseCase,
    InitializeBranchStockUseCase,
    RecordTransferReturnUseCase,
    SetStockLevelUseCase,
)

__all__ = [
    "CreateTransferUseCase",
    "DecideTransferUseCase",
    "RecordTransferReturnUseCase",
    "CancelTransferUseCase",
    "SetStockLevelUseCase",
    "AdjustStockUseCase",
    "InitializeBranchStockUseCase",
]
