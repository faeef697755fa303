"""
Dependency injection container for FastAPI.

Provides use cases and stores to route handlers. Tests replace these
through app.dependency_overrides.
"""

from functools import lru_cache

from src.application.use_cases import (
    AdjustStockUseCase,
    CancelTransferUseCase,
    CreateTransferUseCase,
    DecideTransferUseCase,
    InitializeBranchStockUseCase,
    RecordTransferReturnUseCase,
    SetStockLevelUseCase,
)
from src.config import Settings, get_settings
from src.core.interfaces import IBranchStore, IMovementLog, IStockStore, ITransferStore
from src.infrastructure.storage.sqlite import (
    get_branch_store,
    get_movement_log,
    get_stock_store,
    get_transfer_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Store dependencies (read paths and branch registration)
async def get_branches() -> IBranchStore:
    """Get branch store."""
    return await get_branch_store()


async def get_stock() -> IStockStore:
    """Get stock record store."""
    return await get_stock_store()


async def get_movements() -> IMovementLog:
    """Get movement log."""
    return await get_movement_log()


async def get_transfers() -> ITransferStore:
    """Get transfer store."""
    return await get_transfer_store()


# Use case dependencies
def get_create_transfer_use_case() -> CreateTransferUseCase:
    """Get create transfer use case."""
    return CreateTransferUseCase()


def get_decide_transfer_use_case() -> DecideTransferUseCase:
    """Get decide transfer use case."""
    return DecideTransferUseCase()


def get_record_return_use_case() -> RecordTransferReturnUseCase:
    """Get record transfer return use case."""
    return RecordTransferReturnUseCase()


def get_cancel_transfer_use_case() -> CancelTransferUseCase:
    """Get cancel transfer use case."""
    return CancelTransferUseCase()


def get_set_stock_level_use_case() -> SetStockLevelUseCase:
    """Get set stock level use case."""
    return SetStockLevelUseCase()


def get_adjust_stock_use_case() -> AdjustStockUseCase:
    """Get adjust stock use case."""
    return AdjustStockUseCase()


def get_initialize_stock_use_case() -> InitializeBranchStockUseCase:
    """Get initialize branch stock use case."""
    return InitializeBranchStockUseCase()
