"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.branch_store import IBranchStore
from src.core.interfaces.stock_store import IMovementLog, IStockStore
from src.core.interfaces.transfer_store import ITransferStore, TransferDirection
from src.core.interfaces.unit_of_work import IUnitOfWork

__all__ = [
    # Storage interfaces
    "IBranchStore",
    "IStockStore",
    "IMovementLog",
    "ITransferStore",
    "TransferDirection",
    # Transactions
    "IUnitOfWork",
]
