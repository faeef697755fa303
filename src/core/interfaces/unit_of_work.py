"""Transactional boundary shared by the stores."""

from abc import ABC, abstractmethod
from types import TracebackType

from src.core.interfaces.branch_store import IBranchStore
from src.core.interfaces.stock_store import IMovementLog, IStockStore
from src.core.interfaces.transfer_store import ITransferStore


class IUnitOfWork(ABC):
    """
    Groups store operations into one atomic unit.

    Usage:
        async with uow:
            await uow.stock.apply_delta(...)
            await uow.movements.append(...)

    Leaving the block normally commits; any exception rolls back every
    write made inside it and is re-raised.
    """

    branches: IBranchStore
    stock: IStockStore
    movements: IMovementLog
    transfers: ITransferStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass
