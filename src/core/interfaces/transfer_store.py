"""Abstract interface for transfer request storage."""

from abc import ABC, abstractmethod
from typing import Literal

from src.core.entities.transfer import TransferRequest, TransferStatus

TransferDirection = Literal["outgoing", "incoming", "both"]


class ITransferStore(ABC):
    """Interface for transfer request persistence."""

    @abstractmethod
    async def create(self, transfer: TransferRequest) -> TransferRequest:
        """Persist a new transfer, assigning its ID."""
        pass

    @abstractmethod
    async def get(self, transfer_id: str) -> TransferRequest | None:
        """Get transfer by ID with its items."""
        pass

    @abstractmethod
    async def update(self, transfer: TransferRequest) -> TransferRequest:
        """
        Save state, decision, return and cancellation fields.

        Items are never rewritten. Raises ConcurrentModificationError when
        the stored version differs from transfer.version.
        """
        pass

    @abstractmethod
    async def list_transfers(
        self,
        status: TransferStatus | None = None,
        branch_id: str | None = None,
        direction: TransferDirection = "both",
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransferRequest]:
        """List transfers, newest request first."""
        pass
