"""Abstract interface for branch storage."""

from abc import ABC, abstractmethod

from src.core.entities.branch import Branch


class IBranchStore(ABC):
    """Interface for branch persistence."""

    @abstractmethod
    async def create_branch(self, branch: Branch) -> Branch:
        """Create a new branch."""
        pass

    @abstractmethod
    async def get_branch(self, branch_id: str) -> Branch | None:
        """Get branch by ID."""
        pass

    @abstractmethod
    async def list_branches(self, include_inactive: bool = False) -> list[Branch]:
        """List branches ordered by name."""
        pass
