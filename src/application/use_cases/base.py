"""Shared wiring for use cases that run inside a unit of work."""

from collections.abc import Callable

from src.config import StockSettings, get_settings
from src.core.entities.branch import Branch
from src.core.exceptions import BranchNotFoundError, ValidationError
from src.core.interfaces.unit_of_work import IUnitOfWork

UnitOfWorkFactory = Callable[[], IUnitOfWork]


class TransactionalUseCase:
    """
    Base for use cases whose writes must commit together.

    The unit of work factory and settings are injectable; by default the
    SQLite unit of work and global settings are used.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory | None = None,
        settings: StockSettings | None = None,
    ):
        self._uow_factory = uow_factory
        self._settings = settings

    def _unit_of_work(self) -> IUnitOfWork:
        if self._uow_factory is None:
            from src.infrastructure.storage.sqlite import create_unit_of_work

            self._uow_factory = create_unit_of_work
        return self._uow_factory()

    @property
    def settings(self) -> StockSettings:
        if self._settings is None:
            self._settings = get_settings().stock
        return self._settings

    def _user_or_system(self, user_id: str | None) -> str:
        return user_id or self.settings.system_user_id


async def require_branch(uow: IUnitOfWork, branch_id: str, field: str = "branch_id") -> Branch:
    """Load an active branch or fail."""
    branch = await uow.branches.get_branch(branch_id)
    if branch is None:
        raise BranchNotFoundError(branch_id)
    if not branch.is_active:
        raise ValidationError(field, "Branch is inactive", branch_id)
    return branch
