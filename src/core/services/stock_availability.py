"""
Stock availability check.

Collects every shortage for a set of requested items at one branch so the
caller can report all missing products at once, not just the first.
"""

from src.config import get_logger
from src.core.entities.stock import QUANTITY_EPSILON, StockShortage
from src.core.entities.transfer import TransferItem
from src.core.exceptions import InsufficientStockError
from src.core.interfaces.stock_store import IStockStore

logger = get_logger(__name__)


class StockAvailabilityService:
    """Layer-pure service comparing requested quantities with stock records."""

    def __init__(self, stock_store: IStockStore) -> None:
        self._stock = stock_store

    async def find_shortages(
        self, branch_id: str, items: list[TransferItem]
    ) -> list[StockShortage]:
        """
        Compare each item against the branch's stock record.

        A product with no record counts as zero available.
        """
        shortages: list[StockShortage] = []
        for item in items:
            record = await self._stock.get_record(item.product_id, branch_id)
            available = record.quantity if record else 0.0
            if available + QUANTITY_EPSILON < item.requested_quantity:
                shortages.append(
                    StockShortage(
                        product_id=item.product_id,
                        branch_id=branch_id,
                        requested=item.requested_quantity,
                        available=available,
                    )
                )
        return shortages

    async def ensure_available(self, branch_id: str, items: list[TransferItem]) -> None:
        """Raise InsufficientStockError listing every short product."""
        shortages = await self.find_shortages(branch_id, items)
        if shortages:
            logger.warning(
                "stock_unavailable",
                branch_id=branch_id,
                products=[s.product_id for s in shortages],
            )
            raise InsufficientStockError(shortages)
