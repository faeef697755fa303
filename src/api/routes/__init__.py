"""API route modules."""

from src.api.routes.branches import router as branches_router
from src.api.routes.health import router as health_router
from src.api.routes.stock import router as stock_router
from src.api.routes.transfers import router as transfers_router

__all__ = [
    "health_router",
    "branches_router",
    "stock_router",
    "transfers_router",
]
