"""Core domain entities."""

from src.core.entities.branch import Branch
from src.core.entities.stock import (
    MovementReason,
    MovementType,
    StockChange,
    StockMovement,
    StockRecord,
    StockShortage,
)
from src.core.entities.transfer import (
    ALLOWED_TRANSITIONS,
    NotificationPriority,
    TransferDecision,
    TransferItem,
    TransferNotification,
    TransferRequest,
    TransferStatus,
)

__all__ = [
    # Branch entities
    "Branch",
    # Stock entities
    "StockRecord",
    "StockChange",
    "StockShortage",
    "StockMovement",
    "MovementType",
    "MovementReason",
    # Transfer entities
    "TransferRequest",
    "TransferItem",
    "TransferStatus",
    "TransferDecision",
    "TransferNotification",
    "NotificationPriority",
    "ALLOWED_TRANSITIONS",
]
