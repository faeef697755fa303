"""
Domain exceptions for the branch stock service.

Every error carries a stable code and structured details so callers can
render exactly which branch, product or transfer caused the failure.
"""

from typing import Any


class BranchStockError(Exception):
    """Base exception for all branch stock errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Not-found Exceptions
class NotFoundError(BranchStockError):
    """Referenced entity does not exist."""

    pass


class BranchNotFoundError(NotFoundError):
    """Branch not found."""

    def __init__(self, branch_id: str):
        super().__init__(
            f"Branch not found: {branch_id}",
            code="BRANCH_NOT_FOUND",
            details={"branch_id": branch_id},
        )


class TransferNotFoundError(NotFoundError):
    """Transfer request not found."""

    def __init__(self, transfer_id: str):
        super().__init__(
            f"Transfer not found: {transfer_id}",
            code="TRANSFER_NOT_FOUND",
            details={"transfer_id": transfer_id},
        )


class StockRecordNotFoundError(NotFoundError):
    """No stock record for the product at the branch."""

    def __init__(self, product_id: str, branch_id: str):
        super().__init__(
            f"No stock record for product '{product_id}' at branch '{branch_id}'",
            code="STOCK_RECORD_NOT_FOUND",
            details={"product_id": product_id, "branch_id": branch_id},
        )


# Business Rule Exceptions
class InsufficientStockError(BranchStockError):
    """One or more products lack the quantity requested at a branch."""

    def __init__(self, shortages: list[Any]):
        self.shortages = list(shortages)
        parts = [
            f"{s.product_id} (available {s.available:g}, requested {s.requested:g})"
            for s in self.shortages
        ]
        super().__init__(
            "Insufficient stock for: " + ", ".join(parts),
            code="INSUFFICIENT_STOCK",
            details={
                "shortages": [
                    {
                        "product_id": s.product_id,
                        "branch_id": s.branch_id,
                        "requested": s.requested,
                        "available": s.available,
                        "shortfall": s.shortfall,
                    }
                    for s in self.shortages
                ]
            },
        )


class InvalidStateTransitionError(BranchStockError):
    """Operation is not allowed from the transfer's current state."""

    def __init__(self, transfer_id: str, current_status: str, action: str):
        super().__init__(
            f"Cannot {action} transfer {transfer_id}: current status is '{current_status}'",
            code="INVALID_STATE_TRANSITION",
            details={
                "transfer_id": transfer_id,
                "current_status": current_status,
                "action": action,
            },
        )


class NothingToReturnError(BranchStockError):
    """Every returned product is already fully returned."""

    def __init__(self, transfer_id: str):
        super().__init__(
            f"No products pending return on transfer {transfer_id}",
            code="NOTHING_TO_RETURN",
            details={"transfer_id": transfer_id},
        )


# Storage Exceptions
class StorageError(BranchStockError):
    """Base exception for storage operations."""

    pass


class PersistenceError(StorageError):
    """Storage layer failed; the unit of work was rolled back."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Persistence failure during {operation}: {error}",
            code="PERSISTENCE_FAILURE",
            details={"operation": operation, "error": error, "retryable": True},
        )


class ConcurrentModificationError(StorageError):
    """A transfer was written by someone else since it was read."""

    def __init__(self, transfer_id: str, expected_version: int):
        super().__init__(
            f"Transfer {transfer_id} was modified concurrently",
            code="CONCURRENT_MODIFICATION",
            details={
                "transfer_id": transfer_id,
                "expected_version": expected_version,
                "retryable": True,
            },
        )


# Validation Exceptions
class ValidationError(BranchStockError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


class ConfigurationError(BranchStockError):
    """Configuration error."""

    pass
