"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.entities import (
    Branch,
    StockMovement,
    StockRecord,
    TransferNotification,
    TransferRequest,
)


# --- Branches ---


class BranchResponse(BaseModel):
    """Branch response DTO."""

    id: str
    name: str
    branch_type: str
    address: str | None = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, branch: Branch) -> "BranchResponse":
        return cls(
            id=branch.id,
            name=branch.name,
            branch_type=branch.branch_type,
            address=branch.address,
            is_active=branch.is_active,
            created_at=branch.created_at,
        )


# --- Stock ---


class StockRecordResponse(BaseModel):
    """Quantity of a product at a branch."""

    product_id: str
    branch_id: str
    quantity: float
    minimum_threshold: float
    is_low: bool
    deficit: float = Field(..., description="minimum_threshold - quantity")
    updated_at: datetime

    @classmethod
    def from_entity(cls, record: StockRecord) -> "StockRecordResponse":
        return cls(
            product_id=record.product_id,
            branch_id=record.branch_id,
            quantity=record.quantity,
            minimum_threshold=record.minimum_threshold,
            is_low=record.is_low,
            deficit=record.deficit,
            updated_at=record.updated_at,
        )


class StockMovementResponse(BaseModel):
    """Stock movement ledger entry."""

    id: int | None = None
    branch_id: str
    product_id: str
    movement_type: str
    quantity: float
    previous_quantity: float
    new_quantity: float
    reason: str
    reference_type: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    acting_user_id: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "StockMovementResponse":
        return cls(
            id=movement.id,
            branch_id=movement.branch_id,
            product_id=movement.product_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            previous_quantity=movement.previous_quantity,
            new_quantity=movement.new_quantity,
            reason=movement.reason.value,
            reference_type=movement.reference_type,
            reference_id=movement.reference_id,
            notes=movement.notes,
            acting_user_id=movement.acting_user_id,
            created_at=movement.created_at,
        )


class BranchStockResponse(BaseModel):
    """All stock records at one branch."""

    branch_id: str
    records: list[StockRecordResponse]
    total: int


class StockLevelResponse(BaseModel):
    """Result of setting or adjusting one stock record."""

    record: StockRecordResponse
    movement: StockMovementResponse | None = None
    created: bool = False  # True if the record did not exist before


class InitializeBranchStockResponse(BaseModel):
    """Outcome of loading opening stock at a branch."""

    branch_id: str
    created: list[StockRecordResponse]
    skipped_product_ids: list[str] = Field(
        default_factory=list, description="Products that already had a record"
    )


# --- Transfers ---


class TransferItemResponse(BaseModel):
    """Transferred product with its return progress."""

    product_id: str
    requested_quantity: float
    returned_quantity: float
    remaining_returnable: float


class TransferResponse(BaseModel):
    """Transfer request response DTO."""

    id: str
    source_branch_id: str
    destination_branch_id: str
    items: list[TransferItemResponse]
    reason: str
    requesting_user_id: str
    status: str
    requested_at: datetime
    decided_at: datetime | None = None
    deciding_user_id: str | None = None
    rejection_reason: str | None = None
    returned_quantities: dict[str, float] = Field(default_factory=dict)
    cancelled: bool = False
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    cancelling_user_id: str | None = None
    version: int

    @classmethod
    def from_entity(cls, transfer: TransferRequest) -> "TransferResponse":
        return cls(
            id=transfer.id or "",
            source_branch_id=transfer.source_branch_id,
            destination_branch_id=transfer.destination_branch_id,
            items=[
                TransferItemResponse(
                    product_id=item.product_id,
                    requested_quantity=item.requested_quantity,
                    returned_quantity=transfer.returned_quantities.get(item.product_id, 0.0),
                    remaining_returnable=transfer.remaining_returnable(item.product_id),
                )
                for item in transfer.items
            ],
            reason=transfer.reason,
            requesting_user_id=transfer.requesting_user_id,
            status=transfer.status.value,
            requested_at=transfer.requested_at,
            decided_at=transfer.decided_at,
            deciding_user_id=transfer.deciding_user_id,
            rejection_reason=transfer.rejection_reason,
            returned_quantities=dict(transfer.returned_quantities),
            cancelled=transfer.cancelled,
            cancellation_reason=transfer.cancellation_reason,
            cancelled_at=transfer.cancelled_at,
            cancelling_user_id=transfer.cancelling_user_id,
            version=transfer.version,
        )


class TransferListResponse(BaseModel):
    """List of transfers."""

    transfers: list[TransferResponse]
    total: int


class BranchTransfersResponse(BaseModel):
    """Transfers leaving and arriving at a branch."""

    branch_id: str
    outgoing: list[TransferResponse] = Field(default_factory=list)
    incoming: list[TransferResponse] = Field(default_factory=list)


class TransferNotificationResponse(BaseModel):
    """Notification to deliver to the requesting user."""

    recipient_user_id: str
    title: str
    message: str
    priority: str

    @classmethod
    def from_entity(cls, notification: TransferNotification) -> "TransferNotificationResponse":
        return cls(
            recipient_user_id=notification.recipient_user_id,
            title=notification.title,
            message=notification.message,
            priority=notification.priority.value,
        )


class TransferMutationResponse(BaseModel):
    """Transfer after a state change, plus any movements it produced."""

    transfer: TransferResponse
    movements: list[StockMovementResponse] = Field(default_factory=list)
    notification: TransferNotificationResponse | None = None


class TransferReturnResponse(BaseModel):
    """Transfer after recording returns."""

    transfer: TransferResponse
    applied: dict[str, float] = Field(
        ..., description="Quantity actually recorded per product after capping"
    )


# --- Health / Errors ---


class ProviderHealthResponse(BaseModel):
    """Dependency health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. TRANSFER_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict | None = Field(
        default=None, description="Structured context, e.g. per-product shortages"
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
