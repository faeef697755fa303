"""
Transfer request entities.

A transfer moves a snapshot of product quantities from a source branch to a
destination branch. Its status only ever moves forward:

    pending -> approved -> cancelled
    pending -> rejected
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.entities.stock import QUANTITY_EPSILON
from src.core.exceptions import (
    InvalidStateTransitionError,
    NothingToReturnError,
    ValidationError,
)


class TransferStatus(str, Enum):
    """Lifecycle state of a transfer."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[TransferStatus, frozenset[TransferStatus]] = {
    TransferStatus.PENDING: frozenset({TransferStatus.APPROVED, TransferStatus.REJECTED}),
    TransferStatus.APPROVED: frozenset({TransferStatus.CANCELLED}),
    TransferStatus.REJECTED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
}


class TransferDecision(str, Enum):
    """Outcome chosen for a pending transfer."""

    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def target_status(self) -> TransferStatus:
        return TransferStatus(self.value)


class NotificationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


class TransferItem(BaseModel):
    """Requested quantity of one product, frozen at creation."""

    model_config = ConfigDict(frozen=True)

    product_id: str = Field(..., min_length=1)
    requested_quantity: float = Field(..., gt=0)


class TransferNotification(BaseModel):
    """Message for the requesting user once a transfer is decided."""

    recipient_user_id: str
    title: str
    message: str
    priority: NotificationPriority
    transfer_id: str


class TransferRequest(BaseModel):
    """A request to move stock between two branches."""

    id: str | None = None
    source_branch_id: str = Field(..., min_length=1)
    destination_branch_id: str = Field(..., min_length=1)
    items: list[TransferItem] = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    requesting_user_id: str

    status: TransferStatus = TransferStatus.PENDING
    requested_at: datetime = Field(default_factory=datetime.utcnow)

    # Decision
    decided_at: datetime | None = None
    deciding_user_id: str | None = None
    rejection_reason: str | None = None

    # Returns: product_id -> cumulative returned quantity
    returned_quantities: dict[str, float] = Field(default_factory=dict)

    # Cancellation
    cancelled: bool = False
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    cancelling_user_id: str | None = None

    # Optimistic concurrency token, bumped by every stored update
    version: int = 0
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def check_consistency(self) -> "TransferRequest":
        if self.source_branch_id == self.destination_branch_id:
            raise ValueError("source and destination branch must differ")
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("each product may appear only once in a transfer")
        for product_id, returned in self.returned_quantities.items():
            requested = self.quantity_for(product_id)
            if requested is None or returned > requested + QUANTITY_EPSILON:
                raise ValueError(
                    f"returned quantity for '{product_id}' exceeds the transferred quantity"
                )
        return self

    def quantity_for(self, product_id: str) -> float | None:
        """Requested quantity for a product, or None if not part of the transfer."""
        for item in self.items:
            if item.product_id == product_id:
                return item.requested_quantity
        return None

    def remaining_returnable(self, product_id: str) -> float:
        requested = self.quantity_for(product_id) or 0.0
        return max(0.0, requested - self.returned_quantities.get(product_id, 0.0))

    def ensure_transition(self, target: TransferStatus, action: str) -> None:
        """Raise InvalidStateTransitionError unless moving to target is allowed."""
        if target not in ALLOWED_TRANSITIONS[self.status] or self.cancelled:
            raise InvalidStateTransitionError(
                transfer_id=self.id or "<new>",
                current_status=self.status.value,
                action=action,
            )

    def approve(self, user_id: str, at: datetime | None = None) -> None:
        self.ensure_transition(TransferStatus.APPROVED, "approve")
        self.status = TransferStatus.APPROVED
        self.deciding_user_id = user_id
        self.decided_at = at or datetime.utcnow()

    def reject(
        self, user_id: str, reason: str | None = None, at: datetime | None = None
    ) -> None:
        self.ensure_transition(TransferStatus.REJECTED, "reject")
        self.status = TransferStatus.REJECTED
        self.deciding_user_id = user_id
        self.decided_at = at or datetime.utcnow()
        if reason:
            self.rejection_reason = reason

    def cancel(self, user_id: str, reason: str, at: datetime | None = None) -> None:
        self.ensure_transition(TransferStatus.CANCELLED, "cancel")
        if not reason or not reason.strip():
            raise ValidationError("reason", "Cancellation reason is required")
        self.status = TransferStatus.CANCELLED
        self.cancelled = True
        self.cancellation_reason = reason.strip()
        self.cancelling_user_id = user_id
        self.cancelled_at = at or datetime.utcnow()

    def apply_returns(self, returns: list[tuple[str, float]]) -> dict[str, float]:
        """
        Record returned quantities, capped at what is still outstanding.

        Entries are applied in order, so a product listed twice accumulates.
        Stock records are not touched; this only tracks the returned counter.

        Args:
            returns: (product_id, quantity) pairs

        Returns:
            Mapping of product_id to the quantity actually applied

        Raises:
            InvalidStateTransitionError: Transfer is not approved
            ValidationError: A product is not part of this transfer
            NothingToReturnError: No entry changed any counter
        """
        if self.status != TransferStatus.APPROVED or self.cancelled:
            raise InvalidStateTransitionError(
                transfer_id=self.id or "<new>",
                current_status=self.status.value,
                action="record returns for",
            )

        for product_id, _ in returns:
            if self.quantity_for(product_id) is None:
                raise ValidationError(
                    "returns",
                    f"Product '{product_id}' is not part of this transfer",
                    product_id,
                )

        updated = dict(self.returned_quantities)
        applied: dict[str, float] = {}
        for product_id, quantity in returns:
            requested = self.quantity_for(product_id) or 0.0
            already = updated.get(product_id, 0.0)
            step = max(0.0, min(quantity, requested - already))
            if step > 0:
                updated[product_id] = already + step
                applied[product_id] = applied.get(product_id, 0.0) + step

        if not applied:
            raise NothingToReturnError(self.id or "<new>")

        self.returned_quantities = updated
        return applied

    def build_notification(self) -> TransferNotification:
        """Notification for the requester describing the decision."""
        approved = self.status == TransferStatus.APPROVED
        verb = "approved" if approved else "rejected"
        message = (
            f"Your transfer from branch {self.source_branch_id} to branch "
            f"{self.destination_branch_id} was {verb}."
        )
        if not approved and self.rejection_reason:
            message += f" Reason: {self.rejection_reason}"
        return TransferNotification(
            recipient_user_id=self.requesting_user_id,
            title=f"Transfer {verb}",
            message=message,
            priority=NotificationPriority.HIGH if approved else NotificationPriority.MEDIUM,
            transfer_id=self.id or "",
        )
