"""Stock domain entities: per-branch quantities and the movement ledger."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

# Float tolerance when comparing quantities
QUANTITY_EPSILON = 1e-9


class MovementType(str, Enum):
    """Direction of a stock movement."""

    IN = "in"
    OUT = "out"


class MovementReason(str, Enum):
    """Why a stock quantity changed."""

    TRANSFER = "transfer"
    TRANSFER_CANCELLATION = "transfer_cancellation"
    ADJUSTMENT = "adjustment"
    INITIAL_LOAD = "initial_load"


class StockRecord(BaseModel):
    """Quantity of one product held at one branch."""

    id: int | None = None
    product_id: str
    branch_id: str
    quantity: float = Field(default=0.0, ge=0)
    minimum_threshold: float = Field(default=5.0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_low(self) -> bool:
        """At or below the minimum threshold."""
        return self.quantity <= self.minimum_threshold

    @property
    def deficit(self) -> float:
        return self.minimum_threshold - self.quantity


class StockChange(BaseModel):
    """Outcome of applying one delta to a stock record."""

    previous_quantity: float
    record: StockRecord

    @property
    def delta(self) -> float:
        return self.record.quantity - self.previous_quantity


class StockShortage(BaseModel):
    """A product whose available quantity does not cover a request."""

    product_id: str
    branch_id: str
    requested: float
    available: float

    @property
    def shortfall(self) -> float:
        return self.requested - self.available


class StockMovement(BaseModel):
    """
    Immutable audit entry for a single stock change.

    new_quantity must equal previous_quantity plus (in) or minus (out)
    quantity.
    """

    id: int | None = None
    branch_id: str
    product_id: str
    movement_type: MovementType
    quantity: float = Field(..., ge=0)
    previous_quantity: float = Field(..., ge=0)
    new_quantity: float = Field(..., ge=0)
    reason: MovementReason
    reference_type: str | None = None  # e.g. "transfer"
    reference_id: str | None = None
    notes: str | None = None
    acting_user_id: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def check_balance(self) -> "StockMovement":
        sign = 1 if self.movement_type == MovementType.IN else -1
        expected = self.previous_quantity + sign * self.quantity
        if abs(expected - self.new_quantity) > QUANTITY_EPSILON:
            raise ValueError(
                f"{self.movement_type.value} movement of {self.quantity} from "
                f"{self.previous_quantity} cannot end at {self.new_quantity}"
            )
        return self

    @classmethod
    def from_change(
        cls,
        change: StockChange,
        reason: MovementReason,
        reference_type: str | None = None,
        reference_id: str | None = None,
        notes: str | None = None,
        acting_user_id: str | None = None,
        movement_type: MovementType | None = None,
    ) -> "StockMovement":
        """
        Build the ledger entry describing an applied change.

        movement_type defaults to the direction of the applied delta. Pass it
        explicitly when a clamped decrement may have applied nothing.
        """
        delta = change.delta
        if movement_type is None:
            movement_type = MovementType.IN if delta >= 0 else MovementType.OUT
        return cls(
            branch_id=change.record.branch_id,
            product_id=change.record.product_id,
            movement_type=movement_type,
            quantity=abs(delta),
            previous_quantity=change.previous_quantity,
            new_quantity=change.record.quantity,
            reason=reason,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            acting_user_id=acting_user_id,
        )
