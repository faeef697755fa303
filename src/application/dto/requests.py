"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases; input is checked
here once so use cases can trust field shapes.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.entities.transfer import TransferDecision


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# --- Branches ---


class CreateBranchRequest(BaseModel):
    """Request to register a branch."""

    id: str = Field(..., min_length=1, description="Caller-chosen branch ID", examples=["central"])
    name: str = Field(..., min_length=1, description="Display name", examples=["Central Store"])
    branch_type: str = Field(default="store", description="store, warehouse, workshop")
    address: str | None = Field(default=None, description="Street address")

    @field_validator("id", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)


# --- Transfers ---


class TransferItemRequest(BaseModel):
    """A product and quantity to move."""

    product_id: str = Field(..., min_length=1, description="Product ID")
    quantity: float = Field(..., gt=0, description="Quantity to transfer")

    @field_validator("product_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)


class CreateTransferRequest(BaseModel):
    """Request to create a pending transfer between two branches."""

    source_branch_id: str = Field(..., min_length=1, description="Branch giving the stock")
    destination_branch_id: str = Field(
        ..., min_length=1, description="Branch receiving the stock"
    )
    items: list[TransferItemRequest] = Field(
        ..., min_length=1, description="Products to move, each listed once"
    )
    reason: str = Field(..., description="Why the transfer is needed")
    requesting_user_id: str = Field(..., min_length=1, description="Requesting user")

    @field_validator("source_branch_id", "destination_branch_id", "reason", "requesting_user_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @model_validator(mode="after")
    def check_transfer_shape(self) -> "CreateTransferRequest":
        if self.source_branch_id == self.destination_branch_id:
            raise ValueError("source and destination branch must differ")
        product_ids = [item.product_id for item in self.items]
        duplicates = sorted({p for p in product_ids if product_ids.count(p) > 1})
        if duplicates:
            raise ValueError(f"products listed more than once: {', '.join(duplicates)}")
        return self


class DecideTransferRequest(BaseModel):
    """Approve or reject a pending transfer."""

    decision: TransferDecision = Field(..., description="approved or rejected")
    deciding_user_id: str | None = Field(default=None, description="User deciding")
    rejection_reason: str | None = Field(
        default=None, description="Optional explanation when rejecting"
    )

    @field_validator("deciding_user_id", "rejection_reason")
    @classmethod
    def blank_is_none(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class ReturnEntryRequest(BaseModel):
    """Quantity of one product coming back."""

    product_id: str = Field(..., min_length=1, description="Product ID")
    quantity: float = Field(..., gt=0, description="Quantity returned")

    @field_validator("product_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)


class RecordReturnRequest(BaseModel):
    """Returns recorded against an approved transfer."""

    returns: list[ReturnEntryRequest] = Field(..., min_length=1)


class CancelTransferRequest(BaseModel):
    """Cancel an approved transfer and reverse its stock effect."""

    reason: str = Field(..., description="Why the transfer is cancelled")
    cancelling_user_id: str | None = Field(default=None, description="User cancelling")

    @field_validator("reason")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("cancelling_user_id")
    @classmethod
    def blank_user_is_none(cls, v: str | None) -> str | None:
        return _strip_optional(v)


# --- Stock ---


class SetStockLevelRequest(BaseModel):
    """Set quantity and/or minimum threshold for a product at a branch."""

    quantity: float | None = Field(default=None, ge=0, description="New on-hand quantity")
    minimum_threshold: float | None = Field(
        default=None, ge=0, description="Low-stock threshold"
    )
    acting_user_id: str | None = Field(default=None)
    notes: str | None = Field(default=None)

    @model_validator(mode="after")
    def check_something_to_set(self) -> "SetStockLevelRequest":
        if self.quantity is None and self.minimum_threshold is None:
            raise ValueError("quantity or minimum_threshold is required")
        return self


class AdjustStockRequest(BaseModel):
    """Apply a signed correction to an existing stock record."""

    branch_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    adjustment: float = Field(..., description="Positive adds stock, negative removes it")
    reason: str = Field(..., description="Why the stock is adjusted")
    acting_user_id: str | None = Field(default=None)

    @field_validator("branch_id", "product_id", "reason")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("adjustment")
    @classmethod
    def non_zero(cls, v: float) -> float:
        if v == 0:
            raise ValueError("adjustment must not be zero")
        return v


class InitialStockItem(BaseModel):
    """Opening stock for one product."""

    product_id: str = Field(..., min_length=1)
    quantity: float = Field(default=0.0, ge=0)
    minimum_threshold: float | None = Field(default=None, ge=0)

    @field_validator("product_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)


class InitializeBranchStockRequest(BaseModel):
    """Create stock records for products a branch does not carry yet."""

    branch_id: str = Field(..., min_length=1)
    products: list[InitialStockItem] = Field(..., min_length=1)
    acting_user_id: str | None = Field(default=None)

    @field_validator("branch_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)
