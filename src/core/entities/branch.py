"""Branch entity."""

from datetime import datetime

from pydantic import BaseModel, Field


class Branch(BaseModel):
    """A store or warehouse holding its own stock records."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    branch_type: str = "store"  # store, warehouse, workshop
    address: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
