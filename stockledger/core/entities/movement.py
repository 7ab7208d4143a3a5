"""Ledger movement entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockledger.core.entities.product import as_utc, new_id, utc_now


class MovementType(str, Enum):
    """Types of stock movements."""

    ENTRY = "entry"
    EXIT = "exit"


class Movement(BaseModel):
    """
    An append-only ledger entry recording one quantity change.

    Movements are frozen; reversal deletes them instead of editing.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    product_id: str
    movement_type: MovementType
    quantity: float  # base units, always positive
    unit: str | None = None  # presentation the document used
    original_quantity: float | None = None
    conversion_factor: float | None = None
    unit_cost: float | None = None
    unit_price: float | None = None
    lot_id: str | None = None
    document_reference: str = ""
    date: datetime = Field(default_factory=utc_now)
    supplier_name: str | None = None
    customer_name: str | None = None

    @field_validator("date")
    @classmethod
    def aware_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_entry(self) -> bool:
        return self.movement_type == MovementType.ENTRY
