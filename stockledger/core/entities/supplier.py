"""Supplier entity."""

from datetime import datetime

from pydantic import BaseModel, Field

from stockledger.core.entities.product import new_id, utc_now


class Supplier(BaseModel):
    """A supplier, created lazily on the first purchase under its name."""

    id: str = Field(default_factory=new_id)
    name: str
    tax_id: str | None = None  # NIT
    registration_number: str | None = None  # NRC
    category: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    last_purchase_date: datetime = Field(default_factory=utc_now)
    total_purchases: float = 0.0
