"""
Input document entities (purchase and sale documents).

Documents come from outside the engine; anything that does not have the
expected shape is treated as not applicable rather than as an error.
"""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator


class ItemKind(str, Enum):
    """Kind of a document line. Only goods move inventory."""

    GOODS = "goods"
    SERVICE = "service"
    GOODS_AND_SERVICE = "goods_and_service"
    OTHER = "other"


# Numeric item kinds used by electronic tax documents
_ITEM_KIND_CODES = {
    1: ItemKind.GOODS,
    2: ItemKind.SERVICE,
    3: ItemKind.GOODS_AND_SERVICE,
    4: ItemKind.OTHER,
}


class DocumentLine(BaseModel):
    """A single line item of a purchase or sale document."""

    kind: ItemKind = ItemKind.GOODS
    quantity: float
    unit_price: float = 0.0
    description: str
    code: str | None = None

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return _ITEM_KIND_CODES.get(v, ItemKind.OTHER)
        return v

    @field_validator("code", mode="before")
    @classmethod
    def blank_code(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def is_goods(self) -> bool:
        return self.kind == ItemKind.GOODS

    @property
    def applies(self) -> bool:
        """True when the line should move inventory."""
        return self.is_goods and self.quantity > 0


class Party(BaseModel):
    """Issuer or receiver of a document."""

    name: str
    tax_id: str | None = None
    registration_number: str | None = None
    activity: str | None = None


class PurchaseDocument(BaseModel):
    """A purchase document received from a supplier."""

    reference: str
    issue_date: date
    supplier: Party
    lines: list[DocumentLine] = Field(default_factory=list)

    @field_validator("reference", mode="before")
    @classmethod
    def strip_reference(cls, v: Any) -> Any:
        return str(v).strip() if v is not None else v

    @classmethod
    def from_payload(cls, payload: Any) -> "PurchaseDocument | None":
        """Parse a raw payload, returning None when it is not applicable."""
        if isinstance(payload, cls):
            return payload
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return None


class SaleDocument(BaseModel):
    """A sale document issued to a customer."""

    reference: str | None = None
    issue_date: date | None = None
    customer_name: str = "CUSTOMER"
    lines: list[DocumentLine] = Field(default_factory=list)

    @field_validator("customer_name", mode="before")
    @classmethod
    def default_customer(cls, v: Any) -> Any:
        return v or "CUSTOMER"

    @classmethod
    def from_payload(cls, payload: Any) -> "SaleDocument | None":
        """Parse a raw payload, returning None when it is not applicable."""
        if isinstance(payload, cls):
            return payload
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return None
