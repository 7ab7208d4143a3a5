"""
Pending reconciliation entities.

A pending entry holds a document line the matcher could not resolve with
confidence, together with its ranked candidates.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from stockledger.core.entities.product import new_id, utc_now


class MatchCandidate(BaseModel):
    """A candidate product for a pending line."""

    product_id: str
    description: str
    score: float


class PendingSale(BaseModel):
    """A sale line waiting for a product decision."""

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utc_now)
    document_reference: str
    customer_name: str
    description: str
    quantity: float
    unit_price: float = 0.0
    candidates: list[MatchCandidate] = Field(default_factory=list)


class PendingPurchase(BaseModel):
    """A purchase line waiting for a product decision."""

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utc_now)
    document_reference: str
    supplier_name: str
    document_date: date
    description: str
    code: str = ""
    quantity: float  # in the invoiced presentation
    presentation: str = "UNIT"
    unit_price: float = 0.0  # per presentation, as invoiced
    candidates: list[MatchCandidate] = Field(default_factory=list)


class BatchImportRecord(BaseModel):
    """The most recent purchase import, used to bound reversal."""

    document_references: list[str]
    imported_at: datetime = Field(default_factory=utc_now)
    created_product_ids: list[str] = Field(default_factory=list)
