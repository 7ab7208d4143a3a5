"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Products ---


class CreateProductRequest(BaseModel):
    """Request to create a catalog product."""

    description: str = Field(..., min_length=1, description="Product description")
    category: str | None = Field(
        default=None,
        description="Category (guessed from the description when omitted)",
        examples=["Electrical", "Plumbing"],
    )
    supplier_code: str | None = Field(default=None, description="Preferred supplier code")


class UpdateProductRequest(BaseModel):
    """Master-data update. Stock is never changed through this request."""

    description: str | None = Field(default=None, min_length=1)
    category: str | None = None
    code: str | None = None
    preferred_code: str | None = None
    favorite: bool | None = None
    track_inventory: bool | None = None


class SetBaseUnitRequest(BaseModel):
    """Request to change a product's base unit."""

    unit: str = Field(..., min_length=1, examples=["UNIT", "METER"])


class SetPresentationRequest(BaseModel):
    """Request to set how many base units one presentation holds."""

    name: str = Field(..., min_length=1, examples=["BOX", "DOZEN"])
    factor: float = Field(..., description="Base units per presentation (must be > 0)")


class CatalogImportRequest(BaseModel):
    """Master-data catalog import (no stock is moved)."""

    items: list[dict[str, Any]] = Field(default_factory=list)


# --- Manual stock adjustments ---


class StockEntryRequest(BaseModel):
    """Manual stock entry in base units."""

    product_id: str = Field(..., description="Product ID")
    quantity: float = Field(..., gt=0, description="Quantity to add")
    unit_cost: float | None = Field(
        default=None,
        ge=0,
        description="Cost per base unit (defaults to the current average cost)",
    )
    date: datetime | None = Field(default=None, description="Backdated movement date")
    reference: str | None = Field(default=None, description="Document reference")
    supplier_name: str | None = Field(default=None, description="Source of the stock")


class StockExitRequest(BaseModel):
    """Manual stock exit in base units."""

    product_id: str = Field(..., description="Product ID")
    quantity: float = Field(..., gt=0, description="Quantity to remove")
    date: datetime | None = Field(default=None, description="Backdated movement date")
    reference: str | None = Field(default=None, description="Document reference")
    reason: str | None = Field(default=None, description="Reason for the exit")


# --- Purchases and sales ---


class LineConfirmationRequest(BaseModel):
    """User decision for one purchase document line."""

    line_index: int = Field(..., ge=0, description="Zero-based line index")
    action: Literal["create", "update", "link", "skip"]
    product_id: str | None = Field(default=None, description="Target product for link/update")
    remember: bool = Field(default=True, description="Remember description -> product")
    category: str | None = Field(default=None, description="Category for create")
    factor: float | None = Field(
        default=None,
        gt=0,
        description="Base units per presentation detected on the line",
    )


class ImportPurchaseRequest(BaseModel):
    """Purchase document import.

    The document is passed through as received; documents without the
    expected shape are reported as not applicable rather than rejected.
    """

    document: dict[str, Any] = Field(..., description="Purchase document payload")
    confirmations: list[LineConfirmationRequest] | None = Field(
        default=None,
        description="Per-line decisions; omit for automatic reconciliation",
    )


class ImportBatchRequest(BaseModel):
    """Several purchase documents imported as one revertible batch."""

    documents: list[dict[str, Any]] = Field(..., min_length=1)


class ApplySaleRequest(BaseModel):
    """Sale document to deplete stock."""

    document: dict[str, Any] = Field(..., description="Sale document payload")


class RevertSaleRequest(BaseModel):
    """Reverse the exits of one sale document."""

    document_reference: str = Field(..., min_length=1)


# --- Pending reconciliation ---


class ResolvePendingRequest(BaseModel):
    """Link a pending line to a product, or create one from it.

    For pending purchases, omitting product_id creates a new product.
    """

    product_id: str | None = Field(default=None, description="Chosen product")
    remember: bool = Field(default=True, description="Remember description -> product")
    category: str | None = Field(default=None, description="Category when creating")


# --- Configuration ---


class UpdateInventoryConfigRequest(BaseModel):
    """Partial update of the persisted inventory configuration."""

    costing_method: Literal["LIFO", "FIFO", "WEIGHTED_AVERAGE"] | None = None
    suggested_margin: float | None = None
    low_stock_alert: float | None = None
    allow_negative_stock: bool | None = None
    auto_match_threshold: float | None = None
    ask_match_threshold: float | None = None
    fallback_by_description: bool | None = None
