"""Read-side report entities (Kardex, inventory summary)."""

from datetime import datetime

from pydantic import BaseModel, Field

from stockledger.core.entities.movement import MovementType


class KardexRow(BaseModel):
    """One movement with the running balance after it."""

    date: datetime
    document: str
    movement_type: MovementType
    quantity: float
    unit_cost: float
    value: float
    balance_quantity: float
    balance_value: float


class KardexReport(BaseModel):
    """Chronological running-balance report for one product."""

    product_id: str
    description: str
    code: str
    rows: list[KardexRow] = Field(default_factory=list)
    final_quantity: float = 0.0
    final_value: float = 0.0


class CategorySummary(BaseModel):
    """Aggregates for one category."""

    quantity: float = 0.0
    value: float = 0.0
    products: int = 0


class InventorySummary(BaseModel):
    """Catalog-wide stock overview."""

    total_products: int = 0
    total_categories: int = 0
    total_value: float = 0.0
    low_stock: int = 0
    out_of_stock: int = 0
    categories: dict[str, CategorySummary] = Field(default_factory=dict)
