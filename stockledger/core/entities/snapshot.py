"""
Ledger snapshot: the whole engine state persisted as one unit.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from stockledger.core.entities.movement import Movement
from stockledger.core.entities.pending import BatchImportRecord, PendingPurchase, PendingSale
from stockledger.core.entities.product import Product, utc_now
from stockledger.core.entities.supplier import Supplier

SNAPSHOT_VERSION = 1


class CostingMethod(str, Enum):
    """Lot depletion policy."""

    LIFO = "LIFO"  # last in, first out
    FIFO = "FIFO"  # first in, first out
    WEIGHTED_AVERAGE = "WEIGHTED_AVERAGE"


class InventoryConfig(BaseModel):
    """Inventory configuration stored with the snapshot."""

    costing_method: CostingMethod = CostingMethod.LIFO
    suggested_margin: float = Field(default=0.4, ge=0)
    low_stock_alert: float = Field(default=5.0, ge=0)
    allow_negative_stock: bool = True
    auto_match_threshold: float = Field(default=0.9, ge=0, le=1)
    ask_match_threshold: float = Field(default=0.75, ge=0, le=1)
    fallback_by_description: bool = True

    @model_validator(mode="after")
    def check_thresholds(self) -> "InventoryConfig":
        if self.auto_match_threshold < self.ask_match_threshold:
            raise ValueError(
                "auto_match_threshold must be >= ask_match_threshold "
                f"({self.auto_match_threshold} < {self.ask_match_threshold})"
            )
        return self

    @classmethod
    def from_settings(cls, settings: Any) -> "InventoryConfig":
        """Seed the persisted config from InventorySettings."""
        return cls(
            costing_method=CostingMethod(settings.costing_method),
            suggested_margin=settings.suggested_margin,
            low_stock_alert=settings.low_stock_alert,
            allow_negative_stock=settings.allow_negative_stock,
            auto_match_threshold=settings.auto_match_threshold,
            ask_match_threshold=settings.ask_match_threshold,
            fallback_by_description=settings.fallback_by_description,
        )


class LedgerSnapshot(BaseModel):
    """Full persisted state of the ledger."""

    version: int = SNAPSHOT_VERSION
    saved_at: datetime = Field(default_factory=utc_now)
    config: InventoryConfig = Field(default_factory=InventoryConfig)
    suppliers: list[Supplier] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)
    movements: list[Movement] = Field(default_factory=list)
    description_map: dict[str, str] = Field(default_factory=dict)
    pending_sales: list[PendingSale] = Field(default_factory=list)
    pending_purchases: list[PendingPurchase] = Field(default_factory=list)
    last_import: BatchImportRecord | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat null collections in older snapshots as empty."""
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if v is not None or k == "last_import"}
        return data
