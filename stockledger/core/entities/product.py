"""
Product domain entities for the inventory catalog.

A Product owns its cost lots; stock and average cost are always derived
from the lots currently held.
"""

import uuid
from datetime import UTC, date, datetime, time

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

DEFAULT_BASE_UNIT = "UNIT"
DEFAULT_CATEGORY = "Miscellaneous"


def new_id() -> str:
    """Generate a new entity identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: date | datetime | None) -> datetime:
    """Coerce a date or naive datetime to an aware UTC datetime (now when None)."""
    if value is None:
        return utc_now()
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Presentation(BaseModel):
    """A packaging unit and how many base units it holds."""

    name: str
    factor: float = 1.0

    @field_validator("name", mode="before")
    @classmethod
    def upper_name(cls, v: str) -> str:
        return (v or "").strip().upper()


class Lot(BaseModel):
    """A quantity of one product acquired at a specific cost and date."""

    id: str = Field(default_factory=new_id)
    supplier_id: str = ""
    supplier_name: str = ""
    quantity: float  # base units
    unit_cost: float = 0.0  # per base unit
    entry_date: datetime = Field(default_factory=utc_now)
    supplier_code: str | None = None
    trace_code: str = ""  # internal traceability code

    @field_validator("entry_date")
    @classmethod
    def aware_entry_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def value(self) -> float:
        return self.quantity * self.unit_cost


class Product(BaseModel):
    """
    A catalog entry.

    `total_stock` and `average_cost` are computed over `lots` and are never
    stored; `suggested_price` is refreshed by the catalog store whenever the
    lots change.
    """

    id: str = Field(default_factory=new_id)
    description: str
    category: str = DEFAULT_CATEGORY
    code: str | None = None
    preferred_code: str | None = None  # most used supplier code
    active: bool = True

    base_unit: str = DEFAULT_BASE_UNIT
    presentations: list[Presentation] = Field(default_factory=list)
    pending_presentations: list[str] = Field(default_factory=list)

    suggested_price: float = 0.0
    lots: list[Lot] = Field(default_factory=list)

    suppliers: list[str] = Field(default_factory=list)
    last_purchase_date: datetime | None = None
    last_sale_date: datetime | None = None
    favorite: bool = False
    track_inventory: bool = True

    # Matching metadata
    keywords: list[str] = Field(default_factory=list)
    variants: list[str] = Field(default_factory=list)

    @field_validator("active", "track_inventory", mode="before")
    @classmethod
    def default_true(cls, v: object) -> object:
        return True if v is None else v

    @field_validator("presentations", "pending_presentations", "lots", mode="before")
    @classmethod
    def default_list(cls, v: object) -> object:
        return [] if v is None else v

    @model_validator(mode="after")
    def ensure_unit_defaults(self) -> "Product":
        """Guarantee a base unit and its factor-1 presentation."""
        self.base_unit = (self.base_unit or "").strip().upper() or DEFAULT_BASE_UNIT
        base = [p for p in self.presentations if p.name == self.base_unit]
        if not base:
            self.presentations.append(Presentation(name=self.base_unit, factor=1.0))
        for presentation in base:
            presentation.factor = 1.0
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_stock(self) -> float:
        """Sum of lot quantities in base units."""
        return sum(lot.quantity for lot in self.lots)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_cost(self) -> float:
        """Weighted average unit cost over current lots (0 when no stock)."""
        stock = self.total_stock
        if stock <= 0:
            return 0.0
        return sum(lot.value for lot in self.lots) / stock

    @property
    def total_value(self) -> float:
        """Total inventory value = stock * average cost."""
        return self.total_stock * self.average_cost

    def find_lot(self, lot_id: str) -> Lot | None:
        for lot in self.lots:
            if lot.id == lot_id:
                return lot
        return None

    def next_trace_code(self) -> str:
        """Traceability code for the next lot of this product."""
        return f"{self.id}-{len(self.lots) + 1:03d}"
