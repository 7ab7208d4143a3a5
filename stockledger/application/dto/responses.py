"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from stockledger.core.entities import (
    InventoryConfig,
    KardexReport,
    Lot,
    Movement,
    PendingPurchase,
    PendingSale,
    Product,
)

# --- Products ---


class PresentationResponse(BaseModel):
    """Packaging unit and its base-unit factor."""

    name: str
    factor: float


class LotResponse(BaseModel):
    """Cost lot held by a product."""

    id: str
    supplier_name: str
    quantity: float
    unit_cost: float
    entry_date: datetime
    supplier_code: str | None = None
    trace_code: str

    @classmethod
    def from_entity(cls, lot: Lot) -> "LotResponse":
        return cls(
            id=lot.id,
            supplier_name=lot.supplier_name,
            quantity=lot.quantity,
            unit_cost=lot.unit_cost,
            entry_date=lot.entry_date,
            supplier_code=lot.supplier_code,
            trace_code=lot.trace_code,
        )


class ProductResponse(BaseModel):
    """Product response DTO."""

    id: str
    description: str
    category: str
    code: str | None = None
    preferred_code: str | None = None
    active: bool
    base_unit: str
    presentations: list[PresentationResponse] = Field(default_factory=list)
    pending_presentations: list[str] = Field(default_factory=list)
    total_stock: float
    average_cost: float
    suggested_price: float
    total_value: float
    suppliers: list[str] = Field(default_factory=list)
    last_purchase_date: datetime | None = None
    last_sale_date: datetime | None = None
    favorite: bool = False
    track_inventory: bool = True
    variants: list[str] = Field(default_factory=list)
    lots: list[LotResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            description=product.description,
            category=product.category,
            code=product.code,
            preferred_code=product.preferred_code,
            active=product.active,
            base_unit=product.base_unit,
            presentations=[
                PresentationResponse(name=p.name, factor=p.factor) for p in product.presentations
            ],
            pending_presentations=list(product.pending_presentations),
            total_stock=product.total_stock,
            average_cost=product.average_cost,
            suggested_price=product.suggested_price,
            total_value=product.total_value,
            suppliers=list(product.suppliers),
            last_purchase_date=product.last_purchase_date,
            last_sale_date=product.last_sale_date,
            favorite=product.favorite,
            track_inventory=product.track_inventory,
            variants=list(product.variants),
            lots=[LotResponse.from_entity(lot) for lot in product.lots],
        )


class ProductListResponse(BaseModel):
    """List of products."""

    products: list[ProductResponse]
    total: int


class CatalogImportResponse(BaseModel):
    """Counts of a catalog import."""

    created: int
    updated: int
    skipped: int


class CategorySummaryResponse(BaseModel):
    quantity: float
    value: float
    products: int


class InventorySummaryResponse(BaseModel):
    """Catalog-wide stock overview."""

    total_products: int
    total_categories: int
    total_value: float
    low_stock: int
    out_of_stock: int
    categories: dict[str, CategorySummaryResponse] = Field(default_factory=dict)


# --- Movements ---


class MovementResponse(BaseModel):
    """Ledger movement response DTO."""

    id: str
    product_id: str
    movement_type: str
    quantity: float
    unit: str | None = None
    original_quantity: float | None = None
    conversion_factor: float | None = None
    unit_cost: float | None = None
    unit_price: float | None = None
    lot_id: str | None = None
    document_reference: str
    date: datetime
    supplier_name: str | None = None
    customer_name: str | None = None

    @classmethod
    def from_entity(cls, movement: Movement) -> "MovementResponse":
        return cls(
            id=movement.id,
            product_id=movement.product_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            unit=movement.unit,
            original_quantity=movement.original_quantity,
            conversion_factor=movement.conversion_factor,
            unit_cost=movement.unit_cost,
            unit_price=movement.unit_price,
            lot_id=movement.lot_id,
            document_reference=movement.document_reference,
            date=movement.date,
            supplier_name=movement.supplier_name,
            customer_name=movement.customer_name,
        )


class StockAdjustmentResponse(BaseModel):
    """Result of a manual entry or exit."""

    product: ProductResponse
    movements: list[MovementResponse]


# --- Purchases and sales ---


class ImportResultResponse(BaseModel):
    """Result of a purchase import."""

    document_reference: str
    applicable: bool = True
    total_lines: int
    created: int
    updated: int
    pending: int
    skipped: int
    deferred: int = 0
    created_product_ids: list[str] = Field(default_factory=list)


class SaleResultResponse(BaseModel):
    """Result of applying a sale document."""

    document_reference: str
    applicable: bool = True
    applied: int = 0
    pending: int = 0
    skipped: int = 0
    movements: list[MovementResponse] = Field(default_factory=list)


class RevertResultResponse(BaseModel):
    """Result of reverting an import or a sale."""

    document_reference: str
    movements_removed: int
    lots_removed: int = 0
    lots_restored: int = 0
    products_affected: int
    products_deleted: int = 0


# --- Pending reconciliation ---


class MatchCandidateResponse(BaseModel):
    product_id: str
    description: str
    score: float


class PendingPurchaseResponse(BaseModel):
    """Purchase line waiting for a decision."""

    id: str
    created_at: datetime
    document_reference: str
    supplier_name: str
    document_date: date
    description: str
    code: str
    quantity: float
    presentation: str
    unit_price: float
    candidates: list[MatchCandidateResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, pending: PendingPurchase) -> "PendingPurchaseResponse":
        return cls.model_validate(pending.model_dump())


class PendingSaleResponse(BaseModel):
    """Sale line waiting for a decision."""

    id: str
    created_at: datetime
    document_reference: str
    customer_name: str
    description: str
    quantity: float
    unit_price: float
    candidates: list[MatchCandidateResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, pending: PendingSale) -> "PendingSaleResponse":
        return cls.model_validate(pending.model_dump())


class PendingListResponse(BaseModel):
    """Both pending queues."""

    purchases: list[PendingPurchaseResponse] = Field(default_factory=list)
    sales: list[PendingSaleResponse] = Field(default_factory=list)


class ResolvePendingResponse(BaseModel):
    """Outcome of resolving a pending entry."""

    pending_id: str
    resolved: bool = Field(..., description="False when the entry was already gone")
    product_id: str | None = None
    movements: list[MovementResponse] = Field(default_factory=list)


# --- Kardex ---


class KardexRowResponse(BaseModel):
    date: datetime
    document: str
    movement_type: str
    quantity: float
    unit_cost: float
    value: float
    balance_quantity: float
    balance_value: float


class KardexResponse(BaseModel):
    """Running-balance report for one product."""

    product_id: str
    description: str
    code: str
    rows: list[KardexRowResponse] = Field(default_factory=list)
    final_quantity: float
    final_value: float

    @classmethod
    def from_report(cls, report: KardexReport) -> "KardexResponse":
        return cls(
            product_id=report.product_id,
            description=report.description,
            code=report.code,
            rows=[
                KardexRowResponse(
                    date=row.date,
                    document=row.document,
                    movement_type=row.movement_type.value,
                    quantity=row.quantity,
                    unit_cost=row.unit_cost,
                    value=row.value,
                    balance_quantity=row.balance_quantity,
                    balance_value=row.balance_value,
                )
                for row in report.rows
            ],
            final_quantity=report.final_quantity,
            final_value=report.final_value,
        )


# --- Configuration ---


class InventoryConfigResponse(BaseModel):
    """Persisted inventory configuration."""

    costing_method: str
    suggested_margin: float
    low_stock_alert: float
    allow_negative_stock: bool
    auto_match_threshold: float
    ask_match_threshold: float
    fallback_by_description: bool

    @classmethod
    def from_entity(cls, config: InventoryConfig) -> "InventoryConfigResponse":
        data = config.model_dump()
        data["costing_method"] = config.costing_method.value
        return cls(**data)


# --- System ---


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    storage_backend: str
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. PRODUCT_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
