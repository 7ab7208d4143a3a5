"""Core domain entities."""

from stockledger.core.entities.document import (
    DocumentLine,
    ItemKind,
    Party,
    PurchaseDocument,
    SaleDocument,
)
from stockledger.core.entities.movement import Movement, MovementType
from stockledger.core.entities.pending import (
    BatchImportRecord,
    MatchCandidate,
    PendingPurchase,
    PendingSale,
)
from stockledger.core.entities.product import (
    DEFAULT_BASE_UNIT,
    DEFAULT_CATEGORY,
    Lot,
    Presentation,
    Product,
)
from stockledger.core.entities.report import (
    CategorySummary,
    InventorySummary,
    KardexReport,
    KardexRow,
)
from stockledger.core.entities.snapshot import (
    CostingMethod,
    InventoryConfig,
    LedgerSnapshot,
)
from stockledger.core.entities.supplier import Supplier

__all__ = [
    # Catalog entities
    "Product",
    "Lot",
    "Presentation",
    "DEFAULT_BASE_UNIT",
    "DEFAULT_CATEGORY",
    "Supplier",
    # Ledger entities
    "Movement",
    "MovementType",
    # Reconciliation entities
    "MatchCandidate",
    "PendingSale",
    "PendingPurchase",
    "BatchImportRecord",
    # Documents
    "DocumentLine",
    "ItemKind",
    "Party",
    "PurchaseDocument",
    "SaleDocument",
    # Snapshot
    "CostingMethod",
    "InventoryConfig",
    "LedgerSnapshot",
    # Reports
    "KardexRow",
    "KardexReport",
    "CategorySummary",
    "InventorySummary",
]
