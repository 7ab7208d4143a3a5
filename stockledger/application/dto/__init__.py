"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockledger.application.dto.requests import (
    ApplySaleRequest,
    CatalogImportRequest,
    CreateProductRequest,
    ImportBatchRequest,
    ImportPurchaseRequest,
    LineConfirmationRequest,
    ResolvePendingRequest,
    RevertSaleRequest,
    SetBaseUnitRequest,
    SetPresentationRequest,
    StockEntryRequest,
    StockExitRequest,
    UpdateInventoryConfigRequest,
    UpdateProductRequest,
)
from stockledger.application.dto.responses import (
    CatalogImportResponse,
    ErrorResponse,
    HealthResponse,
    ImportResultResponse,
    InventoryConfigResponse,
    InventorySummaryResponse,
    KardexResponse,
    KardexRowResponse,
    LotResponse,
    MovementResponse,
    PendingListResponse,
    PendingPurchaseResponse,
    PendingSaleResponse,
    ProductListResponse,
    ProductResponse,
    ResolvePendingResponse,
    RevertResultResponse,
    SaleResultResponse,
    StockAdjustmentResponse,
)

__all__ = [
    # Requests
    "CreateProductRequest",
    "UpdateProductRequest",
    "SetBaseUnitRequest",
    "SetPresentationRequest",
    "CatalogImportRequest",
    "StockEntryRequest",
    "StockExitRequest",
    "LineConfirmationRequest",
    "ImportPurchaseRequest",
    "ImportBatchRequest",
    "ApplySaleRequest",
    "RevertSaleRequest",
    "ResolvePendingRequest",
    "UpdateInventoryConfigRequest",
    # Responses
    "ProductResponse",
    "ProductListResponse",
    "LotResponse",
    "MovementResponse",
    "StockAdjustmentResponse",
    "CatalogImportResponse",
    "InventorySummaryResponse",
    "ImportResultResponse",
    "SaleResultResponse",
    "RevertResultResponse",
    "PendingPurchaseResponse",
    "PendingSaleResponse",
    "PendingListResponse",
    "ResolvePendingResponse",
    "KardexResponse",
    "KardexRowResponse",
    "InventoryConfigResponse",
    "HealthResponse",
    "ErrorResponse",
]
