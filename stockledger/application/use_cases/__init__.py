"""Application use cases."""

from stockledger.application.use_cases.adjust_stock import (
    AdjustStockUseCase,
    StockAdjustmentResult,
)
from stockledger.application.use_cases.apply_sale import ApplySaleUseCase
from stockledger.application.use_cases.import_purchase import ImportPurchaseUseCase
from stockledger.application.use_cases.inventory_config import InventoryConfigUseCase
from stockledger.application.use_cases.kardex import KardexUseCase
from stockledger.application.use_cases.manage_product import ManageProductUseCase
from stockledger.application.use_cases.resolve_pending import (
    PendingQueues,
    ResolvePendingResult,
    ResolvePendingUseCase,
)
from stockledger.application.use_cases.revert import RevertImportUseCase, RevertSaleUseCase

__all__ = [
    "ManageProductUseCase",
    "AdjustStockUseCase",
    "StockAdjustmentResult",
    "ImportPurchaseUseCase",
    "ApplySaleUseCase",
    "ResolvePendingUseCase",
    "ResolvePendingResult",
    "PendingQueues",
    "RevertImportUseCase",
    "RevertSaleUseCase",
    "KardexUseCase",
    "InventoryConfigUseCase",
]
