"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. Tests replace `get_ledger`
through `app.dependency_overrides` to run against a temporary snapshot.
"""

from functools import lru_cache

from fastapi import Depends

from stockledger.application.services import LedgerService, get_ledger_service
from stockledger.application.use_cases import (
    AdjustStockUseCase,
    ApplySaleUseCase,
    ImportPurchaseUseCase,
    InventoryConfigUseCase,
    KardexUseCase,
    ManageProductUseCase,
    ResolvePendingUseCase,
    RevertImportUseCase,
    RevertSaleUseCase,
)
from stockledger.config import Settings, get_settings


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


def get_ledger() -> LedgerService:
    """Get the ledger unit of work."""
    return get_ledger_service()


# Use case dependencies
def get_manage_product_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> ManageProductUseCase:
    return ManageProductUseCase(ledger=ledger)


def get_adjust_stock_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> AdjustStockUseCase:
    return AdjustStockUseCase(ledger=ledger)


def get_import_purchase_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> ImportPurchaseUseCase:
    return ImportPurchaseUseCase(ledger=ledger)


def get_apply_sale_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> ApplySaleUseCase:
    return ApplySaleUseCase(ledger=ledger)


def get_resolve_pending_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> ResolvePendingUseCase:
    return ResolvePendingUseCase(ledger=ledger)


def get_revert_import_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> RevertImportUseCase:
    return RevertImportUseCase(ledger=ledger)


def get_revert_sale_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> RevertSaleUseCase:
    return RevertSaleUseCase(ledger=ledger)


def get_kardex_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> KardexUseCase:
    return KardexUseCase(ledger=ledger)


def get_inventory_config_use_case(
    ledger: LedgerService = Depends(get_ledger),
) -> InventoryConfigUseCase:
    return InventoryConfigUseCase(ledger=ledger)
