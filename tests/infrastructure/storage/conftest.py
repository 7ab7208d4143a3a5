"""Fixtures for snapshot storage tests."""

from datetime import date

import pytest

from stockledger.core.entities import InventoryConfig, LedgerSnapshot
from stockledger.core.services import CatalogStore


@pytest.fixture
def populated_snapshot() -> LedgerSnapshot:
    """Snapshot with one stocked product, a mapping and a recorded import."""
    store = CatalogStore(LedgerSnapshot(config=InventoryConfig(suggested_margin=0.25)))
    product = store.create_product("PVC pipe 1/2", category="Plumbing")
    store.register_entry(product.id, 2, 5.0, "PUR-1", date=date(2024, 1, 10), supplier_name="ACME")
    store.remember_mapping("tubo pvc", product.id)
    store.record_import(["PUR-1"], [product.id])
    return store.snapshot
