"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from stockledger.application.services import LedgerService
from stockledger.core.entities import InventoryConfig, LedgerSnapshot
from stockledger.core.services import CatalogStore, ImportOrchestrator, ReconciliationEngine
from stockledger.infrastructure.storage.jsonfile import JsonFileSnapshotStore


@pytest.fixture
def store() -> CatalogStore:
    """Empty catalog store with default configuration."""
    return CatalogStore(LedgerSnapshot(config=InventoryConfig()))


@pytest.fixture
def engine(store: CatalogStore) -> ReconciliationEngine:
    return ReconciliationEngine(store)


@pytest.fixture
def orchestrator(store: CatalogStore, engine: ReconciliationEngine) -> ImportOrchestrator:
    return ImportOrchestrator(store, engine=engine)


@pytest.fixture
def make_purchase() -> Callable[..., dict[str, Any]]:
    """Build a purchase document payload."""

    def _make(
        reference: str = "DOC-1",
        issue_date: str = "2024-01-15",
        supplier: str = "ACME Supplies",
        lines: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        return {
            "reference": reference,
            "issue_date": issue_date,
            "supplier": {"name": supplier, "tax_id": "0614-010190-101-1"},
            "lines": lines
            if lines is not None
            else [{"kind": 1, "quantity": 2, "unit_price": 5.0, "description": "ELECTRICAL BOX 6in"}],
        }

    return _make


@pytest.fixture
def make_sale() -> Callable[..., dict[str, Any]]:
    """Build a sale document payload."""

    def _make(
        reference: str = "SALE-1",
        issue_date: str | None = "2024-02-01",
        customer: str = "Walk-in",
        lines: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        return {
            "reference": reference,
            "issue_date": issue_date,
            "customer_name": customer,
            "lines": lines or [],
        }

    return _make


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "ledger_snapshot.json"


@pytest.fixture
def ledger(snapshot_path) -> LedgerService:
    """Ledger unit of work over a temporary JSON snapshot."""
    return LedgerService(JsonFileSnapshotStore(snapshot_path))


@pytest.fixture
async def api_client(ledger: LedgerService) -> AsyncGenerator[AsyncClient, None]:
    """Async client against the app with the ledger bound to a temp snapshot."""
    from stockledger.api.dependencies import get_ledger
    from stockledger.api.main import app

    app.dependency_overrides[get_ledger] = lambda: ledger
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_ledger, None)
