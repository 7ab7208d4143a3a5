"""End-to-end ledger flow through the API over one JSON snapshot."""

import pytest
from httpx import AsyncClient

from stockledger.application.services import LedgerService
from stockledger.infrastructure.storage import JsonFileSnapshotStore

BOX_LINE = "ELECTRICAL BOX 6in"


def _line(quantity: float, price: float) -> list[dict]:
    return [{"kind": 1, "quantity": quantity, "unit_price": price, "description": BOX_LINE}]


async def test_purchase_sale_revert_cycle(api_client: AsyncClient, make_purchase, make_sale, snapshot_path):
    first = await api_client.post(
        "/api/purchases/import", json={"document": make_purchase(reference="DOC-1", lines=_line(2, 5.0))}
    )
    product_id = first.json()["created_product_ids"][0]

    second = await api_client.post(
        "/api/purchases/import",
        json={"document": make_purchase(reference="DOC-2", issue_date="2024-01-20", lines=_line(3, 7.0))},
    )
    assert second.json()["updated"] == 1

    product = (await api_client.get(f"/api/products/{product_id}")).json()
    assert product["total_stock"] == 5
    assert product["average_cost"] == pytest.approx(6.2)
    assert product["pending_presentations"] == ["BOX"]

    product = (
        await api_client.put(f"/api/products/{product_id}/presentations", json={"name": "BOX", "factor": 12})
    ).json()
    assert product["pending_presentations"] == []

    await api_client.post(
        "/api/purchases/import",
        json={"document": make_purchase(reference="DOC-3", issue_date="2024-01-25", lines=_line(1, 24.0))},
    )
    product = (await api_client.get(f"/api/products/{product_id}")).json()
    assert product["total_stock"] == 17

    sale = await api_client.post(
        "/api/sales/apply",
        json={"document": make_sale(lines=[{"quantity": 4, "description": "box", "code": product["code"]}])},
    )
    movements = sale.json()["movements"]
    assert [(m["quantity"], m["unit_cost"]) for m in movements] == [(4, 2.0)]

    kardex = (await api_client.get(f"/api/kardex/{product_id}")).json()
    assert [row["document"] for row in kardex["rows"]] == ["DOC-1", "DOC-2", "DOC-3", "SALE-1"]
    assert kardex["final_quantity"] == 13

    blocked = await api_client.post("/api/purchases/revert")
    assert blocked.status_code == 409

    assert (await api_client.post("/api/sales/revert", json={"document_reference": "SALE-1"})).status_code == 200
    reverted = await api_client.post("/api/purchases/revert")
    assert reverted.status_code == 200
    assert reverted.json()["products_deleted"] == 0

    product = (await api_client.get(f"/api/products/{product_id}")).json()
    assert product["total_stock"] == 5
    assert product["average_cost"] == pytest.approx(6.2)

    restarted = LedgerService(JsonFileSnapshotStore(snapshot_path))
    stock = await restarted.read(lambda ctx: ctx.store.get_product(product_id).total_stock)
    assert stock == 5


async def test_pending_purchase_resolved_by_creating(api_client: AsyncClient, make_purchase):
    await api_client.patch("/api/config", json={"ask_match_threshold": 0.7})
    for description in ("TOMA POLARIZADA DOBLE", "TOMA POLARIZADA DOBLE BEIGE"):
        await api_client.post("/api/products", json={"description": description})

    result = await api_client.post(
        "/api/purchases/import",
        json={
            "document": make_purchase(
                lines=[{"quantity": 2, "unit_price": 3.0, "description": "TOMA POLARIZADA DOBLE BLANCA"}]
            )
        },
    )
    assert result.json()["pending"] == 1

    pending = (await api_client.get("/api/pending")).json()["purchases"][0]
    assert pending["supplier_name"] == "ACME Supplies"
    assert len(pending["candidates"]) == 2

    resolved = (await api_client.post(f"/api/pending/{pending['id']}/resolve", json={})).json()
    assert resolved["resolved"] is True

    again = await api_client.post(
        "/api/purchases/import",
        json={
            "document": make_purchase(
                reference="DOC-2",
                issue_date="2024-01-20",
                lines=[{"quantity": 1, "unit_price": 3.0, "description": "toma polarizada doble blanca"}],
            )
        },
    )
    assert again.json()["updated"] == 1
    product = (await api_client.get(f"/api/products/{resolved['product_id']}")).json()
    assert product["total_stock"] == 3
