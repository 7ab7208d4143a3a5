"""Tests for purchase, sale, stock, pending, Kardex and config endpoints."""

from httpx import AsyncClient


async def _import(client: AsyncClient, document: dict, **extra):
    return await client.post("/api/purchases/import", json={"document": document, **extra})


class TestPurchases:
    async def test_import_and_revert(self, api_client: AsyncClient, make_purchase):
        response = await _import(api_client, make_purchase())
        assert response.status_code == 200
        data = response.json()
        assert data["created"] == 1
        assert data["applicable"] is True

        response = await api_client.post("/api/purchases/revert")
        assert response.status_code == 200
        assert response.json()["products_deleted"] == 1

        response = await api_client.post("/api/purchases/revert")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NO_RECENT_IMPORT"

    async def test_not_applicable_document(self, api_client: AsyncClient):
        response = await _import(api_client, {"reference": "X"})
        assert response.status_code == 200
        assert response.json()["applicable"] is False

    async def test_revert_blocked_by_later_exit(self, api_client: AsyncClient, make_purchase):
        imported = (await _import(api_client, make_purchase())).json()
        product_id = imported["created_product_ids"][0]
        await api_client.post("/api/stock/exit", json={"product_id": product_id, "quantity": 1})

        response = await api_client.post("/api/purchases/revert")

        assert response.status_code == 409
        assert response.json()["error_code"] == "LATER_MOVEMENTS_EXIST"

    async def test_batch(self, api_client: AsyncClient, make_purchase):
        response = await api_client.post(
            "/api/purchases/import/batch",
            json={"documents": [make_purchase(reference="A"), make_purchase(reference="B")]},
        )
        assert response.json()["total_lines"] == 2

    async def test_confirmation_with_bad_action(self, api_client: AsyncClient, make_purchase):
        response = await _import(
            api_client,
            make_purchase(),
            confirmations=[{"line_index": 0, "action": "merge"}],
        )
        assert response.status_code == 422


class TestSalesAndStock:
    async def test_sale_apply_and_revert(self, api_client: AsyncClient, make_purchase, make_sale):
        imported = (await _import(api_client, make_purchase())).json()
        product = (await api_client.get(f"/api/products/{imported['created_product_ids'][0]}")).json()

        response = await api_client.post(
            "/api/sales/apply",
            json={"document": make_sale(lines=[{"quantity": 1, "description": "box", "code": product["code"]}])},
        )
        assert response.json()["applied"] == 1
        assert len(response.json()["movements"]) == 1

        response = await api_client.post("/api/sales/revert", json={"document_reference": "SALE-1"})
        assert response.status_code == 200

        response = await api_client.post("/api/sales/revert", json={"document_reference": "SALE-1"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOTHING_TO_REVERT"

    async def test_manual_entry_and_exit(self, api_client: AsyncClient):
        product = (await api_client.post("/api/products", json={"description": "PVC pipe"})).json()

        response = await api_client.post(
            "/api/stock/entry",
            json={"product_id": product["id"], "quantity": 5, "unit_cost": 2.0, "reference": "COUNT-1"},
        )
        assert response.status_code == 201
        assert response.json()["product"]["total_stock"] == 5
        assert response.json()["movements"][0]["document_reference"] == "COUNT-1"

        response = await api_client.post(
            "/api/stock/exit", json={"product_id": product["id"], "quantity": 9}
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"

    async def test_entry_rejects_non_positive_quantity(self, api_client: AsyncClient):
        response = await api_client.post("/api/stock/entry", json={"product_id": "p", "quantity": 0})
        assert response.status_code == 422

    async def test_entry_for_unknown_product(self, api_client: AsyncClient):
        response = await api_client.post("/api/stock/entry", json={"product_id": "p", "quantity": 1})
        assert response.status_code == 404


class TestPending:
    async def test_pending_sale_lifecycle(self, api_client: AsyncClient, make_sale):
        product = (await api_client.post("/api/products", json={"description": "hammer"})).json()
        await api_client.post(
            "/api/stock/entry", json={"product_id": product["id"], "quantity": 3, "unit_cost": 4.0}
        )
        await api_client.post(
            "/api/sales/apply",
            json={"document": make_sale(lines=[{"quantity": 2, "description": "unknown widget"}])},
        )

        pending = (await api_client.get("/api/pending")).json()
        assert len(pending["sales"]) == 1
        pending_id = pending["sales"][0]["id"]

        response = await api_client.post(f"/api/pending/{pending_id}/resolve", json={})
        assert response.status_code == 400

        response = await api_client.post(
            f"/api/pending/{pending_id}/resolve", json={"product_id": product["id"]}
        )
        assert response.json()["resolved"] is True

        response = await api_client.post(
            f"/api/pending/{pending_id}/resolve", json={"product_id": product["id"]}
        )
        assert response.status_code == 200
        assert response.json()["resolved"] is False

        stocked = (await api_client.get(f"/api/products/{product['id']}")).json()
        assert stocked["total_stock"] == 1

    async def test_dismiss_unknown(self, api_client: AsyncClient):
        response = await api_client.delete("/api/pending/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PENDING_NOT_FOUND"


class TestKardexAndConfig:
    async def test_kardex(self, api_client: AsyncClient, make_purchase):
        imported = (await _import(api_client, make_purchase())).json()
        product_id = imported["created_product_ids"][0]

        response = await api_client.get(f"/api/kardex/{product_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["final_quantity"] == 2
        assert data["rows"][0]["document"] == "DOC-1"

    async def test_kardex_unknown_product(self, api_client: AsyncClient):
        response = await api_client.get("/api/kardex/missing")
        assert response.status_code == 404

    async def test_config_get_and_update(self, api_client: AsyncClient):
        config = (await api_client.get("/api/config")).json()
        assert config["costing_method"] == "LIFO"

        response = await api_client.patch("/api/config", json={"costing_method": "FIFO"})
        assert response.json()["costing_method"] == "FIFO"

        response = await api_client.patch("/api/config", json={"ask_match_threshold": 0.95})
        assert response.status_code == 400
        assert response.json()["error_code"] == "CONFIGURATION_ERROR"

    async def test_config_rejects_unknown_costing_method(self, api_client: AsyncClient):
        response = await api_client.patch("/api/config", json={"costing_method": "RANDOM"})
        assert response.status_code == 422
