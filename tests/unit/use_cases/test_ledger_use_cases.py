"""Tests for the ledger use cases over a temporary snapshot."""

import pytest

from stockledger.application.dto import (
    ApplySaleRequest,
    CreateProductRequest,
    ImportBatchRequest,
    ImportPurchaseRequest,
    LineConfirmationRequest,
    ResolvePendingRequest,
    RevertSaleRequest,
    SetPresentationRequest,
    StockEntryRequest,
    StockExitRequest,
    UpdateInventoryConfigRequest,
    UpdateProductRequest,
)
from stockledger.application.services import LedgerService
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
from stockledger.core.exceptions import (
    ConfigurationError,
    InsufficientStockError,
    InvalidFactorError,
    NoRecentImportError,
    ProductHasHistoryError,
    ValidationError,
)


@pytest.fixture
def products(ledger: LedgerService) -> ManageProductUseCase:
    return ManageProductUseCase(ledger=ledger)


@pytest.fixture
def stock(ledger: LedgerService) -> AdjustStockUseCase:
    return AdjustStockUseCase(ledger=ledger)


class TestManageProductUseCase:
    async def test_create_guesses_category(self, products: ManageProductUseCase):
        product = await products.create(CreateProductRequest(description="electrical outlet double"))
        assert product.category == "Electrical"
        assert product.code.startswith("ELE-")

    async def test_returned_products_are_detached(self, products: ManageProductUseCase):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        product.description = "CHANGED"
        assert (await products.get(product.id)).description == "PVC PIPE"

    async def test_update_keeps_stock(self, products: ManageProductUseCase, stock: AdjustStockUseCase):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        await stock.receive(StockEntryRequest(product_id=product.id, quantity=4, unit_cost=2.0))

        updated = await products.update(product.id, UpdateProductRequest(category="Plumbing", favorite=True))

        assert updated.category == "Plumbing"
        assert updated.favorite is True
        assert updated.total_stock == 4

    async def test_invalid_presentation_factor(self, products: ManageProductUseCase):
        product = await products.create(CreateProductRequest(description="screws"))
        with pytest.raises(InvalidFactorError):
            await products.set_presentation(product.id, SetPresentationRequest(name="BOX", factor=0))

        updated = await products.set_presentation(product.id, SetPresentationRequest(name="box", factor=12))
        assert {p.name: p.factor for p in updated.presentations}["BOX"] == 12

    async def test_delete_with_history_refused(
        self, products: ManageProductUseCase, stock: AdjustStockUseCase
    ):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        await stock.receive(StockEntryRequest(product_id=product.id, quantity=1, unit_cost=2.0))
        with pytest.raises(ProductHasHistoryError):
            await products.delete(product.id)

    async def test_deactivated_products_hidden_from_active_list(self, products: ManageProductUseCase):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        await products.deactivate(product.id)
        assert await products.list_products(active_only=True) == []
        assert len(await products.list_products()) == 1


class TestStockAdjustments:
    async def test_issue_more_than_stock(self, products: ManageProductUseCase, stock: AdjustStockUseCase):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        await stock.receive(StockEntryRequest(product_id=product.id, quantity=2, unit_cost=3.0))

        with pytest.raises(InsufficientStockError):
            await stock.issue(StockExitRequest(product_id=product.id, quantity=5))

        result = await stock.issue(StockExitRequest(product_id=product.id, quantity=2, reason="Damaged"))
        response = stock.to_response(result)
        assert response.product.total_stock == 0
        assert response.movements[0].customer_name == "Damaged"


class TestImportAndRevert:
    async def test_import_then_revert(self, ledger: LedgerService, make_purchase):
        result = await ImportPurchaseUseCase(ledger=ledger).execute(
            ImportPurchaseRequest(document=make_purchase())
        )
        assert result.created == 1

        reverted = await RevertImportUseCase(ledger=ledger).execute()
        assert reverted.products_deleted == 1

        with pytest.raises(NoRecentImportError):
            await RevertImportUseCase(ledger=ledger).execute()

    async def test_confirmed_import(self, ledger: LedgerService, products, make_purchase):
        pipe = await products.create(CreateProductRequest(description="PVC pipe"))
        use_case = ImportPurchaseUseCase(ledger=ledger)

        result = await use_case.execute(
            ImportPurchaseRequest(
                document=make_purchase(lines=[{"quantity": 3, "unit_price": 2.0, "description": "tubo"}]),
                confirmations=[LineConfirmationRequest(line_index=0, action="link", product_id=pipe.id)],
            )
        )

        assert use_case.to_response(result).updated == 1
        assert (await products.get(pipe.id)).total_stock == 3

    async def test_batch_import(self, ledger: LedgerService, make_purchase):
        use_case = ImportPurchaseUseCase(ledger=ledger)
        result = await use_case.execute_batch(
            ImportBatchRequest(
                documents=[
                    make_purchase(reference="DOC-1"),
                    make_purchase(reference="DOC-2", issue_date="2024-01-16"),
                ]
            )
        )
        response = use_case.to_response(result)
        assert response.created == 1
        assert response.updated == 1
        assert response.document_reference == "DOC-2"

    async def test_sale_and_revert(self, ledger: LedgerService, make_purchase, make_sale):
        imported = await ImportPurchaseUseCase(ledger=ledger).execute(
            ImportPurchaseRequest(document=make_purchase())
        )
        product = await ManageProductUseCase(ledger=ledger).get(imported.created_product_ids[0])

        sales = ApplySaleUseCase(ledger=ledger)
        sale = await sales.execute(
            ApplySaleRequest(
                document=make_sale(lines=[{"quantity": 1, "description": "box", "code": product.code}])
            )
        )
        assert sales.to_response(sale).applied == 1

        reverted = await RevertSaleUseCase(ledger=ledger).execute(
            RevertSaleRequest(document_reference="SALE-1")
        )
        assert reverted.movements_removed == 1
        assert (await ManageProductUseCase(ledger=ledger).get(product.id)).total_stock == 2

    async def test_sale_document_not_applicable(self, ledger: LedgerService):
        sales = ApplySaleUseCase(ledger=ledger)
        result = await sales.execute(ApplySaleRequest(document={"lines": "nope"}))
        assert result is None
        assert sales.to_response(result).applicable is False


class TestResolvePending:
    @pytest.fixture
    async def pending_id(self, ledger: LedgerService, products, make_purchase) -> str:
        await InventoryConfigUseCase(ledger=ledger).update(
            UpdateInventoryConfigRequest(ask_match_threshold=0.7)
        )
        await products.create(CreateProductRequest(description="TOMA POLARIZADA DOBLE"))
        await products.create(CreateProductRequest(description="TOMA POLARIZADA DOBLE BEIGE"))
        result = await ImportPurchaseUseCase(ledger=ledger).execute(
            ImportPurchaseRequest(
                document=make_purchase(
                    lines=[{"quantity": 2, "unit_price": 3.0, "description": "TOMA POLARIZADA DOBLE BLANCA"}]
                )
            )
        )
        assert result.pending == 1
        queues = await ResolvePendingUseCase(ledger=ledger).list_pending()
        assert len(queues.purchases[0].candidates) == 2
        return queues.purchases[0].id

    async def test_resolve_twice(self, ledger: LedgerService, products, pending_id: str):
        target = (await products.list_products())[0]
        use_case = ResolvePendingUseCase(ledger=ledger)

        first = await use_case.execute(pending_id, ResolvePendingRequest(product_id=target.id))
        second = await use_case.execute(pending_id, ResolvePendingRequest(product_id=target.id))

        assert first.resolved is True
        assert len(first.movements) == 1
        assert second.resolved is False
        assert second.movements == []
        assert (await products.get(target.id)).total_stock == 2

    async def test_resolve_by_creating(self, ledger: LedgerService, products, pending_id: str):
        result = await ResolvePendingUseCase(ledger=ledger).execute(
            pending_id, ResolvePendingRequest(category="Electrical")
        )
        assert result.resolved is True
        created = await products.get(result.product_id)
        assert created.description == "TOMA POLARIZADA DOBLE BLANCA"
        assert created.total_stock == 2

    async def test_pending_sale_needs_product(self, ledger: LedgerService, make_sale):
        await ApplySaleUseCase(ledger=ledger).execute(
            ApplySaleRequest(document=make_sale(lines=[{"quantity": 1, "description": "gadget"}]))
        )
        use_case = ResolvePendingUseCase(ledger=ledger)
        queues = await use_case.list_pending()

        with pytest.raises(ValidationError):
            await use_case.execute(queues.sales[0].id, ResolvePendingRequest())

        await use_case.dismiss(queues.sales[0].id)
        assert (await use_case.list_pending()).sales == []


class TestInventoryConfig:
    async def test_update_refreshes_prices(self, ledger: LedgerService, products, stock):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        await stock.receive(StockEntryRequest(product_id=product.id, quantity=1, unit_cost=10.0))

        config = await InventoryConfigUseCase(ledger=ledger).update(
            UpdateInventoryConfigRequest(suggested_margin=0.5, costing_method="FIFO")
        )

        assert config.costing_method == "FIFO"
        assert (await products.get(product.id)).suggested_price == pytest.approx(15.0)

    async def test_rejects_inverted_thresholds(self, ledger: LedgerService):
        use_case = InventoryConfigUseCase(ledger=ledger)
        with pytest.raises(ConfigurationError):
            await use_case.update(UpdateInventoryConfigRequest(auto_match_threshold=0.5))
        assert (await use_case.get()).auto_match_threshold == 0.9


class TestKardexUseCase:
    async def test_report_and_export(self, ledger: LedgerService, products, stock):
        product = await products.create(CreateProductRequest(description="PVC pipe"))
        await stock.receive(StockEntryRequest(product_id=product.id, quantity=3, unit_cost=2.0))

        use_case = KardexUseCase(ledger=ledger)
        response = use_case.to_response(await use_case.execute(product.id))
        csv_text = await use_case.export_csv()

        assert response.final_quantity == 3
        assert csv_text.startswith("Code,Description")
        assert "PVC PIPE" in csv_text
