"""Unit tests for the Kardex projection and catalog CSV export."""

from datetime import date

import pytest

from stockledger.core.entities import MovementType
from stockledger.core.exceptions import ProductNotFoundError
from stockledger.core.services import CatalogStore, build_ledger, export_catalog_csv

JAN = date(2024, 1, 10)
FEB = date(2024, 2, 10)
MAR = date(2024, 3, 10)


class TestBuildLedger:
    def test_running_balance(self, store: CatalogStore):
        product = store.create_product("PVC pipe 1/2", category="Plumbing")
        store.register_entry(product.id, 3, 7.0, "PUR-2", date=FEB)
        store.register_entry(product.id, 2, 5.0, "PUR-1", date=JAN)
        store.register_exit(product.id, 4, "SALE-1", date=MAR)

        report = build_ledger(store, product.id)

        assert [row.document for row in report.rows] == ["PUR-1", "PUR-2", "SALE-1", "SALE-1"]
        assert [row.movement_type for row in report.rows[:2]] == [MovementType.ENTRY] * 2
        assert [row.balance_quantity for row in report.rows] == [2, 5, 2, 1]
        assert report.rows[1].balance_value == pytest.approx(31.0)
        assert report.rows[2].value == pytest.approx(21.0)
        assert report.final_quantity == 1
        assert report.final_value == pytest.approx(5.0)
        assert report.code == product.code

    def test_uncovered_exit_goes_negative(self, store: CatalogStore):
        product = store.create_product("LED bulb")
        store.register_exit(product.id, 2, "SALE-1", date=JAN)

        report = build_ledger(store, product.id)

        assert len(report.rows) == 1
        assert report.rows[0].unit_cost == 0
        assert report.final_quantity == -2

    def test_oversell_keeps_negative_balance_while_lots_floor_at_zero(self, store: CatalogStore):
        product = store.create_product("LED bulb")
        store.register_entry(product.id, 2, 1.0, "PUR-1", date=JAN)
        store.register_exit(product.id, 5, "SALE-1", date=FEB)

        report = build_ledger(store, product.id)

        assert product.total_stock == 0
        assert product.lots == []
        assert report.final_quantity == -3

    def test_empty_history(self, store: CatalogStore):
        product = store.create_product("LED bulb")
        report = build_ledger(store, product.id)
        assert report.rows == []
        assert report.final_value == 0

    def test_unknown_product(self, store: CatalogStore):
        with pytest.raises(ProductNotFoundError):
            build_ledger(store, "missing")


class TestExportCsv:
    def test_header_only_for_empty_catalog(self, store: CatalogStore):
        assert export_catalog_csv(store) == (
            "Code,Description,Category,Stock,Average Cost,Suggested Price,Total Value,Suppliers\n"
        )

    def test_product_rows(self, store: CatalogStore):
        product = store.create_product("pipe, pvc", category="Plumbing")
        store.register_entry(product.id, 2, 5.0, "PUR-1", date=JAN, supplier_name="ACME")
        store.register_entry(product.id, 3, 7.0, "PUR-2", date=FEB, supplier_name="Beta")

        lines = export_catalog_csv(store).splitlines()

        assert len(lines) == 2
        assert lines[1] == f'{product.code},"PIPE, PVC",Plumbing,5,6.20,8.68,31.00,ACME; Beta'
