"""Tests for purchase/sale documents and the ledger snapshot."""

import pytest
from pydantic import ValidationError

from stockledger.core.entities import (
    CostingMethod,
    DocumentLine,
    InventoryConfig,
    ItemKind,
    LedgerSnapshot,
    PurchaseDocument,
    SaleDocument,
)
from stockledger.config import InventorySettings


class TestDocumentLine:
    def test_numeric_item_kinds(self):
        assert DocumentLine(kind=1, quantity=1, description="x").kind == ItemKind.GOODS
        assert DocumentLine(kind=2, quantity=1, description="x").kind == ItemKind.SERVICE
        assert DocumentLine(kind=9, quantity=1, description="x").kind == ItemKind.OTHER

    def test_only_goods_with_quantity_apply(self):
        assert DocumentLine(kind=1, quantity=2, description="x").applies
        assert not DocumentLine(kind=2, quantity=2, description="x").applies
        assert not DocumentLine(kind=1, quantity=0, description="x").applies

    def test_blank_code_is_none(self):
        assert DocumentLine(quantity=1, description="x", code="  ").code is None
        assert DocumentLine(quantity=1, description="x", code=52016).code == "52016"


class TestPurchaseDocument:
    def test_from_payload_parses(self, make_purchase):
        document = PurchaseDocument.from_payload(make_purchase(reference=" DOC-9 "))
        assert document is not None
        assert document.reference == "DOC-9"
        assert document.supplier.name == "ACME Supplies"
        assert len(document.lines) == 1

    @pytest.mark.parametrize(
        "payload",
        [None, "not a document", {"reference": "X"}, {"lines": "nope"}],
    )
    def test_malformed_payload_not_applicable(self, payload):
        assert PurchaseDocument.from_payload(payload) is None


class TestSaleDocument:
    def test_customer_defaults(self):
        assert SaleDocument(customer_name=None).customer_name == "CUSTOMER"

    def test_from_payload_rejects_bad_lines(self):
        assert SaleDocument.from_payload({"lines": [{"quantity": "many"}]}) is None


class TestInventoryConfig:
    def test_defaults(self):
        config = InventoryConfig()
        assert config.costing_method == CostingMethod.LIFO
        assert config.suggested_margin == 0.4
        assert config.auto_match_threshold >= config.ask_match_threshold

    def test_auto_below_ask_rejected(self):
        with pytest.raises(ValidationError):
            InventoryConfig(auto_match_threshold=0.5, ask_match_threshold=0.8)

    def test_threshold_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            InventoryConfig(auto_match_threshold=1.5)

    def test_seeded_from_settings(self):
        settings = InventorySettings(costing_method="FIFO", suggested_margin=0.25)
        config = InventoryConfig.from_settings(settings)
        assert config.costing_method == CostingMethod.FIFO
        assert config.suggested_margin == 0.25

    def test_settings_reject_incoherent_thresholds(self):
        with pytest.raises(ValidationError):
            InventorySettings(auto_match_threshold=0.6, ask_match_threshold=0.7)


class TestLedgerSnapshot:
    def test_null_collections_become_empty(self):
        snapshot = LedgerSnapshot.model_validate(
            {"products": None, "movements": None, "pending_sales": None, "last_import": None}
        )
        assert snapshot.products == []
        assert snapshot.movements == []
        assert snapshot.last_import is None

    def test_json_round_trip_keeps_config(self):
        snapshot = LedgerSnapshot(config=InventoryConfig(costing_method="FIFO"))
        restored = LedgerSnapshot.model_validate_json(snapshot.model_dump_json())
        assert restored.config.costing_method == CostingMethod.FIFO
