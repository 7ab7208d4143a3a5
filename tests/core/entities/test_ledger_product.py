"""Tests for product, lot and movement entities."""

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from stockledger.core.entities import Lot, Movement, MovementType, Presentation, Product
from stockledger.core.entities.product import as_utc


class TestProductDefaults:
    def test_base_unit_presentation_added(self):
        product = Product(description="Cable")
        assert product.base_unit == "UNIT"
        assert [(p.name, p.factor) for p in product.presentations] == [("UNIT", 1.0)]

    def test_base_unit_normalized(self):
        product = Product(description="Cable", base_unit=" meter ")
        assert product.base_unit == "METER"
        assert any(p.name == "METER" and p.factor == 1.0 for p in product.presentations)

    def test_base_unit_factor_pinned_to_one(self):
        product = Product(
            description="Cable",
            presentations=[Presentation(name="unit", factor=5), Presentation(name="box", factor=12)],
        )
        assert [(p.name, p.factor) for p in product.presentations] == [("UNIT", 1.0), ("BOX", 12.0)]

    def test_null_flags_and_lists_default(self):
        product = Product.model_validate(
            {"description": "Cable", "active": None, "lots": None, "presentations": None}
        )
        assert product.active is True
        assert product.lots == []

    def test_presentation_name_uppercased(self):
        assert Presentation(name=" box ", factor=12).name == "BOX"


class TestDerivedStock:
    def test_empty_product_has_zero_stock_and_cost(self):
        product = Product(description="Cable")
        assert product.total_stock == 0
        assert product.average_cost == 0
        assert product.total_value == 0

    def test_stock_and_average_follow_lots(self):
        product = Product(
            description="Cable",
            lots=[Lot(quantity=2, unit_cost=5.0), Lot(quantity=3, unit_cost=7.0)],
        )
        assert product.total_stock == 5
        assert product.average_cost == pytest.approx(6.2)
        assert product.total_value == pytest.approx(31.0)

    def test_computed_fields_serialized(self):
        product = Product(description="Cable", lots=[Lot(quantity=4, unit_cost=2.5)])
        data = product.model_dump()
        assert data["total_stock"] == 4
        assert data["average_cost"] == 2.5

    def test_next_trace_code(self):
        product = Product(id="abc", description="x", lots=[Lot(quantity=1)])
        assert product.next_trace_code() == "abc-002"


class TestDates:
    def test_as_utc_date(self):
        assert as_utc(date(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=UTC)

    def test_as_utc_naive_datetime(self):
        assert as_utc(datetime(2024, 1, 15, 10, 30)).tzinfo is UTC

    def test_as_utc_none_is_now(self):
        assert as_utc(None).tzinfo is not None

    def test_lot_entry_date_made_aware(self):
        lot = Lot(quantity=1, entry_date=datetime(2024, 1, 1))
        assert lot.entry_date.tzinfo is not None


class TestMovement:
    def test_movement_is_frozen(self):
        movement = Movement(product_id="p1", movement_type=MovementType.ENTRY, quantity=1)
        with pytest.raises(ValidationError):
            movement.quantity = 5

    def test_is_entry(self):
        assert Movement(product_id="p1", movement_type="entry", quantity=1).is_entry
        assert not Movement(product_id="p1", movement_type="exit", quantity=1).is_entry

    def test_date_made_aware(self):
        movement = Movement(
            product_id="p1",
            movement_type=MovementType.EXIT,
            quantity=1,
            date=datetime(2024, 3, 1, 9, 0),
        )
        assert movement.date == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
