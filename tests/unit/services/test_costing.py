"""Unit tests for lot costing."""

import math
from datetime import UTC, datetime

import pytest

from stockledger.core.entities import CostingMethod, Lot, Product
from stockledger.core.exceptions import InvalidQuantityError
from stockledger.core.services.costing import (
    allocated_total,
    order_lots,
    select_lots,
    validate_quantity,
    weighted_average,
)

JAN = datetime(2024, 1, 1, tzinfo=UTC)
FEB = datetime(2024, 2, 1, tzinfo=UTC)


def _product() -> Product:
    return Product(
        description="PVC PIPE",
        lots=[
            Lot(id="jan", quantity=2, unit_cost=5.0, entry_date=JAN),
            Lot(id="feb", quantity=3, unit_cost=7.0, entry_date=FEB),
        ],
    )


class TestWeightedAverage:
    def test_blends_old_and_new(self):
        assert weighted_average(2, 5.0, 3, 7.0) == pytest.approx(6.2)

    def test_first_lot_takes_its_cost(self):
        assert weighted_average(0, 0.0, 4, 2.5) == pytest.approx(2.5)

    def test_zero_resulting_quantity(self):
        assert weighted_average(0, 0.0, 0, 9.0) == 0.0


class TestValidateQuantity:
    @pytest.mark.parametrize("value", [0, -1, math.nan, math.inf, "abc", None])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidQuantityError):
            validate_quantity(value)

    def test_accepts_numeric_strings(self):
        assert validate_quantity("2.5") == 2.5


class TestSelectLots:
    def test_lifo_takes_newest_first(self):
        allocations = select_lots(_product(), 4, CostingMethod.LIFO)
        assert [(a.lot.id, a.quantity) for a in allocations] == [("feb", 3), ("jan", 1)]

    def test_fifo_takes_oldest_first(self):
        allocations = select_lots(_product(), 4, CostingMethod.FIFO)
        assert [(a.lot.id, a.quantity) for a in allocations] == [("jan", 2), ("feb", 2)]

    def test_weighted_average_keeps_stored_order(self):
        allocations = select_lots(_product(), 1, CostingMethod.WEIGHTED_AVERAGE)
        assert allocations[0].lot.id == "jan"

    def test_allocation_never_exceeds_lot(self):
        allocations = select_lots(_product(), 10, CostingMethod.LIFO)
        assert allocated_total(allocations) == 5
        assert all(a.quantity <= a.lot.quantity for a in allocations)

    def test_lots_are_not_mutated(self):
        product = _product()
        select_lots(product, 4, CostingMethod.LIFO)
        assert product.total_stock == 5

    def test_same_date_lifo_uses_insertion_order(self):
        lots = [
            Lot(id="first", quantity=1, entry_date=JAN),
            Lot(id="second", quantity=1, entry_date=JAN),
        ]
        assert [lot.id for lot in order_lots(lots, CostingMethod.LIFO)] == ["second", "first"]
        assert [lot.id for lot in order_lots(lots, CostingMethod.FIFO)] == ["first", "second"]
