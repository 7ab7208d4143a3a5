"""
Costing engine.

Weighted-average recomputation on lot insertion and lot selection for
depletion under LIFO, FIFO or weighted-average policy.
"""

import math
from dataclasses import dataclass

from stockledger.core.entities.product import Lot, Product
from stockledger.core.entities.snapshot import CostingMethod
from stockledger.core.exceptions import InvalidQuantityError


@dataclass
class LotAllocation:
    """Quantity taken from one lot by an exit."""

    lot: Lot
    quantity: float


def validate_quantity(quantity: float) -> float:
    """Return quantity as float, raising InvalidQuantityError when <= 0 or not finite."""
    try:
        value = float(quantity)
    except (TypeError, ValueError):
        raise InvalidQuantityError(quantity) from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidQuantityError(quantity)
    return value


def weighted_average(
    old_quantity: float,
    old_average: float,
    quantity: float,
    unit_cost: float,
) -> float:
    """
    Weighted average cost after adding `quantity` at `unit_cost`.

    (old_quantity * old_average + quantity * unit_cost) / new_quantity,
    or 0 when the new quantity is not positive.
    """
    new_quantity = old_quantity + quantity
    if new_quantity <= 0:
        return 0.0
    return (old_quantity * old_average + quantity * unit_cost) / new_quantity


def order_lots(lots: list[Lot], method: CostingMethod) -> list[Lot]:
    """Order lots for depletion according to the costing method."""
    # Ties on entry date fall back to insertion order
    indexed = list(enumerate(lots))
    if method == CostingMethod.LIFO:
        indexed.sort(key=lambda pair: (pair[1].entry_date, pair[0]), reverse=True)
        return [lot for _, lot in indexed]
    if method == CostingMethod.FIFO:
        indexed.sort(key=lambda pair: (pair[1].entry_date, pair[0]))
        return [lot for _, lot in indexed]
    # Weighted average: per-lot cost is irrelevant, keep stored order
    return list(lots)


def select_lots(
    product: Product,
    quantity: float,
    method: CostingMethod,
) -> list[LotAllocation]:
    """
    Greedily allocate `quantity` across the product's lots.

    Each allocation is capped at the lot's remaining quantity. The result may
    cover less than `quantity` when lots run out; the caller decides what to
    do with the shortfall.
    """
    allocations: list[LotAllocation] = []
    remaining = quantity

    for lot in order_lots(product.lots, method):
        if remaining <= 0:
            break
        if lot.quantity <= 0:
            continue
        used = min(lot.quantity, remaining)
        allocations.append(LotAllocation(lot=lot, quantity=used))
        remaining -= used

    return allocations


def allocated_total(allocations: list[LotAllocation]) -> float:
    return sum(a.quantity for a in allocations)
