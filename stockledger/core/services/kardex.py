"""
Kardex projection and catalog export.

Both are read-only views derived from the catalog store.
"""

import csv
import io

from stockledger.core.entities.report import KardexReport, KardexRow
from stockledger.core.services.catalog_store import CatalogStore

CSV_HEADER = (
    "Code",
    "Description",
    "Category",
    "Stock",
    "Average Cost",
    "Suggested Price",
    "Total Value",
    "Suppliers",
)


def build_ledger(store: CatalogStore, product_id: str) -> KardexReport:
    """
    Replay a product's movements in date order with a running balance.

    Entries add and exits subtract. A movement without a unit cost is
    valued at the product's current average cost.
    """
    product = store.get_product(product_id)
    movements = sorted(store.movements_for(product_id), key=lambda m: m.date)

    report = KardexReport(
        product_id=product.id,
        description=product.description,
        code=product.code or "",
    )
    balance_quantity = 0.0
    balance_value = 0.0

    for movement in movements:
        unit_cost = movement.unit_cost if movement.unit_cost is not None else product.average_cost
        value = movement.quantity * unit_cost
        sign = 1 if movement.is_entry else -1
        balance_quantity += sign * movement.quantity
        balance_value += sign * value

        report.rows.append(
            KardexRow(
                date=movement.date,
                document=movement.document_reference,
                movement_type=movement.movement_type,
                quantity=movement.quantity,
                unit_cost=unit_cost,
                value=value,
                balance_quantity=balance_quantity,
                balance_value=balance_value,
            )
        )

    report.final_quantity = balance_quantity
    report.final_value = balance_value
    return report


def export_catalog_csv(store: CatalogStore) -> str:
    """Flat CSV summary of every product."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for product in store.products:
        writer.writerow(
            [
                product.code or "",
                product.description,
                product.category,
                f"{product.total_stock:g}",
                f"{product.average_cost:.2f}",
                f"{product.suggested_price:.2f}",
                f"{product.total_value:.2f}",
                "; ".join(product.suppliers),
            ]
        )

    return buffer.getvalue()
