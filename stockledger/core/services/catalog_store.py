"""
Catalog store.

Owns the in-memory ledger state (products with their lots, suppliers,
movements, the remembered description mapping and both pending queues)
and is the only place that mutates it. One instance is built per loaded
snapshot and passed explicitly to the services that need it.

Pure service -- no infrastructure imports. Persistence happens in the
application layer by saving `store.snapshot`.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from stockledger.config import get_logger
from stockledger.core.entities.movement import Movement, MovementType
from stockledger.core.entities.pending import BatchImportRecord, PendingPurchase, PendingSale
from stockledger.core.entities.product import (
    DEFAULT_CATEGORY,
    Lot,
    Presentation,
    Product,
    as_utc,
)
from stockledger.core.entities.report import CategorySummary, InventorySummary
from stockledger.core.entities.snapshot import InventoryConfig, LedgerSnapshot
from stockledger.core.entities.supplier import Supplier
from stockledger.core.exceptions import (
    InsufficientStockError,
    PendingNotFoundError,
    ProductHasHistoryError,
    ProductNotFoundError,
)
from stockledger.core.services.costing import (
    allocated_total,
    select_lots,
    validate_quantity,
    weighted_average,
)
from stockledger.core.services.text_similarity import (
    generate_product_code,
    normalize_description_key,
    ordered_keywords,
)
from stockledger.core.services.unit_conversion import (
    resolve_factor,
    set_base_unit,
    set_presentation_factor,
    to_base_unit_cost,
)

logger = get_logger(__name__)

# Master-data fields that update_product may change
EDITABLE_FIELDS = frozenset(
    {"description", "category", "code", "preferred_code", "favorite", "track_inventory"}
)


@dataclass
class ExitResult:
    """Movements written by one exit and any quantity no lot covered."""

    product: Product
    movements: list[Movement] = field(default_factory=list)
    uncovered: float = 0.0


@dataclass
class CatalogImportResult:
    """Counts of a master-data catalog import."""

    created: int = 0
    updated: int = 0
    skipped: int = 0


def _as_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


class CatalogStore:
    """In-memory catalog, lot and movement state with its mutation methods."""

    def __init__(self, snapshot: LedgerSnapshot | None = None) -> None:
        self._snapshot = snapshot or LedgerSnapshot()
        self._apply_load_defaults()

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    @property
    def config(self) -> InventoryConfig:
        return self._snapshot.config

    def update_config(self, **changes: Any) -> InventoryConfig:
        """Validate and replace the inventory config, then refresh prices."""
        merged = self._snapshot.config.model_dump()
        merged.update({k: v for k, v in changes.items() if v is not None})
        self._snapshot.config = InventoryConfig.model_validate(merged)
        for product in self._snapshot.products:
            self._refresh_price(product)
        logger.info("inventory_config_updated", changes=list(changes))
        return self._snapshot.config

    def _apply_load_defaults(self) -> None:
        """Migrate products loaded from older snapshots."""
        for product in self._snapshot.products:
            if not product.keywords:
                product.keywords = ordered_keywords(product.description)
            product.lots = [lot for lot in product.lots if lot.quantity > 0]

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    @property
    def products(self) -> list[Product]:
        return self._snapshot.products

    def list_products(self, active_only: bool = False) -> list[Product]:
        if active_only:
            return [p for p in self._snapshot.products if p.active]
        return list(self._snapshot.products)

    def find_product(self, product_id: str) -> Product | None:
        for product in self._snapshot.products:
            if product.id == product_id:
                return product
        return None

    def get_product(self, product_id: str) -> Product:
        product = self.find_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def find_by_code(self, code: str) -> Product | None:
        """Find a product by preferred code, then by internal code (case-insensitive)."""
        wanted = _as_text(code).lower()
        if not wanted:
            return None
        for product in self._snapshot.products:
            if _as_text(product.preferred_code).lower() == wanted:
                return product
        for product in self._snapshot.products:
            if _as_text(product.code).lower() == wanted:
                return product
        return None

    def create_product(
        self,
        description: str,
        category: str = DEFAULT_CATEGORY,
        supplier_code: str | None = None,
    ) -> Product:
        """Create a product with a generated code and zero stock."""
        category = _as_text(category) or DEFAULT_CATEGORY
        code = generate_product_code(category, (p.code or "" for p in self._snapshot.products))
        product = Product(
            description=_as_text(description).upper(),
            category=category,
            code=code,
            preferred_code=_as_text(supplier_code) or None,
            keywords=ordered_keywords(description),
        )
        self._snapshot.products.append(product)
        logger.info(
            "product_created",
            product_id=product.id,
            code=code,
            category=category,
        )
        return product

    def update_product(self, product_id: str, **changes: Any) -> Product:
        """Update master data only; stock, lots and movements are untouched."""
        product = self.get_product(product_id)
        for name, value in changes.items():
            if name not in EDITABLE_FIELDS or value is None:
                continue
            if name == "description":
                value = _as_text(value).upper()
                product.keywords = ordered_keywords(value)
            setattr(product, name, value)
        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        return product

    def deactivate(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        product.active = False
        logger.info("product_deactivated", product_id=product_id)
        return product

    def reactivate(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        product.active = True
        logger.info("product_reactivated", product_id=product_id)
        return product

    def delete(self, product_id: str) -> None:
        """Delete a product that has neither lots nor movements."""
        product = self.get_product(product_id)
        movement_count = sum(1 for m in self._snapshot.movements if m.product_id == product_id)
        if product.lots or movement_count:
            raise ProductHasHistoryError(product_id, len(product.lots), movement_count)

        self.purge_products({product_id})
        logger.info("product_deleted", product_id=product_id)

    def purge_products(self, product_ids: set[str]) -> None:
        """Drop products and every reference to them."""
        snap = self._snapshot
        snap.products = [p for p in snap.products if p.id not in product_ids]
        snap.movements = [m for m in snap.movements if m.product_id not in product_ids]
        snap.description_map = {
            key: pid for key, pid in snap.description_map.items() if pid not in product_ids
        }
        for pending in (*snap.pending_sales, *snap.pending_purchases):
            pending.candidates = [
                c for c in pending.candidates if c.product_id not in product_ids
            ]

    def set_presentation_factor(self, product_id: str, presentation: str, factor: float) -> bool:
        return set_presentation_factor(self.get_product(product_id), presentation, factor)

    # ------------------------------------------------------------------
    # Lots and pricing
    # ------------------------------------------------------------------

    def _refresh_price(self, product: Product) -> None:
        product.suggested_price = product.average_cost * (1 + self.config.suggested_margin)

    def add_lot(self, product_id: str, lot: Lot) -> Product:
        """
        Append a lot and refresh derived fields.

        Stock and average cost follow from the lots; the suggested price,
        supplier list and last purchase date are updated here.
        """
        product = self.get_product(product_id)
        lot.quantity = validate_quantity(lot.quantity)

        old_stock = product.total_stock
        old_average = product.average_cost
        product.lots.append(lot)
        new_average = weighted_average(old_stock, old_average, lot.quantity, lot.unit_cost)
        product.suggested_price = new_average * (1 + self.config.suggested_margin)

        if lot.supplier_name and lot.supplier_name not in product.suppliers:
            product.suppliers.append(lot.supplier_name)
        product.last_purchase_date = lot.entry_date
        if not lot.trace_code:
            lot.trace_code = f"{product.id}-{len(product.lots):03d}"

        logger.debug(
            "lot_added",
            product_id=product.id,
            lot_id=lot.id,
            quantity=lot.quantity,
            unit_cost=round(lot.unit_cost, 4),
            new_stock=product.total_stock,
            new_average=round(new_average, 4),
        )
        return product

    def recompute_from_lots(self, product: Product) -> Product:
        """Prune empty lots and refresh the suggested price."""
        product.lots = [lot for lot in product.lots if lot.quantity > 0]
        self._refresh_price(product)
        return product

    def remove_lots(self, product: Product, lot_ids: set[str]) -> int:
        """Remove lots by id; returns how many were removed."""
        before = len(product.lots)
        product.lots = [lot for lot in product.lots if lot.id not in lot_ids]
        self.recompute_from_lots(product)
        return before - len(product.lots)

    def restore_quantity(
        self,
        product: Product,
        quantity: float,
        lot_id: str | None,
        unit_cost: float | None = None,
    ) -> Lot:
        """
        Return quantity to its original lot, or to a new reversal lot when
        that lot no longer exists.
        """
        lot = product.find_lot(lot_id) if lot_id else None
        if lot is None:
            lot = Lot(
                supplier_id="REVERSAL",
                supplier_name="REVERSAL",
                quantity=0.0,
                unit_cost=product.average_cost if unit_cost is None else unit_cost,
                trace_code=product.next_trace_code(),
            )
            product.lots.append(lot)
        lot.quantity += quantity
        return lot

    def register_entry(
        self,
        product_id: str,
        quantity: float,
        unit_price: float,
        document_reference: str,
        date: datetime | None = None,
        presentation: str | None = None,
        supplier: Supplier | None = None,
        supplier_code: str | None = None,
        supplier_name: str | None = None,
    ) -> Movement:
        """
        Receive `quantity` of `presentation` at `unit_price` per presentation.

        Converts to base units through the product's presentation factor,
        appends the lot and its entry movement and updates supplier totals.
        """
        product = self.get_product(product_id)
        quantity = validate_quantity(quantity)
        when = as_utc(date)
        name = (presentation or "").strip().upper() or product.base_unit

        resolution = resolve_factor(product, name)
        base_quantity = quantity * resolution.factor
        base_cost = to_base_unit_cost(unit_price, resolution.factor)
        supplier_name = supplier.name if supplier else (supplier_name or "")

        lot = Lot(
            supplier_id=supplier.id if supplier else "",
            supplier_name=supplier_name,
            quantity=base_quantity,
            unit_cost=base_cost,
            entry_date=when,
            supplier_code=supplier_code,
            trace_code=product.next_trace_code(),
        )
        self.add_lot(product.id, lot)

        if supplier is not None:
            supplier.last_purchase_date = when
            supplier.total_purchases += quantity * (unit_price or 0.0)

        return self.record_movement(
            Movement(
                product_id=product.id,
                movement_type=MovementType.ENTRY,
                quantity=base_quantity,
                unit=name,
                original_quantity=quantity,
                conversion_factor=resolution.factor,
                unit_cost=base_cost,
                lot_id=lot.id,
                document_reference=document_reference,
                date=when,
                supplier_name=supplier_name or None,
            )
        )

    def register_exit(
        self,
        product_id: str,
        quantity: float,
        document_reference: str,
        date: datetime | None = None,
        unit_price: float | None = None,
        customer_name: str | None = None,
        allow_negative: bool | None = None,
    ) -> ExitResult:
        """
        Deplete stock under the configured costing method.

        Writes one exit movement per lot allocation. When negative stock is
        allowed and the lots fall short, the uncovered remainder is written
        as a movement without a lot so the Kardex shows the negative balance.
        """
        product = self.get_product(product_id)
        quantity = validate_quantity(quantity)
        if allow_negative is None:
            allow_negative = self.config.allow_negative_stock

        available = product.total_stock
        if not allow_negative and available < quantity:
            raise InsufficientStockError(product_id, quantity, available)

        when = as_utc(date)
        average = product.average_cost
        allocations = select_lots(product, quantity, self.config.costing_method)
        result = ExitResult(product=product)

        for allocation in allocations:
            allocation.lot.quantity -= allocation.quantity
            result.movements.append(
                self.record_movement(
                    Movement(
                        product_id=product.id,
                        movement_type=MovementType.EXIT,
                        quantity=allocation.quantity,
                        unit_cost=allocation.lot.unit_cost,
                        unit_price=unit_price,
                        lot_id=allocation.lot.id,
                        document_reference=document_reference,
                        date=when,
                        customer_name=customer_name,
                    )
                )
            )

        result.uncovered = quantity - allocated_total(allocations)
        if result.uncovered > 1e-9:
            result.movements.append(
                self.record_movement(
                    Movement(
                        product_id=product.id,
                        movement_type=MovementType.EXIT,
                        quantity=result.uncovered,
                        unit_cost=average or None,
                        unit_price=unit_price,
                        document_reference=document_reference,
                        date=when,
                        customer_name=customer_name,
                    )
                )
            )
            logger.warning(
                "exit_exceeds_stock",
                product_id=product.id,
                requested=quantity,
                uncovered=round(result.uncovered, 4),
            )
        else:
            result.uncovered = 0.0

        product.last_sale_date = when
        self.recompute_from_lots(product)
        return result

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    @property
    def movements(self) -> list[Movement]:
        return self._snapshot.movements

    def record_movement(self, movement: Movement) -> Movement:
        """Append a movement to the ledger."""
        self._snapshot.movements.append(movement)
        logger.debug(
            "movement_recorded",
            movement_id=movement.id,
            product_id=movement.product_id,
            type=movement.movement_type.value,
            qty=movement.quantity,
            reference=movement.document_reference,
        )
        return movement

    def movements_for(self, product_id: str) -> list[Movement]:
        return [m for m in self._snapshot.movements if m.product_id == product_id]

    def remove_movements(self, movement_ids: set[str]) -> int:
        before = len(self._snapshot.movements)
        self._snapshot.movements = [
            m for m in self._snapshot.movements if m.id not in movement_ids
        ]
        return before - len(self._snapshot.movements)

    # ------------------------------------------------------------------
    # Suppliers
    # ------------------------------------------------------------------

    @property
    def suppliers(self) -> list[Supplier]:
        return self._snapshot.suppliers

    def get_or_create_supplier(
        self,
        name: str,
        tax_id: str | None = None,
        registration_number: str | None = None,
        category: str | None = None,
    ) -> Supplier:
        """Find a supplier by case-insensitive name or create it."""
        wanted = _as_text(name).lower()
        for supplier in self._snapshot.suppliers:
            if supplier.name.lower() == wanted:
                return supplier

        supplier = Supplier(
            name=_as_text(name),
            tax_id=tax_id,
            registration_number=registration_number,
            category=category,
        )
        self._snapshot.suppliers.append(supplier)
        logger.info("supplier_created", supplier_id=supplier.id, name=supplier.name)
        return supplier

    # ------------------------------------------------------------------
    # Remembered description mapping
    # ------------------------------------------------------------------

    def remember_mapping(self, description: str, product_id: str) -> None:
        self._snapshot.description_map[normalize_description_key(description)] = product_id

    def lookup_mapping(self, description: str) -> Product | None:
        """Product remembered for a description, if it still exists."""
        product_id = self._snapshot.description_map.get(normalize_description_key(description))
        if product_id is None:
            return None
        return self.find_product(product_id)

    # ------------------------------------------------------------------
    # Pending queues
    # ------------------------------------------------------------------

    @property
    def pending_purchases(self) -> list[PendingPurchase]:
        return self._snapshot.pending_purchases

    @property
    def pending_sales(self) -> list[PendingSale]:
        return self._snapshot.pending_sales

    def add_pending_purchase(self, pending: PendingPurchase) -> PendingPurchase:
        self._snapshot.pending_purchases.append(pending)
        return pending

    def add_pending_sale(self, pending: PendingSale) -> PendingSale:
        self._snapshot.pending_sales.append(pending)
        return pending

    def find_pending_purchase(self, pending_id: str) -> PendingPurchase | None:
        for pending in self._snapshot.pending_purchases:
            if pending.id == pending_id:
                return pending
        return None

    def find_pending_sale(self, pending_id: str) -> PendingSale | None:
        for pending in self._snapshot.pending_sales:
            if pending.id == pending_id:
                return pending
        return None

    def remove_pending(self, pending_id: str) -> None:
        """Remove a pending entry from whichever queue holds it."""
        snap = self._snapshot
        before = len(snap.pending_purchases) + len(snap.pending_sales)
        snap.pending_purchases = [p for p in snap.pending_purchases if p.id != pending_id]
        snap.pending_sales = [p for p in snap.pending_sales if p.id != pending_id]
        if len(snap.pending_purchases) + len(snap.pending_sales) == before:
            raise PendingNotFoundError(pending_id)

    def drop_pending_purchases_for(self, document_references: Iterable[str]) -> int:
        refs = set(document_references)
        before = len(self._snapshot.pending_purchases)
        self._snapshot.pending_purchases = [
            p for p in self._snapshot.pending_purchases if p.document_reference not in refs
        ]
        return before - len(self._snapshot.pending_purchases)

    # ------------------------------------------------------------------
    # Last purchase import
    # ------------------------------------------------------------------

    @property
    def last_import(self) -> BatchImportRecord | None:
        return self._snapshot.last_import

    def record_import(
        self,
        document_references: Iterable[str],
        created_product_ids: Iterable[str],
    ) -> BatchImportRecord | None:
        """Remember the latest purchase import so it can be reverted."""
        refs = list(dict.fromkeys(r.strip() for r in document_references if r and r.strip()))
        if not refs:
            return None
        record = BatchImportRecord(
            document_references=refs,
            created_product_ids=list(dict.fromkeys(created_product_ids)),
        )
        self._snapshot.last_import = record
        return record

    def clear_last_import(self) -> None:
        self._snapshot.last_import = None

    # ------------------------------------------------------------------
    # Catalog-level queries and bulk master data
    # ------------------------------------------------------------------

    def import_catalog(self, items: Iterable[dict[str, Any]]) -> CatalogImportResult:
        """
        Upsert product master data without touching stock, lots or movements.

        Items are matched by id, code, preferred code, then exact description.
        """
        result = CatalogImportResult()

        for item in items:
            if not isinstance(item, dict):
                result.skipped += 1
                continue
            description = _as_text(item.get("description"))
            if not description:
                result.skipped += 1
                continue

            category = _as_text(item.get("category")) or DEFAULT_CATEGORY
            code = _as_text(item.get("code"))
            preferred_code = _as_text(item.get("preferred_code"))
            presentations = _parse_presentations(item.get("presentations"))

            product = (
                (self.find_product(_as_text(item.get("id"))) if item.get("id") else None)
                or (self.find_by_code(code) if code else None)
                or (self.find_by_code(preferred_code) if preferred_code else None)
                or next(
                    (p for p in self._snapshot.products
                     if p.description.lower() == description.lower()),
                    None,
                )
            )

            if product is None:
                product = Product(
                    description=description.upper(),
                    category=category,
                    code=code or generate_product_code(
                        category, (p.code or "" for p in self._snapshot.products)
                    ),
                    preferred_code=preferred_code or None,
                    active=item.get("active", True),
                    base_unit=_as_text(item.get("base_unit")) or "UNIT",
                    presentations=presentations,
                    suggested_price=_as_float(item.get("suggested_price")),
                    favorite=bool(item.get("favorite", False)),
                    track_inventory=item.get("track_inventory", True),
                    keywords=ordered_keywords(description),
                    variants=list(item.get("variants") or []),
                )
                self._snapshot.products.append(product)
                result.created += 1
                continue

            product.description = description.upper()
            product.category = category
            product.keywords = ordered_keywords(description)
            if code:
                product.code = code
            if preferred_code:
                product.preferred_code = preferred_code
            for flag in ("active", "track_inventory", "favorite"):
                if isinstance(item.get(flag), bool):
                    setattr(product, flag, item[flag])
            if presentations:
                product.presentations = presentations
            set_base_unit(product, _as_text(item.get("base_unit")) or product.base_unit)
            if item.get("suggested_price") is not None:
                product.suggested_price = _as_float(item.get("suggested_price"))
            result.updated += 1

        logger.info(
            "catalog_imported",
            created=result.created,
            updated=result.updated,
            skipped=result.skipped,
        )
        return result

    def search(self, query: str, limit: int = 20) -> list[Product]:
        """Rank active products for a free-text query."""
        active = [p for p in self._snapshot.products if p.active]
        text = _as_text(query).lower()
        if not text:
            return active[:limit]

        query_words = set(ordered_keywords(query))
        scored: list[tuple[int, Product]] = []
        for product in active:
            score = 0
            if text in product.description.lower():
                score += 100
            score += 20 * len(query_words & set(product.keywords))
            if text in (product.code or "").lower():
                score += 50
            if text in (product.preferred_code or "").lower():
                score += 50
            if product.favorite:
                score += 10
            if score > 0:
                scored.append((score, product))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [product for _, product in scored[:limit]]

    def summary(self) -> InventorySummary:
        """Aggregate stock, value and alerts across the catalog."""
        summary = InventorySummary(total_products=len(self._snapshot.products))
        threshold = self.config.low_stock_alert

        for product in self._snapshot.products:
            stock = product.total_stock
            value = product.total_value
            summary.total_value += value

            bucket = summary.categories.setdefault(product.category, CategorySummary())
            bucket.quantity += stock
            bucket.value += value
            bucket.products += 1

            if stock <= 0:
                summary.out_of_stock += 1
            elif stock < threshold:
                summary.low_stock += 1

        summary.total_categories = len(summary.categories)
        return summary


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _parse_presentations(raw: Any) -> list[Presentation]:
    if not isinstance(raw, list):
        return []
    parsed: list[Presentation] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        name = _as_text(entry.get("name")).upper()
        factor = _as_float(entry.get("factor"))
        if name and factor > 0:
            parsed.append(Presentation(name=name, factor=factor))
    return parsed


__all__ = ["CatalogStore", "CatalogImportResult", "ExitResult"]
