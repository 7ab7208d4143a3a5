"""
Purchase import, batch reversal and manual stock adjustments.

Writes confirmed reconciliation decisions into lots and movements tagged
with the document reference, and undoes a whole import (or a sale) only
when no later movement depends on it.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from stockledger.config import document_context, get_logger
from stockledger.core.entities.document import DocumentLine, PurchaseDocument
from stockledger.core.entities.movement import Movement
from stockledger.core.entities.product import Product
from stockledger.core.entities.supplier import Supplier
from stockledger.core.exceptions import (
    LaterMovementsExistError,
    NoRecentImportError,
    NothingToRevertError,
    ValidationError,
)
from stockledger.core.services.catalog_store import CatalogStore
from stockledger.core.services.reconciliation import (
    MatchOutcome,
    ReconciliationEngine,
)
from stockledger.core.services.text_similarity import guess_category
from stockledger.core.services.unit_conversion import detect_presentation

logger = get_logger(__name__)


class LineAction(str, Enum):
    """What the user confirmed for one purchase line."""

    CREATE = "create"
    UPDATE = "update"
    LINK = "link"
    SKIP = "skip"


@dataclass
class LineConfirmation:
    """A user decision for the purchase line at `line_index`."""

    line_index: int
    action: LineAction
    product_id: str | None = None
    remember: bool = True
    category: str | None = None
    factor: float | None = None


@dataclass
class ImportResult:
    """Counts and created product ids of one purchase import."""

    document_reference: str
    total_lines: int = 0
    created: int = 0
    updated: int = 0
    pending: int = 0
    skipped: int = 0
    deferred: int = 0  # lines left unprocessed once the pending bound was hit
    applicable: bool = True
    created_product_ids: list[str] = field(default_factory=list)

    def merge(self, other: "ImportResult") -> None:
        self.total_lines += other.total_lines
        self.created += other.created
        self.updated += other.updated
        self.pending += other.pending
        self.skipped += other.skipped
        self.deferred += other.deferred
        self.created_product_ids.extend(other.created_product_ids)


@dataclass
class RevertResult:
    """Outcome of reverting a purchase import or a sale."""

    document_reference: str
    movements_removed: int = 0
    lots_removed: int = 0
    lots_restored: int = 0
    products_affected: int = 0
    products_deleted: int = 0


def _dependent_products(
    movements: list[Movement],
    product_ids: Iterable[str],
    own_references: set[str],
    after: datetime,
    lot_ids: set[str],
    drawn_since: datetime | None = None,
) -> list[str]:
    """
    Products with a movement from another document that depends on ours.

    A movement depends on ours when it is dated after `after`, or when it is
    an exit that drew from one of `lot_ids` (on or after `drawn_since`, if
    given). The second rule catches same-timestamp and backdated exits.
    """
    wanted = set(product_ids)
    blocked: list[str] = []
    for m in movements:
        if m.product_id not in wanted or m.product_id in blocked:
            continue
        if m.document_reference.strip() in own_references:
            continue
        draws_from_lot = (
            not m.is_entry
            and m.lot_id in lot_ids
            and (drawn_since is None or m.date >= drawn_since)
        )
        if m.date > after or draws_from_lot:
            blocked.append(m.product_id)
    return blocked


class ImportOrchestrator:
    """Applies purchase documents and reverses imports and sales."""

    def __init__(
        self,
        store: CatalogStore,
        engine: ReconciliationEngine | None = None,
        max_pending_per_import: int | None = None,
    ):
        self.store = store
        self.engine = engine or ReconciliationEngine(store)
        self.max_pending_per_import = max_pending_per_import

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_purchase(
        self,
        document: PurchaseDocument | dict[str, Any],
        confirmations: list[LineConfirmation] | None = None,
    ) -> ImportResult:
        """
        Import one purchase document.

        Without confirmations every goods line runs the reconciliation state
        machine. With confirmations only confirmed, non-skipped lines are
        written. The import is recorded as the latest revertible batch.
        """
        result = self._import_document(document, confirmations)
        if result.applicable:
            self.store.record_import([result.document_reference], result.created_product_ids)
        return result

    def import_batch(
        self,
        documents: Iterable[PurchaseDocument | dict[str, Any]],
    ) -> ImportResult:
        """Import several documents as one revertible batch."""
        total = ImportResult(document_reference="BATCH")
        references: list[str] = []

        for document in documents:
            result = self._import_document(document, None)
            if not result.applicable:
                total.skipped += 1
                continue
            references.append(result.document_reference)
            total.merge(result)

        if references:
            total.document_reference = references[-1]
            self.store.record_import(references, total.created_product_ids)
        logger.info(
            "purchase_batch_imported",
            documents=len(references),
            created=total.created,
            updated=total.updated,
            pending=total.pending,
        )
        return total

    def _import_document(
        self,
        payload: PurchaseDocument | dict[str, Any],
        confirmations: list[LineConfirmation] | None,
    ) -> ImportResult:
        document = PurchaseDocument.from_payload(payload)
        if document is None:
            logger.warning("purchase_document_not_applicable")
            return ImportResult(document_reference="", applicable=False)

        with document_context(document.reference, "purchase"):
            return self._import_lines(document, confirmations)

    def _import_lines(
        self,
        document: PurchaseDocument,
        confirmations: list[LineConfirmation] | None,
    ) -> ImportResult:
        result = ImportResult(
            document_reference=document.reference,
            total_lines=len(document.lines),
        )
        logger.info(
            "purchase_import_started",
            reference=document.reference,
            supplier=document.supplier.name,
            lines=result.total_lines,
            confirmed=confirmations is not None,
        )

        supplier = self.store.get_or_create_supplier(
            document.supplier.name,
            tax_id=document.supplier.tax_id,
            registration_number=document.supplier.registration_number,
            category=document.supplier.activity,
        )
        by_index = {c.line_index: c for c in confirmations or [] if c.line_index >= 0}

        for index, line in enumerate(document.lines):
            if self._pending_bound_reached(result):
                result.deferred = result.total_lines - index
                logger.warning(
                    "purchase_import_pending_bound_reached",
                    reference=document.reference,
                    deferred=result.deferred,
                )
                break

            if not line.applies:
                result.skipped += 1
                continue

            if confirmations is None:
                self._import_line(line, document, supplier, result)
                continue

            confirmation = by_index.get(index)
            if confirmation is None or confirmation.action == LineAction.SKIP:
                result.skipped += 1
                continue
            self._import_confirmed_line(line, confirmation, document, supplier, result)

        logger.info(
            "purchase_import_completed",
            reference=document.reference,
            created=result.created,
            updated=result.updated,
            pending=result.pending,
            skipped=result.skipped,
        )
        return result

    def _pending_bound_reached(self, result: ImportResult) -> bool:
        return (
            self.max_pending_per_import is not None
            and result.pending >= self.max_pending_per_import
        )

    def _import_line(
        self,
        line: DocumentLine,
        document: PurchaseDocument,
        supplier: Supplier,
        result: ImportResult,
    ) -> None:
        decision = self.engine.reconcile(line)

        if decision.outcome == MatchOutcome.PENDING:
            self.engine.queue_pending_purchase(
                line,
                decision,
                document_reference=document.reference,
                supplier_name=supplier.name,
                document_date=document.issue_date,
                presentation=detect_presentation(line.description),
            )
            result.pending += 1
            return

        if decision.is_resolved:
            product = decision.product
            self._learn_from_line(product, line)
            result.updated += 1
        else:
            product = self.store.create_product(
                line.description,
                category=guess_category(line.description),
                supplier_code=line.code,
            )
            result.created += 1
            result.created_product_ids.append(product.id)

        self._receive(product, line, document, supplier)

    def _import_confirmed_line(
        self,
        line: DocumentLine,
        confirmation: LineConfirmation,
        document: PurchaseDocument,
        supplier: Supplier,
        result: ImportResult,
    ) -> None:
        action = confirmation.action

        if action in (LineAction.LINK, LineAction.UPDATE) and confirmation.product_id:
            product = self.store.find_product(confirmation.product_id)
            if product is None:
                # Unknown target: let the state machine decide
                self._import_line(line, document, supplier, result)
                return
            if confirmation.remember:
                self.store.remember_mapping(line.description, product.id)
            self._learn_from_line(product, line)
            self._receive(product, line, document, supplier, confirmation.factor)
            result.updated += 1
            return

        if action == LineAction.CREATE:
            product = self.store.create_product(
                line.description,
                category=confirmation.category or guess_category(line.description),
                supplier_code=line.code,
            )
            if confirmation.remember:
                self.store.remember_mapping(line.description, product.id)
            result.created += 1
            result.created_product_ids.append(product.id)
            self._receive(product, line, document, supplier, confirmation.factor)
            return

        self._import_line(line, document, supplier, result)

    def _learn_from_line(self, product: Product, line: DocumentLine) -> None:
        """Record a more specific description as a variant and adopt a supplier code."""
        if len(line.description) > len(product.description) and line.description not in product.variants:
            product.variants.append(line.description)
        if not product.preferred_code and line.code:
            product.preferred_code = line.code

    def _receive(
        self,
        product: Product,
        line: DocumentLine,
        document: PurchaseDocument,
        supplier: Supplier,
        factor: float | None = None,
    ) -> Movement:
        presentation = detect_presentation(line.description, product.base_unit)
        if factor:
            self.store.set_presentation_factor(product.id, presentation, factor)
        return self.store.register_entry(
            product.id,
            line.quantity,
            line.unit_price,
            document_reference=document.reference,
            date=document.issue_date,
            presentation=presentation,
            supplier=supplier,
            supplier_code=line.code,
        )

    # ------------------------------------------------------------------
    # Reversal
    # ------------------------------------------------------------------

    def revert_last_import(self) -> RevertResult:
        """
        Undo the latest purchase import.

        Refused when any affected product has a movement from another
        document dated after the import, or an exit that drew from one of
        the imported lots. Products the import created are deleted when
        nothing else references them afterwards.

        Supplier totals, last purchase dates, learned variants and adopted
        supplier codes are left as they are.
        """
        record = self.store.last_import
        references = set(record.document_references) if record else set()
        if not references:
            raise NoRecentImportError()

        imported = [
            m for m in self.store.movements
            if m.is_entry and m.document_reference.strip() in references
        ]
        if not imported:
            raise NoRecentImportError("No movements found for the last import")

        latest = max(m.date for m in imported)
        product_ids = list(dict.fromkeys(m.product_id for m in imported))
        lot_ids = {m.lot_id for m in imported if m.lot_id}
        blocked = _dependent_products(
            self.store.movements, product_ids, references, latest, lot_ids
        )
        if blocked:
            logger.warning("revert_blocked", references=sorted(references), product_ids=blocked)
            raise LaterMovementsExistError(blocked)

        result = RevertResult(
            document_reference=record.document_references[-1],
            products_affected=len(product_ids),
        )
        result.movements_removed = self.store.remove_movements({m.id for m in imported})
        for product_id in product_ids:
            product = self.store.find_product(product_id)
            if product is not None:
                result.lots_removed += self.store.remove_lots(product, lot_ids)

        self.store.drop_pending_purchases_for(references)

        orphaned: set[str] = set()
        for product_id in record.created_product_ids:
            product = self.store.find_product(product_id)
            if product is None:
                continue
            if product.total_stock == 0 and not product.lots and not self.store.movements_for(product_id):
                orphaned.add(product_id)
        if orphaned:
            self.store.purge_products(orphaned)
        result.products_deleted = len(orphaned)

        self.store.clear_last_import()
        logger.info(
            "purchase_import_reverted",
            references=sorted(references),
            movements_removed=result.movements_removed,
            lots_removed=result.lots_removed,
            products_deleted=result.products_deleted,
        )
        return result

    def revert_sale(self, document_reference: str) -> RevertResult:
        """
        Undo the exits of one sale document.

        Quantities go back to their original lot, or to a new reversal lot
        when that lot has since been emptied and pruned. Exits that no lot
        covered only have their movement removed. Refused while another
        document has a later movement on the same products, or drew from the
        same lots at or after the sale.
        """
        reference = (document_reference or "").strip()
        if not reference:
            raise ValidationError("document_reference", "Document reference is required")

        exits = [
            m for m in self.store.movements
            if not m.is_entry and m.document_reference.strip() == reference
        ]
        if not exits:
            raise NothingToRevertError(reference)

        latest = max(m.date for m in exits)
        product_ids = list(dict.fromkeys(m.product_id for m in exits))
        blocked = _dependent_products(
            self.store.movements,
            product_ids,
            {reference},
            latest,
            {m.lot_id for m in exits if m.lot_id},
            drawn_since=min(m.date for m in exits),
        )
        if blocked:
            logger.warning("revert_blocked", references=[reference], product_ids=blocked)
            raise LaterMovementsExistError(blocked)

        result = RevertResult(document_reference=reference, products_affected=len(product_ids))
        for movement in exits:
            product = self.store.find_product(movement.product_id)
            if product is None or movement.lot_id is None:
                continue
            self.store.restore_quantity(
                product,
                movement.quantity,
                movement.lot_id,
                unit_cost=movement.unit_cost,
            )
            result.lots_restored += 1

        result.movements_removed = self.store.remove_movements({m.id for m in exits})
        for product_id in product_ids:
            product = self.store.find_product(product_id)
            if product is not None:
                self.store.recompute_from_lots(product)

        logger.info(
            "sale_reverted",
            reference=reference,
            movements_removed=result.movements_removed,
            products=len(product_ids),
        )
        return result

    # ------------------------------------------------------------------
    # Manual adjustments
    # ------------------------------------------------------------------

    def manual_entry(
        self,
        product_id: str,
        quantity: float,
        unit_cost: float | None = None,
        date: datetime | None = None,
        reference: str = "ADJUSTMENT_IN",
        supplier_name: str = "ADJUSTMENT",
    ) -> Movement:
        """Add stock in base units; cost defaults to the current average."""
        product = self.store.get_product(product_id)
        cost = product.average_cost if unit_cost is None else unit_cost
        movement = self.store.register_entry(
            product.id,
            quantity,
            cost,
            document_reference=reference or "ADJUSTMENT_IN",
            date=date,
            supplier_name=(supplier_name or "").strip() or "ADJUSTMENT",
        )
        logger.info(
            "manual_entry_recorded",
            product_id=product.id,
            quantity=movement.quantity,
            reference=movement.document_reference,
        )
        return movement

    def manual_exit(
        self,
        product_id: str,
        quantity: float,
        date: datetime | None = None,
        reference: str = "ADJUSTMENT_OUT",
        reason: str = "ADJUSTMENT",
    ) -> list[Movement]:
        """Remove stock in base units; never goes below zero."""
        result = self.store.register_exit(
            product_id,
            quantity,
            document_reference=reference or "ADJUSTMENT_OUT",
            date=date,
            customer_name=reason or "ADJUSTMENT",
            allow_negative=False,
        )
        logger.info(
            "manual_exit_recorded",
            product_id=product_id,
            quantity=quantity,
            reference=reference,
        )
        return result.movements
