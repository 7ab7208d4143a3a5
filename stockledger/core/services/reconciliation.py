"""
Reconciliation engine.

Decides, for each incoming document line, whether it belongs to an
existing product, should create a new one, or must wait in a pending
queue for a human decision. Also applies sale documents and resolves
pending entries.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from stockledger.config import document_context, get_logger
from stockledger.core.entities.document import DocumentLine, SaleDocument
from stockledger.core.entities.movement import Movement
from stockledger.core.entities.pending import MatchCandidate, PendingPurchase, PendingSale
from stockledger.core.entities.product import Product, utc_now
from stockledger.core.interfaces.similarity import ISimilarityScorer
from stockledger.core.services.catalog_store import CatalogStore
from stockledger.core.services.text_similarity import (
    KeywordSimilarityScorer,
    extract_codes,
    guess_category,
    rank_similar,
)

logger = get_logger(__name__)

MAX_CANDIDATES = 5


class MatchOutcome(str, Enum):
    """Result of reconciling one line."""

    UPDATE_EXISTING = "update_existing"
    CREATE_NEW = "create_new"
    PENDING = "pending"


class MatchReason(str, Enum):
    """Which rule produced the outcome."""

    CODE = "code"
    REMEMBERED = "remembered"
    SIMILARITY = "similarity"
    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"
    FALLBACK_DISABLED = "fallback_disabled"


@dataclass
class MatchDecision:
    """Outcome of the reconciliation state machine for one line."""

    outcome: MatchOutcome
    reason: MatchReason
    product: Product | None = None
    score: float | None = None
    candidates: list[MatchCandidate] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return self.outcome == MatchOutcome.UPDATE_EXISTING and self.product is not None


@dataclass
class SaleResult:
    """Summary of applying one sale document."""

    document_reference: str
    applied: int = 0
    pending: int = 0
    skipped: int = 0
    movements: list[Movement] = field(default_factory=list)


class ReconciliationEngine:
    """
    Line-to-product matching over a catalog store.

    Matching order: product code, remembered description mapping, then
    similarity against the active catalog. Ambiguity never raises; it
    degrades to a pending decision.
    """

    def __init__(
        self,
        store: CatalogStore,
        scorer: ISimilarityScorer | None = None,
    ):
        self.store = store
        self.scorer = scorer or KeywordSimilarityScorer()

    def _match_code(self, line: DocumentLine) -> Product | None:
        """Product for the line code, else for a numbered code printed in the description."""
        if line.code:
            product = self.store.find_by_code(line.code)
            if product is not None:
                return product
        for code in extract_codes(line.description):
            if any(ch.isdigit() for ch in code):
                product = self.store.find_by_code(code)
                if product is not None:
                    return product
        return None

    def reconcile(
        self,
        line: DocumentLine,
        require_confirmation: bool = False,
    ) -> MatchDecision:
        """
        Classify a document line.

        A similarity match that is unique or scores at least the auto
        threshold is remembered as a description mapping so later documents
        resolve at the mapping step. With `require_confirmation`, a line with
        no candidates is returned as pending instead of create-new.
        """
        config = self.store.config

        product = self._match_code(line)
        if product is not None:
            return MatchDecision(MatchOutcome.UPDATE_EXISTING, MatchReason.CODE, product, 1.0)

        product = self.store.lookup_mapping(line.description)
        if product is not None:
            return MatchDecision(MatchOutcome.UPDATE_EXISTING, MatchReason.REMEMBERED, product, 1.0)

        if not config.fallback_by_description:
            return MatchDecision(MatchOutcome.CREATE_NEW, MatchReason.FALLBACK_DISABLED)

        hits = rank_similar(
            line.description,
            self.store.list_products(active_only=True),
            threshold=config.ask_match_threshold,
            scorer=self.scorer,
        )

        if not hits:
            outcome = MatchOutcome.PENDING if require_confirmation else MatchOutcome.CREATE_NEW
            return MatchDecision(outcome, MatchReason.NO_MATCH)

        top = hits[0]
        if len(hits) == 1 or top.score >= config.auto_match_threshold:
            self.store.remember_mapping(line.description, top.product.id)
            logger.debug(
                "reconciliation_matched",
                description=line.description,
                product_id=top.product.id,
                score=round(top.score, 4),
                hits=len(hits),
            )
            return MatchDecision(
                MatchOutcome.UPDATE_EXISTING,
                MatchReason.SIMILARITY,
                top.product,
                top.score,
            )

        candidates = [
            MatchCandidate(
                product_id=hit.product.id,
                description=hit.product.description,
                score=hit.score,
            )
            for hit in hits[:MAX_CANDIDATES]
        ]
        logger.info(
            "reconciliation_pending",
            description=line.description,
            top_score=round(top.score, 4),
            candidates=len(candidates),
        )
        return MatchDecision(
            MatchOutcome.PENDING,
            MatchReason.AMBIGUOUS,
            score=top.score,
            candidates=candidates,
        )

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def apply_sale(self, document: SaleDocument) -> SaleResult:
        """
        Deplete stock for the goods lines of a sale document.

        Lines with a code are sold against that product and skipped when the
        code is unknown. Lines without a code go through `reconcile`; those
        without a confident match are queued as pending sales.
        """
        issued = document.issue_date or utc_now().date()
        reference = document.reference or f"SALE:{issued.isoformat()}"
        with document_context(reference, "sale"):
            return self._apply_sale_lines(document, reference)

    def _apply_sale_lines(self, document: SaleDocument, reference: str) -> SaleResult:
        result = SaleResult(document_reference=reference)
        config = self.store.config

        for line in document.lines:
            if not line.applies:
                result.skipped += 1
                continue

            if line.code:
                product = self.store.find_by_code(line.code)
                if product is None:
                    logger.info("sale_line_unknown_code", code=line.code, reference=reference)
                    result.skipped += 1
                    continue
                self._sell(product, line.quantity, line.unit_price, document, reference, result)
                continue

            if not config.fallback_by_description:
                result.skipped += 1
                continue

            decision = self.reconcile(line, require_confirmation=True)
            if decision.is_resolved:
                self._sell(
                    decision.product, line.quantity, line.unit_price, document, reference, result
                )
                continue

            self.store.add_pending_sale(
                PendingSale(
                    document_reference=reference,
                    customer_name=document.customer_name,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    candidates=decision.candidates,
                )
            )
            result.pending += 1

        logger.info(
            "sale_applied",
            reference=reference,
            applied=result.applied,
            pending=result.pending,
            skipped=result.skipped,
        )
        return result

    def _sell(
        self,
        product: Product,
        quantity: float,
        unit_price: float,
        document: SaleDocument,
        reference: str,
        result: SaleResult,
    ) -> None:
        exit_result = self.store.register_exit(
            product.id,
            quantity,
            document_reference=reference,
            unit_price=unit_price,
            customer_name=document.customer_name,
        )
        result.movements.extend(exit_result.movements)
        result.applied += 1

    # ------------------------------------------------------------------
    # Pending resolution
    # ------------------------------------------------------------------

    def resolve_pending_purchase(
        self,
        pending_id: str,
        product_id: str,
        remember: bool = True,
    ) -> Movement | None:
        """
        Link a pending purchase line to a product and receive it.

        Returns None when the entry is no longer queued, so a repeated
        resolution writes nothing.
        """
        pending = self.store.find_pending_purchase(pending_id)
        if pending is None:
            logger.info("pending_already_resolved", pending_id=pending_id)
            return None

        product = self.store.get_product(product_id)
        if remember:
            self.store.remember_mapping(pending.description, product.id)

        supplier = self.store.get_or_create_supplier(pending.supplier_name)
        movement = self.store.register_entry(
            product.id,
            pending.quantity,
            pending.unit_price,
            document_reference=pending.document_reference,
            date=pending.document_date,
            presentation=pending.presentation,
            supplier=supplier,
            supplier_code=pending.code or None,
        )
        self.store.remove_pending(pending.id)
        logger.info(
            "pending_purchase_resolved",
            pending_id=pending.id,
            product_id=product.id,
            remember=remember,
        )
        return movement

    def create_and_resolve_pending_purchase(
        self,
        pending_id: str,
        remember: bool = True,
        category: str | None = None,
    ) -> Product | None:
        """Create a product from a pending purchase line and receive it."""
        pending = self.store.find_pending_purchase(pending_id)
        if pending is None:
            logger.info("pending_already_resolved", pending_id=pending_id)
            return None

        product = self.store.create_product(
            pending.description,
            category=category or guess_category(pending.description),
            supplier_code=pending.code or None,
        )
        self.resolve_pending_purchase(pending.id, product.id, remember=remember)
        return product

    def resolve_pending_sale(
        self,
        pending_id: str,
        product_id: str,
        remember: bool = True,
    ) -> list[Movement] | None:
        """Link a pending sale line to a product and apply the exit."""
        pending = self.store.find_pending_sale(pending_id)
        if pending is None:
            logger.info("pending_already_resolved", pending_id=pending_id)
            return None

        product = self.store.get_product(product_id)
        if remember:
            self.store.remember_mapping(pending.description, product.id)

        exit_result = self.store.register_exit(
            product.id,
            pending.quantity,
            document_reference=pending.document_reference,
            unit_price=pending.unit_price,
            customer_name=pending.customer_name,
        )
        self.store.remove_pending(pending.id)
        logger.info("pending_sale_resolved", pending_id=pending.id, product_id=product.id)
        return exit_result.movements

    def dismiss_pending(self, pending_id: str) -> None:
        """Drop a pending entry without applying it."""
        self.store.remove_pending(pending_id)
        logger.info("pending_dismissed", pending_id=pending_id)

    def queue_pending_purchase(
        self,
        line: DocumentLine,
        decision: MatchDecision,
        document_reference: str,
        supplier_name: str,
        document_date: date,
        presentation: str,
    ) -> PendingPurchase:
        """Queue a purchase line the matcher could not decide."""
        return self.store.add_pending_purchase(
            PendingPurchase(
                document_reference=document_reference,
                supplier_name=supplier_name,
                document_date=document_date,
                description=line.description,
                code=line.code or "",
                quantity=line.quantity,
                presentation=presentation,
                unit_price=line.unit_price,
                candidates=decision.candidates,
            )
        )
