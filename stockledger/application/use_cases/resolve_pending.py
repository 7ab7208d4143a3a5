"""Resolve Pending Use Case: human decisions on queued document lines."""

from dataclasses import dataclass, field

from stockledger.application.dto.requests import ResolvePendingRequest
from stockledger.application.dto.responses import (
    MovementResponse,
    PendingListResponse,
    PendingPurchaseResponse,
    PendingSaleResponse,
    ResolvePendingResponse,
)
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.entities import Movement, PendingPurchase, PendingSale
from stockledger.core.exceptions import ValidationError

logger = get_logger(__name__)


@dataclass
class PendingQueues:
    purchases: list[PendingPurchase] = field(default_factory=list)
    sales: list[PendingSale] = field(default_factory=list)


@dataclass
class ResolvePendingResult:
    """Result of resolving one pending entry."""

    pending_id: str
    resolved: bool
    product_id: str | None = None
    movements: list[Movement] = field(default_factory=list)


class ResolvePendingUseCase:
    """List, resolve and dismiss pending purchase and sale lines.

    Resolving an entry that is no longer queued writes nothing and reports
    `resolved=False`, so a retried request is harmless.
    """

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    async def list_pending(self) -> PendingQueues:
        def run(ctx: LedgerContext) -> PendingQueues:
            return PendingQueues(
                purchases=[p.model_copy(deep=True) for p in ctx.store.pending_purchases],
                sales=[p.model_copy(deep=True) for p in ctx.store.pending_sales],
            )

        return await self._get_ledger().read(run)

    async def execute(
        self,
        pending_id: str,
        request: ResolvePendingRequest,
    ) -> ResolvePendingResult:
        """Apply the decision for one pending entry."""
        logger.info(
            "resolve_pending_started",
            pending_id=pending_id,
            product_id=request.product_id,
        )

        def run(ctx: LedgerContext) -> ResolvePendingResult:
            store = ctx.store
            engine = ctx.engine

            if store.find_pending_purchase(pending_id) is not None:
                if request.product_id:
                    movement = engine.resolve_pending_purchase(
                        pending_id, request.product_id, remember=request.remember
                    )
                    return ResolvePendingResult(
                        pending_id=pending_id,
                        resolved=movement is not None,
                        product_id=request.product_id,
                        movements=[movement] if movement is not None else [],
                    )
                product = engine.create_and_resolve_pending_purchase(
                    pending_id, remember=request.remember, category=request.category
                )
                movements = store.movements_for(product.id) if product is not None else []
                return ResolvePendingResult(
                    pending_id=pending_id,
                    resolved=product is not None,
                    product_id=product.id if product is not None else None,
                    movements=movements,
                )

            if store.find_pending_sale(pending_id) is not None:
                if not request.product_id:
                    raise ValidationError(
                        "product_id", "A product is required to resolve a pending sale"
                    )
                sale_movements = engine.resolve_pending_sale(
                    pending_id, request.product_id, remember=request.remember
                )
                return ResolvePendingResult(
                    pending_id=pending_id,
                    resolved=sale_movements is not None,
                    product_id=request.product_id,
                    movements=sale_movements or [],
                )

            logger.info("pending_already_resolved", pending_id=pending_id)
            return ResolvePendingResult(pending_id=pending_id, resolved=False)

        return await self._get_ledger().write(run)

    async def dismiss(self, pending_id: str) -> None:
        """Drop a pending entry without applying it."""

        def run(ctx: LedgerContext) -> None:
            ctx.engine.dismiss_pending(pending_id)

        await self._get_ledger().write(run)

    def to_response(self, result: ResolvePendingResult) -> ResolvePendingResponse:
        """Convert result to API response."""
        return ResolvePendingResponse(
            pending_id=result.pending_id,
            resolved=result.resolved,
            product_id=result.product_id,
            movements=[MovementResponse.from_entity(m) for m in result.movements],
        )

    def to_list_response(self, queues: PendingQueues) -> PendingListResponse:
        return PendingListResponse(
            purchases=[PendingPurchaseResponse.from_entity(p) for p in queues.purchases],
            sales=[PendingSaleResponse.from_entity(p) for p in queues.sales],
        )
