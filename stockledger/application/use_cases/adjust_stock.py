"""Adjust Stock Use Case: manual entries and exits in base units."""

from dataclasses import dataclass

from stockledger.application.dto.requests import StockEntryRequest, StockExitRequest
from stockledger.application.dto.responses import (
    MovementResponse,
    ProductResponse,
    StockAdjustmentResponse,
)
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.entities import Movement, Product

logger = get_logger(__name__)


@dataclass
class StockAdjustmentResult:
    """Product state after a manual adjustment and the movements written."""

    product: Product
    movements: list[Movement]


class AdjustStockUseCase:
    """Manual stock entry (at a given or average cost) and exit.

    A manual exit never drives stock below zero, whatever the configured
    negative-stock policy.
    """

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    async def receive(self, request: StockEntryRequest) -> StockAdjustmentResult:
        """Execute a manual entry."""
        logger.info(
            "manual_entry_started",
            product_id=request.product_id,
            quantity=request.quantity,
        )

        def run(ctx: LedgerContext) -> StockAdjustmentResult:
            movement = ctx.orchestrator.manual_entry(
                request.product_id,
                request.quantity,
                unit_cost=request.unit_cost,
                date=request.date,
                reference=request.reference or "ADJUSTMENT_IN",
                supplier_name=request.supplier_name or "ADJUSTMENT",
            )
            product = ctx.store.get_product(request.product_id).model_copy(deep=True)
            return StockAdjustmentResult(product=product, movements=[movement])

        return await self._get_ledger().write(run)

    async def issue(self, request: StockExitRequest) -> StockAdjustmentResult:
        """Execute a manual exit."""
        logger.info(
            "manual_exit_started",
            product_id=request.product_id,
            quantity=request.quantity,
        )

        def run(ctx: LedgerContext) -> StockAdjustmentResult:
            movements = ctx.orchestrator.manual_exit(
                request.product_id,
                request.quantity,
                date=request.date,
                reference=request.reference or "ADJUSTMENT_OUT",
                reason=request.reason or "ADJUSTMENT",
            )
            product = ctx.store.get_product(request.product_id).model_copy(deep=True)
            return StockAdjustmentResult(product=product, movements=movements)

        return await self._get_ledger().write(run)

    def to_response(self, result: StockAdjustmentResult) -> StockAdjustmentResponse:
        """Convert result to API response."""
        return StockAdjustmentResponse(
            product=ProductResponse.from_entity(result.product),
            movements=[MovementResponse.from_entity(m) for m in result.movements],
        )
