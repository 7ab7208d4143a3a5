"""Revert Use Cases: undo the latest purchase import or one sale."""

from stockledger.application.dto.requests import RevertSaleRequest
from stockledger.application.dto.responses import RevertResultResponse
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.services import RevertResult

logger = get_logger(__name__)


class _LedgerUseCase:
    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    def to_response(self, result: RevertResult) -> RevertResultResponse:
        """Convert result to API response."""
        return RevertResultResponse(
            document_reference=result.document_reference,
            movements_removed=result.movements_removed,
            lots_removed=result.lots_removed,
            lots_restored=result.lots_restored,
            products_affected=result.products_affected,
            products_deleted=result.products_deleted,
        )


class RevertImportUseCase(_LedgerUseCase):
    """Revert the most recent purchase import (single document or batch)."""

    async def execute(self) -> RevertResult:
        logger.info("revert_import_started")

        def run(ctx: LedgerContext) -> RevertResult:
            return ctx.orchestrator.revert_last_import()

        return await self._get_ledger().write(run)


class RevertSaleUseCase(_LedgerUseCase):
    """Revert the exits of one sale document."""

    async def execute(self, request: RevertSaleRequest) -> RevertResult:
        logger.info("revert_sale_started", reference=request.document_reference)

        def run(ctx: LedgerContext) -> RevertResult:
            return ctx.orchestrator.revert_sale(request.document_reference)

        return await self._get_ledger().write(run)
