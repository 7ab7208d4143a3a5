"""Apply Sale Use Case: deplete stock for a sale document."""

from stockledger.application.dto.requests import ApplySaleRequest
from stockledger.application.dto.responses import MovementResponse, SaleResultResponse
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.entities import SaleDocument
from stockledger.core.services import SaleResult

logger = get_logger(__name__)


class ApplySaleUseCase:
    """Apply a sale document through the reconciliation engine.

    Payloads that do not parse as a sale document are not applicable and
    leave the ledger untouched.
    """

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    async def execute(self, request: ApplySaleRequest) -> SaleResult | None:
        document = SaleDocument.from_payload(request.document)
        if document is None:
            logger.info("sale_not_applicable")
            return None

        def run(ctx: LedgerContext) -> SaleResult:
            return ctx.engine.apply_sale(document)

        return await self._get_ledger().write(run, offload=True)

    def to_response(self, result: SaleResult | None) -> SaleResultResponse:
        """Convert result to API response."""
        if result is None:
            return SaleResultResponse(document_reference="", applicable=False)
        return SaleResultResponse(
            document_reference=result.document_reference,
            applied=result.applied,
            pending=result.pending,
            skipped=result.skipped,
            movements=[MovementResponse.from_entity(m) for m in result.movements],
        )
