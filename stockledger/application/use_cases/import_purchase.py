"""Import Purchase Use Case: purchase documents into lots and movements."""

from stockledger.application.dto.requests import ImportBatchRequest, ImportPurchaseRequest
from stockledger.application.dto.responses import ImportResultResponse
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.services import ImportResult, LineAction, LineConfirmation

logger = get_logger(__name__)


class ImportPurchaseUseCase:
    """Import one purchase document, or a batch of them."""

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    async def execute(self, request: ImportPurchaseRequest) -> ImportResult:
        """Execute a single-document import."""
        confirmations = None
        if request.confirmations is not None:
            confirmations = [
                LineConfirmation(
                    line_index=c.line_index,
                    action=LineAction(c.action),
                    product_id=c.product_id,
                    remember=c.remember,
                    category=c.category,
                    factor=c.factor,
                )
                for c in request.confirmations
            ]

        logger.info(
            "import_purchase_started",
            reference=request.document.get("reference"),
            confirmed_lines=len(confirmations) if confirmations is not None else None,
        )

        def run(ctx: LedgerContext) -> ImportResult:
            return ctx.orchestrator.import_purchase(request.document, confirmations)

        result = await self._get_ledger().write(run, offload=True)

        logger.info(
            "import_purchase_complete",
            reference=result.document_reference,
            applicable=result.applicable,
            created=result.created,
            updated=result.updated,
            pending=result.pending,
        )
        return result

    async def execute_batch(self, request: ImportBatchRequest) -> ImportResult:
        """Import several documents as one revertible batch."""
        logger.info("import_batch_started", documents=len(request.documents))

        def run(ctx: LedgerContext) -> ImportResult:
            return ctx.orchestrator.import_batch(request.documents)

        return await self._get_ledger().write(run, offload=True)

    def to_response(self, result: ImportResult) -> ImportResultResponse:
        """Convert result to API response."""
        return ImportResultResponse(
            document_reference=result.document_reference,
            applicable=result.applicable,
            total_lines=result.total_lines,
            created=result.created,
            updated=result.updated,
            pending=result.pending,
            skipped=result.skipped,
            deferred=result.deferred,
            created_product_ids=list(result.created_product_ids),
        )
