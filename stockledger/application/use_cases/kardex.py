"""Kardex Use Case: per-product ledger report and catalog CSV export."""

from stockledger.application.dto.responses import KardexResponse
from stockledger.application.services import LedgerService
from stockledger.core.entities import KardexReport
from stockledger.core.services import build_ledger, export_catalog_csv


class KardexUseCase:
    """Read-only reporting over the ledger."""

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    async def execute(self, product_id: str) -> KardexReport:
        return await self._get_ledger().read(lambda ctx: build_ledger(ctx.store, product_id))

    async def export_csv(self) -> str:
        return await self._get_ledger().read(lambda ctx: export_catalog_csv(ctx.store))

    def to_response(self, report: KardexReport) -> KardexResponse:
        """Convert report to API response."""
        return KardexResponse.from_report(report)
