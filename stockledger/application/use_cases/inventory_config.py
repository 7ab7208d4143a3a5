"""Inventory Config Use Case: read and update the persisted configuration."""

from pydantic import ValidationError as PydanticValidationError

from stockledger.application.dto.requests import UpdateInventoryConfigRequest
from stockledger.application.dto.responses import InventoryConfigResponse
from stockledger.application.services import LedgerContext, LedgerService
from stockledger.config import get_logger
from stockledger.core.entities import InventoryConfig
from stockledger.core.exceptions import ConfigurationError

logger = get_logger(__name__)


class InventoryConfigUseCase:
    """Costing method, margin, alert and matching thresholds.

    Changes are stored with the snapshot and suggested prices are refreshed
    immediately.
    """

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> LedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_ledger_service

            self._ledger = get_ledger_service()
        return self._ledger

    async def get(self) -> InventoryConfig:
        return await self._get_ledger().read(lambda ctx: ctx.store.config.model_copy())

    async def update(self, request: UpdateInventoryConfigRequest) -> InventoryConfig:
        changes = request.model_dump(exclude_none=True)
        logger.info("inventory_config_update_started", fields=sorted(changes))

        def run(ctx: LedgerContext) -> InventoryConfig:
            try:
                return ctx.store.update_config(**changes).model_copy()
            except PydanticValidationError as e:
                raise ConfigurationError(f"Invalid inventory configuration: {e}") from e

        return await self._get_ledger().write(run)

    def to_response(self, config: InventoryConfig) -> InventoryConfigResponse:
        return InventoryConfigResponse.from_entity(config)
