"""Inventory configuration endpoints."""

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import get_inventory_config_use_case
from stockledger.application.dto.requests import UpdateInventoryConfigRequest
from stockledger.application.dto.responses import ErrorResponse, InventoryConfigResponse
from stockledger.application.use_cases import InventoryConfigUseCase

router = APIRouter(prefix="/api/config", tags=["config"])


@router.get("", response_model=InventoryConfigResponse)
async def get_config(
    use_case: InventoryConfigUseCase = Depends(get_inventory_config_use_case),
) -> InventoryConfigResponse:
    config = await use_case.get()
    return use_case.to_response(config)


@router.patch(
    "",
    response_model=InventoryConfigResponse,
    responses={400: {"model": ErrorResponse}},
)
async def update_config(
    request: UpdateInventoryConfigRequest,
    use_case: InventoryConfigUseCase = Depends(get_inventory_config_use_case),
) -> InventoryConfigResponse:
    """Change costing, margin, alert or matching settings."""
    config = await use_case.update(request)
    return use_case.to_response(config)
