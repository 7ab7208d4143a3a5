"""Manual stock adjustment endpoints."""

from fastapi import APIRouter, Depends, status

from stockledger.api.dependencies import get_adjust_stock_use_case
from stockledger.application.dto.requests import StockEntryRequest, StockExitRequest
from stockledger.application.dto.responses import ErrorResponse, StockAdjustmentResponse
from stockledger.application.use_cases import AdjustStockUseCase

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.post(
    "/entry",
    response_model=StockAdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def stock_entry(
    request: StockEntryRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> StockAdjustmentResponse:
    """Add stock in base units (cost defaults to the current average)."""
    result = await use_case.receive(request)
    return use_case.to_response(result)


@router.post(
    "/exit",
    response_model=StockAdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def stock_exit(
    request: StockExitRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> StockAdjustmentResponse:
    """Remove stock in base units; rejected when stock is insufficient."""
    result = await use_case.issue(request)
    return use_case.to_response(result)
