"""Sale document endpoints."""

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import get_apply_sale_use_case, get_revert_sale_use_case
from stockledger.application.dto.requests import ApplySaleRequest, RevertSaleRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    RevertResultResponse,
    SaleResultResponse,
)
from stockledger.application.use_cases import ApplySaleUseCase, RevertSaleUseCase

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post("/apply", response_model=SaleResultResponse)
async def apply_sale(
    request: ApplySaleRequest,
    use_case: ApplySaleUseCase = Depends(get_apply_sale_use_case),
) -> SaleResultResponse:
    """Deplete stock for the goods lines of a sale document."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/revert",
    response_model=RevertResultResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def revert_sale(
    request: RevertSaleRequest,
    use_case: RevertSaleUseCase = Depends(get_revert_sale_use_case),
) -> RevertResultResponse:
    """Give back the stock taken by one sale document."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
