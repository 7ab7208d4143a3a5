"""Kardex (per-product ledger) endpoints."""

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import get_kardex_use_case
from stockledger.application.dto.responses import ErrorResponse, KardexResponse
from stockledger.application.use_cases import KardexUseCase

router = APIRouter(prefix="/api/kardex", tags=["kardex"])


@router.get(
    "/{product_id}",
    response_model=KardexResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_kardex(
    product_id: str,
    use_case: KardexUseCase = Depends(get_kardex_use_case),
) -> KardexResponse:
    """Movements in date order with running quantity and value balances."""
    report = await use_case.execute(product_id)
    return use_case.to_response(report)
