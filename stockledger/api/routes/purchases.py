"""Purchase document import endpoints."""

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import (
    get_import_purchase_use_case,
    get_revert_import_use_case,
)
from stockledger.application.dto.requests import ImportBatchRequest, ImportPurchaseRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    ImportResultResponse,
    RevertResultResponse,
)
from stockledger.application.use_cases import ImportPurchaseUseCase, RevertImportUseCase

router = APIRouter(prefix="/api/purchases", tags=["purchases"])


@router.post(
    "/import",
    response_model=ImportResultResponse,
    responses={404: {"model": ErrorResponse}},
)
async def import_purchase(
    request: ImportPurchaseRequest,
    use_case: ImportPurchaseUseCase = Depends(get_import_purchase_use_case),
) -> ImportResultResponse:
    """
    Import one purchase document.

    Documents that do not have the expected shape are reported with
    `applicable=false` and change nothing.
    """
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/import/batch", response_model=ImportResultResponse)
async def import_batch(
    request: ImportBatchRequest,
    use_case: ImportPurchaseUseCase = Depends(get_import_purchase_use_case),
) -> ImportResultResponse:
    """Import several documents as one revertible batch."""
    result = await use_case.execute_batch(request)
    return use_case.to_response(result)


@router.post(
    "/revert",
    response_model=RevertResultResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def revert_last_import(
    use_case: RevertImportUseCase = Depends(get_revert_import_use_case),
) -> RevertResultResponse:
    """Revert the most recent import when no later movement depends on it."""
    result = await use_case.execute()
    return use_case.to_response(result)
