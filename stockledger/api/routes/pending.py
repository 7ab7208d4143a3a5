"""Pending reconciliation endpoints."""

from fastapi import APIRouter, Depends, status

from stockledger.api.dependencies import get_resolve_pending_use_case
from stockledger.application.dto.requests import ResolvePendingRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    PendingListResponse,
    ResolvePendingResponse,
)
from stockledger.application.use_cases import ResolvePendingUseCase

router = APIRouter(prefix="/api/pending", tags=["pending"])


@router.get("", response_model=PendingListResponse)
async def list_pending(
    use_case: ResolvePendingUseCase = Depends(get_resolve_pending_use_case),
) -> PendingListResponse:
    """List pending purchase and sale lines."""
    queues = await use_case.list_pending()
    return use_case.to_list_response(queues)


@router.post(
    "/{pending_id}/resolve",
    response_model=ResolvePendingResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def resolve_pending(
    pending_id: str,
    request: ResolvePendingRequest,
    use_case: ResolvePendingUseCase = Depends(get_resolve_pending_use_case),
) -> ResolvePendingResponse:
    """
    Link a pending line to a product, or create one from a purchase line.

    Resolving an entry twice is harmless: the second call reports
    `resolved=false`.
    """
    result = await use_case.execute(pending_id, request)
    return use_case.to_response(result)


@router.delete(
    "/{pending_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def dismiss_pending(
    pending_id: str,
    use_case: ResolvePendingUseCase = Depends(get_resolve_pending_use_case),
) -> None:
    await use_case.dismiss(pending_id)
