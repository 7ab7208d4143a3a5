"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends

from stockledger import __version__
from stockledger.api.dependencies import get_app_settings
from stockledger.application.dto.responses import HealthResponse
from stockledger.config import Settings

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """Basic health check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        storage_backend=settings.storage.backend,
    )
