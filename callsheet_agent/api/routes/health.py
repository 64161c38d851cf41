"""Health check endpoints."""

from fastapi import APIRouter

from ... import __version__
from ...config import config
from ..schemas import HealthResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the API server is running and healthy.",
)
def health_check() -> HealthResponse:
    """Return health status of the API server."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        model=config.provider.model,
    )
