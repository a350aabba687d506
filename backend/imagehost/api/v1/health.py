"""Health check endpoint."""

from fastapi import APIRouter

from imagehost.models.schemas.common import HealthResponse

router = APIRouter(prefix="/health")


@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Basic health check for load balancers.

    Returns 200 if service is running.
    """
    return HealthResponse(status="ok")
