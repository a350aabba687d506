"""Main API router aggregating all version routers."""

from fastapi import APIRouter, Depends

from imagehost.api.v1.images import router as images_router
from imagehost.dependencies import verify_token

api_router = APIRouter()

# v1 endpoints (token protected)
api_router.include_router(
    images_router,
    prefix="/v1",
    tags=["Images"],
    dependencies=[Depends(verify_token)],
)
