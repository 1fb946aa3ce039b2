"""
Health check endpoint.

Public; the route gate and the auth dependencies never apply here.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from shared.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    data_backend: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Returns 200 if the API is running, with the identity store it was configured for."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        data_backend=settings.data_backend,
    )
