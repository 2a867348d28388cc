"""Health check and provider catalog endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from validly.core.config import Settings, get_settings
from validly.models.providers import ProviderInfo
from validly.services.registry import list_descriptors

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    service: str
    version: str


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        service=settings.app_name,
        version=settings.version,
    )


@router.get(
    "/providers",
    response_model=list[ProviderInfo],
    response_model_by_alias=True,
    tags=["System"],
)
async def list_providers() -> list[ProviderInfo]:
    """List the providers whose keys can be validated."""
    return [descriptor.to_info() for descriptor in list_descriptors()]
