from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from aggregator_service import __version__
from aggregator_service.api.dependencies import get_catalog_service
from aggregator_service.core.logging import get_logger
from aggregator_service.services.catalog_service import CatalogService

# Initialize router and logger
health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str
    version: str = __version__
    service: str = "Aggregator Service"


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str
    details: Optional[Dict[str, Any]] = None


class DetailedHealthStatus(HealthStatus):
    """Detailed health status with dependency information."""
    dependencies: List[DependencyStatus]


@health_router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns basic health status of the service."
)
async def get_health() -> HealthStatus:
    """
    Basic health check endpoint.

    Returns:
        HealthStatus: Basic service health status
    """
    logger.debug("Health check requested")
    return HealthStatus(status="ok")


@health_router.get(
    "/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
    description="Returns health status including cache statistics."
)
async def get_detailed_health(
    catalog_service: CatalogService = Depends(get_catalog_service)
) -> DetailedHealthStatus:
    """
    Detailed health check endpoint with cache statistics.

    Returns:
        DetailedHealthStatus: Service health with the cache's current stats
    """
    logger.debug("Detailed health check requested")

    stats = await catalog_service.cache.get_stats()
    dependencies = [
        DependencyStatus(name="cache", status="ok", details=stats),
    ]

    return DetailedHealthStatus(status="ok", dependencies=dependencies)
