from fastapi import APIRouter, Depends, status

from aggregator_service.api.dependencies import get_catalog_service, get_subject
from aggregator_service.core.logging import get_logger
from aggregator_service.domain.schemas.items import (
    AggregatedResponse,
    EnrichmentRequest,
    EnrichmentResponse,
    InvalidationResponse,
)
from aggregator_service.services.catalog_service import CatalogService

subjects_router = APIRouter()
logger = get_logger(__name__)


@subjects_router.get(
    "/{subject}/items",
    response_model=AggregatedResponse,
    status_code=status.HTTP_200_OK,
    summary="Get aggregated items",
    description="Returns every item of every container owned by the subject, in discovery order."
)
async def get_aggregated_items(
    subject: str = Depends(get_subject),
    catalog_service: CatalogService = Depends(get_catalog_service)
) -> AggregatedResponse:
    """Gets the aggregated collection, building it on a cache miss."""
    result = await catalog_service.get_aggregated(subject)
    return AggregatedResponse.from_result(result)


@subjects_router.post(
    "/{subject}/enrichment",
    response_model=EnrichmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Apply item enrichment",
    description="Applies partial description/price updates to a cached collection."
)
async def apply_enrichment(
    request: EnrichmentRequest,
    subject: str = Depends(get_subject),
    catalog_service: CatalogService = Depends(get_catalog_service)
) -> EnrichmentResponse:
    """Applies partial updates; 404 if the subject was never aggregated."""
    updates = [update.to_domain() for update in request.updates]
    outcome = await catalog_service.apply_enrichment(subject, updates)
    return EnrichmentResponse.from_outcome(outcome)


@subjects_router.post(
    "/{subject}/details/refresh",
    response_model=EnrichmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh item details",
    description="Fetches description and price of every cached item from the detail endpoint."
)
async def refresh_details(
    subject: str = Depends(get_subject),
    catalog_service: CatalogService = Depends(get_catalog_service)
) -> EnrichmentResponse:
    outcome = await catalog_service.refresh_details(subject)
    return EnrichmentResponse.from_outcome(outcome)


@subjects_router.delete(
    "/{subject}/cache",
    response_model=InvalidationResponse,
    status_code=status.HTTP_200_OK,
    summary="Invalidate cached collection"
)
async def invalidate_cache(
    subject: str = Depends(get_subject),
    catalog_service: CatalogService = Depends(get_catalog_service)
) -> InvalidationResponse:
    invalidated = await catalog_service.invalidate(subject)
    return InvalidationResponse(invalidated=invalidated)
