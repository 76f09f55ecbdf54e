from aggregator_service.domain.schemas.items import (
    AggregatedResponse,
    EnrichmentRequest,
    EnrichmentResponse,
    InvalidationResponse,
    ItemSchema,
    ItemUpdateSchema,
)

__all__ = [
    "AggregatedResponse",
    "EnrichmentRequest",
    "EnrichmentResponse",
    "InvalidationResponse",
    "ItemSchema",
    "ItemUpdateSchema",
]
