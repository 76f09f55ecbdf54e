"""
Domain models for the Aggregator Service.

This module contains the core domain models representing the business entities.
"""

from aggregator_service.domain.models.item import (
    UNSET,
    AggregatedResult,
    Container,
    EnrichmentOutcome,
    Item,
    ItemUpdate,
    id_key,
    is_valid_id,
)
from aggregator_service.domain.models.page import Page, PaginationResult

__all__ = [
    "UNSET",
    "AggregatedResult",
    "Container",
    "EnrichmentOutcome",
    "Item",
    "ItemUpdate",
    "Page",
    "PaginationResult",
    "id_key",
    "is_valid_id",
]
