"""
Interfaces for the adapters layer.

Abstract contracts for the upstream listing/detail endpoints, the result cache
and its persistence backends.
"""

from aggregator_service.adapters.interfaces.cache import (
    CacheStrategy,
    PersistenceBackend,
    PersistenceKind,
)
from aggregator_service.adapters.interfaces.page_source import DetailFetcher, PageFetcher

__all__ = [
    "CacheStrategy",
    "DetailFetcher",
    "PageFetcher",
    "PersistenceBackend",
    "PersistenceKind",
]
