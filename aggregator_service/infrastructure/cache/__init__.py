"""Caching implementations for the Aggregator Service."""

from aggregator_service.infrastructure.cache.memory_cache import CacheItem, MemoryCache
from aggregator_service.infrastructure.cache.persistence import JsonFilePersistence, NullPersistence
from aggregator_service.infrastructure.cache.redis_persistence import RedisPersistence

__all__ = [
    "CacheItem",
    "JsonFilePersistence",
    "MemoryCache",
    "NullPersistence",
    "RedisPersistence",
]
