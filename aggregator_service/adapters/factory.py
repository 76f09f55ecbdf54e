from typing import Optional

import httpx

from aggregator_service.adapters.implementations.http_listing import HttpListingClient
from aggregator_service.adapters.interfaces.cache import PersistenceBackend, PersistenceKind
from aggregator_service.core.config import Settings
from aggregator_service.core.logging import get_logger
from aggregator_service.infrastructure.cache.memory_cache import MemoryCache
from aggregator_service.infrastructure.cache.persistence import JsonFilePersistence, NullPersistence
from aggregator_service.infrastructure.cache.redis_persistence import RedisPersistence
from aggregator_service.services.aggregator import Aggregator
from aggregator_service.services.catalog_service import CatalogService
from aggregator_service.services.paginator import Paginator

logger = get_logger(__name__)


def create_persistence(settings: Settings) -> PersistenceBackend:
    """
    Create the persistence backend selected by ``CACHE_PERSISTENCE``.

    Args:
        settings: Application settings

    Returns:
        The configured backend

    Raises:
        CacheError: If the Redis backend cannot connect
    """
    kind = PersistenceKind(settings.CACHE_PERSISTENCE)

    if kind == PersistenceKind.FILE:
        logger.info(f"Persisting cache image to {settings.CACHE_FILE_PATH}")
        return JsonFilePersistence(settings.CACHE_FILE_PATH)

    if kind == PersistenceKind.REDIS:
        logger.info(f"Persisting cache image to Redis key {settings.REDIS_CACHE_KEY}")
        return RedisPersistence(url=settings.REDIS_URL, key=settings.REDIS_CACHE_KEY)

    return NullPersistence()


def create_catalog_service(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    persistence: Optional[PersistenceBackend] = None
) -> CatalogService:
    """
    Wire the listing client, cache, aggregator and catalog service together.

    Args:
        settings: Application settings
        http_client: Optional async client for upstream calls
        persistence: Optional backend overriding ``CACHE_PERSISTENCE``

    Returns:
        A catalog service whose cache has not been loaded yet
    """
    listing_client = HttpListingClient(
        details_url_template=settings.DETAILS_URL_TEMPLATE,
        timeout=settings.UPSTREAM_TIMEOUT,
        http_client=http_client
    )

    cache = MemoryCache(
        ttl=settings.CACHE_TTL,
        persistence=persistence or create_persistence(settings)
    )

    aggregator = Aggregator(
        paginator=Paginator(listing_client, max_pages=settings.MAX_PAGES),
        containers_url_template=settings.CONTAINERS_URL_TEMPLATE,
        items_url_template=settings.ITEMS_URL_TEMPLATE,
        container_concurrency=settings.CONTAINER_CONCURRENCY
    )

    return CatalogService(
        cache=cache,
        aggregator=aggregator,
        detail_fetcher=listing_client,
        single_flight=settings.SINGLE_FLIGHT,
        detail_concurrency=settings.DETAIL_CONCURRENCY
    )
