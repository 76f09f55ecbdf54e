import asyncio
from typing import Dict, List, Optional, Sequence

from aggregator_service.adapters.interfaces.cache import CacheStrategy
from aggregator_service.adapters.interfaces.page_source import DetailFetcher
from aggregator_service.core.exceptions import (
    AggregationError,
    APIException,
    NotFoundError,
    UpstreamUnavailable,
    ValidationException,
)
from aggregator_service.core.logging import get_logger
from aggregator_service.domain.models.item import (
    AggregatedResult,
    EnrichmentOutcome,
    ItemId,
    ItemUpdate,
    id_key,
)
from aggregator_service.services.aggregator import Aggregator
from aggregator_service.services.enrichment import apply_updates

logger = get_logger(__name__)

COLLECTION_RESOURCE = "Aggregated collection"


class CatalogService:
    """Serves cached aggregated collections and applies enrichment to them."""

    def __init__(
        self,
        cache: CacheStrategy[str, AggregatedResult],
        aggregator: Aggregator,
        detail_fetcher: DetailFetcher,
        single_flight: bool = True,
        detail_concurrency: int = 8
    ):
        """
        Args:
            cache: Store of aggregated results keyed by subject
            aggregator: Builds collections on a cache miss
            detail_fetcher: Source of per-item description and price
            single_flight: Collapse concurrent misses for one subject into one fetch
            detail_concurrency: Detail requests in flight during a refresh
        """
        self.cache = cache
        self.aggregator = aggregator
        self.detail_fetcher = detail_fetcher
        self.single_flight = single_flight
        self.detail_concurrency = detail_concurrency

        self._in_flight: Dict[str, asyncio.Future] = {}

    async def get_aggregated(self, subject: str) -> AggregatedResult:
        """Returns the cached collection for ``subject``, aggregating it on a miss."""
        cached = await self.cache.get(subject)
        if cached is not None:
            return cached

        if not self.single_flight:
            return await self._aggregate_and_store(subject)

        task = self._in_flight.get(subject)
        if task is None:
            task = asyncio.ensure_future(self._aggregate_and_store(subject))
            self._in_flight[subject] = task
            task.add_done_callback(lambda done, key=subject: self._finish_flight(key, done))
        else:
            logger.debug(f"Joining in-flight aggregation for subject {subject}")

        # A disconnecting caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    def _finish_flight(self, subject: str, task: asyncio.Future) -> None:
        self._in_flight.pop(subject, None)
        # Consume the exception even when every waiter was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Shared aggregation for subject {subject} failed: {task.exception()}")

    async def _aggregate_and_store(self, subject: str) -> AggregatedResult:
        logger.info(f"Aggregating collection for subject {subject}")

        try:
            result = await self.aggregator.aggregate(subject)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Aggregation failed for subject {subject}: {str(e)}", exc_info=True)
            raise AggregationError(subject, original_exception=e)

        await self.cache.set(subject, result)
        return result

    async def apply_enrichment(
        self,
        subject: str,
        updates: Sequence[ItemUpdate]
    ) -> EnrichmentOutcome:
        """
        Applies partial updates to the cached collection of ``subject``.

        Raises:
            ValidationException: If an update has no id
            NotFoundError: If no collection is cached for ``subject``
        """
        for position, update in enumerate(updates):
            if update.id is None or id_key(update.id) == "":
                raise ValidationException(
                    detail="Every update requires an id",
                    field="id",
                    context={"position": position}
                )

        outcome = await self.cache.update(subject, lambda cached: apply_updates(cached, updates))
        if outcome is None:
            logger.warning(f"Enrichment rejected, no collection cached for subject {subject}")
            raise NotFoundError(COLLECTION_RESOURCE, subject, code="no_base_collection")

        logger.info(
            f"Applied {outcome.updated}/{len(updates)} updates to subject {subject} "
            f"({outcome.total} items)"
        )
        return outcome

    async def refresh_details(self, subject: str) -> EnrichmentOutcome:
        """
        Fetches description and price for every cached item of ``subject``.

        Items whose detail request fails keep their current values.

        Raises:
            NotFoundError: If no collection is cached for ``subject``
        """
        cached = await self.cache.get(subject)
        if cached is None:
            raise NotFoundError(COLLECTION_RESOURCE, subject, code="no_base_collection")

        item_ids: Dict[str, ItemId] = {}
        for item in cached.items:
            item_ids.setdefault(id_key(item.id), item.id)

        semaphore = asyncio.Semaphore(self.detail_concurrency)

        async def fetch(item_id: ItemId) -> Optional[ItemUpdate]:
            async with semaphore:
                try:
                    return await self.detail_fetcher.fetch_details(item_id)
                except UpstreamUnavailable as e:
                    logger.warning(f"Details unavailable for item {item_id}: {e.detail}")
                    return None

        results = await asyncio.gather(*(fetch(item_id) for item_id in item_ids.values()))
        updates: List[ItemUpdate] = [update for update in results if update is not None]

        outcome = await self.cache.update(subject, lambda current: apply_updates(current, updates))
        if outcome is None:
            raise NotFoundError(COLLECTION_RESOURCE, subject, code="no_base_collection")

        logger.info(
            f"Refreshed details for {outcome.updated}/{len(item_ids)} items of subject {subject}"
        )
        return outcome

    def load_cache(self) -> int:
        """Restores persisted collections; called once before serving requests."""
        return self.cache.load()

    async def close(self) -> None:
        await self.detail_fetcher.close()

    async def invalidate(self, subject: str) -> bool:
        """Drops the cached collection of ``subject``."""
        removed = await self.cache.invalidate(subject)
        if removed:
            logger.info(f"Invalidated cached collection for subject {subject}")
        return removed
