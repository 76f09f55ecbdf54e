import copy
import json
import time
import threading
from typing import Any, Callable, Dict, Optional

from aggregator_service.adapters.interfaces.cache import CacheStrategy, PersistenceBackend
from aggregator_service.core.logging import get_logger
from aggregator_service.domain.models.item import AggregatedResult
from aggregator_service.infrastructure.cache.persistence import NullPersistence

logger = get_logger(__name__)

Clock = Callable[[], float]


class CacheItem:
    """Class representing a cached item with expiration."""

    def __init__(self, value: AggregatedResult, expires_at: float):
        """
        Initialize a cache item.

        Args:
            value: Cached value
            expires_at: Expiration timestamp (epoch seconds)
        """
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        """
        Check if the item has expired.

        An entry stops being visible at exactly ``expires_at``.

        Returns:
            True if expired
        """
        return now >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value.to_dict(), "expires_at": self.expires_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheItem":
        return cls(
            value=AggregatedResult.from_dict(data["value"]),
            expires_at=float(data["expires_at"])
        )


class MemoryCache(CacheStrategy[str, AggregatedResult]):
    """
    In-memory store of aggregated results keyed by subject.

    Expired entries are evicted lazily on access. When a persistence backend
    is configured, every mutation rewrites the full image before returning,
    under the same lock that guards the in-memory map.
    """

    def __init__(
        self,
        ttl: int = 3600,
        persistence: Optional[PersistenceBackend] = None,
        clock: Clock = time.time
    ):
        """
        Initialize the in-memory cache.

        Args:
            ttl: Entry lifetime in seconds
            persistence: Backend receiving the full image on every mutation
            clock: Source of the current time in epoch seconds
        """
        self.ttl = ttl
        self.persistence = persistence or NullPersistence()
        self.clock = clock

        self._cache: Dict[str, CacheItem] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

        logger.info(
            f"In-memory cache initialized with TTL {ttl}s "
            f"and {self.persistence.kind.value} persistence"
        )

    def _live_item(self, key: str) -> Optional[CacheItem]:
        """Returns the live entry for ``key``, evicting it if expired. Lock must be held."""
        item = self._cache.get(key)
        if item is None:
            return None

        if item.is_expired(self.clock()):
            del self._cache[key]
            logger.debug(f"Evicted expired cache entry for {key}")
            return None

        return item

    def _serialize(self) -> str:
        return json.dumps({key: item.to_dict() for key, item in self._cache.items()})

    def _commit(self, key: str, item: Optional[CacheItem]) -> None:
        """
        Stores ``item`` under ``key`` (removes it when None) and flushes the
        full image. The in-memory change is rolled back if the flush fails.
        Lock must be held.
        """
        previous = self._cache.get(key)

        if item is None:
            self._cache.pop(key, None)
        else:
            self._cache[key] = item

        try:
            self.persistence.save(self._serialize())
        except Exception:
            if previous is None:
                self._cache.pop(key, None)
            else:
                self._cache[key] = previous
            raise

    def load(self) -> int:
        """
        Replaces the in-memory state with the persisted image.

        Unreadable or malformed images are logged and leave the cache empty.
        Entries that expired while the process was down are dropped.

        Returns:
            Number of live entries loaded
        """
        with self._lock:
            self._cache = {}

            try:
                payload = self.persistence.load()
            except Exception as e:
                logger.error(f"Failed to read persisted cache image: {str(e)}", exc_info=True)
                return 0

            if not payload:
                return 0

            try:
                raw = json.loads(payload)
                if not isinstance(raw, dict):
                    raise ValueError("cache image is not an object")
                loaded = {key: CacheItem.from_dict(entry) for key, entry in raw.items()}
            except (ValueError, KeyError, TypeError) as e:
                logger.error(f"Ignoring malformed persisted cache image: {str(e)}")
                return 0

            now = self.clock()
            self._cache = {
                key: item for key, item in loaded.items() if not item.is_expired(now)
            }

            dropped = len(loaded) - len(self._cache)
            logger.info(f"Loaded {len(self._cache)} cache entries ({dropped} expired)")
            return len(self._cache)

    async def get(self, key: str) -> Optional[AggregatedResult]:
        with self._lock:
            item = self._live_item(key)

            if item is None:
                self._misses += 1
                logger.debug(f"Cache miss for key: {key}")
                return None

            self._hits += 1
            logger.debug(f"Cache hit for key: {key}")
            return copy.deepcopy(item.value)

    async def set(self, key: str, value: AggregatedResult) -> bool:
        item = CacheItem(
            value=copy.deepcopy(value),
            expires_at=self.clock() + self.ttl
        )

        with self._lock:
            self._commit(key, item)

        logger.debug(f"Set cache key {key} with TTL {self.ttl}s")
        return True

    async def update(
        self,
        key: str,
        mutator: Callable[[AggregatedResult], Any]
    ) -> Optional[Any]:
        with self._lock:
            item = self._live_item(key)
            if item is None:
                logger.debug(f"No live entry to update for key: {key}")
                return None

            # Mutate a copy so a failing mutator leaves the entry intact
            value = copy.deepcopy(item.value)
            result = mutator(value)

            self._commit(key, CacheItem(value=value, expires_at=self.clock() + self.ttl))

        logger.debug(f"Updated cache key {key} and refreshed TTL")
        return result

    async def invalidate(self, key: str) -> bool:
        with self._lock:
            if self._live_item(key) is None:
                logger.debug(f"No live entry to invalidate for key: {key}")
                return False

            self._commit(key, None)

        logger.debug(f"Invalidated cache key: {key}")
        return True

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_item(key) is not None

    async def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "ttl_seconds": self.ttl,
                "persistence": self.persistence.kind.value,
            }
