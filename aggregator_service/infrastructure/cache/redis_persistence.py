from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from aggregator_service.adapters.interfaces.cache import PersistenceBackend, PersistenceKind
from aggregator_service.core.exceptions import CacheError
from aggregator_service.core.logging import get_logger

logger = get_logger(__name__)


class RedisPersistence(PersistenceBackend):
    """Stores the full cache image under a single Redis key."""

    kind = PersistenceKind.REDIS

    def __init__(
        self,
        url: Optional[str] = None,
        key: str = "aggregator:cache",
        client: Optional[Any] = None,
        **kwargs
    ):
        """
        Initialize the Redis backend.

        Args:
            url: Redis connection URL, e.g. ``redis://localhost:6379/0``
            key: Key holding the serialized image
            client: Pre-built Redis client; takes precedence over ``url``
            **kwargs: Additional Redis connection options
        """
        self.key = key

        if client is not None:
            self.client = client
            return

        if not url:
            raise CacheError("REDIS_URL must be set for redis cache persistence")

        try:
            self.client = redis.Redis.from_url(url, decode_responses=True, **kwargs)
            self.client.ping()
            logger.info("Successfully connected to Redis")
        except RedisError as e:
            logger.error(f"Redis connection error: {str(e)}")
            raise CacheError(f"Failed to connect to Redis: {str(e)}")

    def load(self) -> Optional[str]:
        try:
            payload = self.client.get(self.key)
        except RedisError as e:
            raise CacheError(f"Failed to read cache image from Redis: {str(e)}")

        if payload is None:
            return None
        if isinstance(payload, bytes):
            return payload.decode("utf-8")
        return payload

    def save(self, payload: str) -> None:
        try:
            self.client.set(self.key, payload)
        except RedisError as e:
            logger.error(f"Failed to persist cache image to Redis: {str(e)}")
            raise CacheError(
                f"Failed to persist cache image: {str(e)}",
                context={"key": self.key}
            )
