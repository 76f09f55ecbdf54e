from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Optional, TypeVar
from enum import Enum

# Type variables for generics
K = TypeVar('K')  # Generic type for cache keys
V = TypeVar('V')  # Generic type for cache values


class PersistenceKind(str, Enum):
    """Enum defining where the full cache image is persisted."""
    NONE = "none"
    FILE = "file"
    REDIS = "redis"


class CacheStrategy(Generic[K, V], ABC):
    """
    Abstract base interface for the aggregated-result cache.

    Entries carry a fixed TTL. Readers receive copies, so mutating a value
    returned by ``get`` never changes what is cached; use ``update`` for
    read-modify-write.

    Type Parameters:
        K: The type of keys used for cache entries
        V: The type of values stored in the cache
    """

    @abstractmethod
    async def get(self, key: K) -> Optional[V]:
        """
        Retrieves a live cached item by key.

        Args:
            key: The key of the item to retrieve

        Returns:
            Optional[V]: The cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: K, value: V) -> bool:
        """
        Stores an item with a fresh TTL, replacing any prior entry.

        Args:
            key: The key to store the value under
            value: The value to store

        Returns:
            bool: True if successfully cached
        """
        pass

    @abstractmethod
    async def update(self, key: K, mutator: Callable[[V], Any]) -> Optional[Any]:
        """
        Applies ``mutator`` to a live entry and stores it with a fresh TTL.

        Args:
            key: The key of the entry to modify
            mutator: Called with the cached value; may modify it in place

        Returns:
            The mutator's return value, or None if no live entry exists
        """
        pass

    @abstractmethod
    async def invalidate(self, key: K) -> bool:
        """
        Removes an item from the cache.

        Args:
            key: The key of the item to remove

        Returns:
            bool: True if an entry was present and removed
        """
        pass

    @abstractmethod
    async def exists(self, key: K) -> bool:
        """
        Checks if a live entry exists for the key.

        Args:
            key: The key to check

        Returns:
            bool: True if the key exists and has not expired
        """
        pass

    def load(self) -> int:
        """
        Restores entries from durable storage, if the implementation has any.

        Returns:
            int: Number of entries restored
        """
        return 0

    @abstractmethod
    async def get_stats(self) -> Dict[str, Any]:
        """
        Returns statistics about the cache.

        Returns:
            Dict[str, Any]: Statistics including hits, misses and entry count
        """
        pass


class PersistenceBackend(ABC):
    """Durable storage for the full cache image."""

    kind: PersistenceKind = PersistenceKind.NONE

    @abstractmethod
    def load(self) -> Optional[str]:
        """
        Reads the serialized image.

        Returns:
            The stored text, or None if nothing has been persisted yet
        """
        pass

    @abstractmethod
    def save(self, payload: str) -> None:
        """
        Replaces the stored image with ``payload``.

        Raises:
            CacheError: If the image could not be written
        """
        pass
