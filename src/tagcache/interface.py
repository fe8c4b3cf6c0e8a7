"""
tagcache - Cache Interface

Defines the abstract interface that all cache backends must implement.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Optional

from .errors import ValidationError


class CacheInterface(ABC):
    """
    Abstract base class for cache backends.

    All cache implementations must implement this interface to ensure
    consistent key, TTL and tag semantics across storage engines.
    """

    @abstractmethod
    def load_key(self, key: str) -> Optional[Any]:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    def load_tag(self, tag: str) -> Optional[list[str]]:
        """
        Retrieve the mapped keys of every live entry carrying a tag.

        Args:
            tag: Tag name

        Returns:
            List of mapped keys, or None if no entry carries the tag
        """
        pass

    @abstractmethod
    def save(
        self,
        value: Any,
        key: str,
        tags: Optional[Iterable[str]] = None,
        ttl: Optional[int] = None,
    ) -> bool:
        """
        Store a value in the cache, replacing any previous entry for the key.

        Args:
            value: Value to cache (must be serializable)
            key: Cache key
            tags: Tag names to attach to the entry
            ttl: Time-to-live in seconds (None or 0 = no expiry)

        Returns:
            True if the entry was written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key from the cache.

        Args:
            key: Cache key to delete

        Returns:
            True if key was deleted, False if key didn't exist
        """
        pass

    @abstractmethod
    def clean(self, tags: Iterable[str]) -> bool:
        """
        Remove every entry carrying any of the given tags.

        Args:
            tags: Non-empty collection of tag names

        Returns:
            True if at least one entry was removed
        """
        pass

    @abstractmethod
    def flush(self, all: bool = False) -> bool:
        """
        Clear entries from the cache.

        Args:
            all: Remove every stored entry, expired ones included

        Returns:
            True if the flush did something (see backend for exact policy)
        """
        pass

    @abstractmethod
    def purge(self, extra: int = 0) -> bool:
        """
        Physically remove expired entries.

        Args:
            extra: Also remove entries expiring within this many seconds

        Returns:
            True if the purge executed
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """
        Check if a key exists in the cache.

        Args:
            key: Cache key to check

        Returns:
            True if key exists and is not expired, False otherwise
        """
        pass

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, size, etc.)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release resources held by the backend.

        Should be called during graceful shutdown.
        """
        pass

    def load(self, key: str, type: str = "key") -> Optional[Any]:
        """
        Retrieve either the value for a key or the keys for a tag.

        Args:
            key: Cache key, or tag name when type is "tag"
            type: Either "key" or "tag"
        """
        if type == "key":
            return self.load_key(key)
        if type == "tag":
            return self.load_tag(key)

        raise ValidationError(
            f"Unknown load type: {type}",
            details={"type": type, "supported": ["key", "tag"]},
        )

    def load_many(self, keys: list[str]) -> dict[str, Any]:
        """
        Retrieve multiple values from the cache.

        Default implementation calls load_key() for each key.
        Backends can override for better performance.

        Args:
            keys: List of cache keys

        Returns:
            Dictionary mapping keys to values (missing keys are omitted)
        """
        result = {}
        for key in keys:
            value = self.load_key(key)
            if value is not None:
                result[key] = value
        return result

    def save_many(
        self,
        items: dict[str, Any],
        tags: Optional[Iterable[str]] = None,
        ttl: Optional[int] = None,
    ) -> int:
        """
        Store multiple values in the cache.

        Default implementation calls save() for each item.

        Args:
            items: Dictionary mapping keys to values
            tags: Tag names applied to every item
            ttl: Time-to-live in seconds (applies to all items)

        Returns:
            Number of items successfully stored
        """
        tag_list = list(tags) if tags is not None else None
        count = 0
        for key, value in items.items():
            if self.save(value, key, tag_list, ttl):
                count += 1
        return count

    def delete_many(self, keys: list[str]) -> int:
        """
        Delete multiple keys from the cache.

        Default implementation calls delete() for each key.

        Args:
            keys: List of cache keys to delete

        Returns:
            Number of keys successfully deleted
        """
        count = 0
        for key in keys:
            if self.delete(key):
                count += 1
        return count
