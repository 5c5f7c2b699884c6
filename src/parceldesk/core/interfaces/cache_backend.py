"""Cache backend interface."""

from datetime import timedelta
from typing import Any, Protocol

from parceldesk.core.entities.cache_entry import CacheEntry


class ICacheBackend(Protocol):
    """Contract for cache storage backends.

    A backend is the sole owner of its entries. Expired entries must be
    indistinguishable from absent ones. Methods are async so that a
    backend may be swapped without changing callers.
    """

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve a valid entry by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The entry, or None if not found or expired.
        """
        ...

    async def set(self, key: str, value: Any, ttl: timedelta) -> CacheEntry:
        """Store a value, replacing any previous entry for the key.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: How long the value stays fresh.

        Returns:
            The stored entry.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete an entry.

        Args:
            key: The cache key to delete.

        Returns:
            True if a valid entry existed and was deleted, False otherwise.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Check if a valid entry exists for the key."""
        ...

    async def clear(self) -> None:
        """Remove all entries."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matched by a regular expression.

        Args:
            pattern: Regular expression searched in each key.

        Returns:
            Number of keys deleted.
        """
        ...

    async def keys(self) -> list[str]:
        """Return the keys of all valid entries."""
        ...
