"""In-memory cache backend implementation."""

import re
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from cachetools import LRUCache  # type: ignore[import-untyped]

from parceldesk.core.entities.cache_entry import CacheEntry, utc_now


class InMemoryCacheBackend:
    """In-memory cache backend with per-entry TTL.

    Entries live in a cachetools LRUCache so memory stays bounded; each
    entry carries its own TTL, checked lazily against the injected clock
    on every read. Expired entries are dropped the first time they are
    seen.

    Suitable for a single asyncio process. No method awaits while it
    mutates the store, so cooperative tasks never interleave inside a
    mutation; sharing an instance across OS threads is not supported.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the in-memory cache backend.

        Args:
            maxsize: Maximum number of entries kept in memory.
            clock: Returns the current time; injectable for tests.
        """
        self._maxsize = maxsize
        self._clock = clock
        self._cache: LRUCache[str, CacheEntry] = LRUCache(maxsize=maxsize)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve a valid entry by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The entry, or None if not found or expired.
        """
        return self._live_entry(key)

    async def set(self, key: str, value: Any, ttl: timedelta) -> CacheEntry:
        """Store a value, replacing any previous entry for the key.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: How long the value stays fresh.

        Returns:
            The stored entry.
        """
        entry = CacheEntry.create(key=key, value=value, ttl=ttl, now=self._clock())
        self._cache[key] = entry
        return entry

    async def delete(self, key: str) -> bool:
        """Delete an entry.

        Args:
            key: The cache key to delete.

        Returns:
            True if a valid entry existed and was deleted, False otherwise.
        """
        if self._live_entry(key) is None:
            return False
        del self._cache[key]
        return True

    async def exists(self, key: str) -> bool:
        """Check if a valid entry exists for the key."""
        return self._live_entry(key) is not None

    async def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a regular expression.

        Args:
            pattern: Regular expression searched in each key.

        Returns:
            Number of keys deleted.
        """
        regex = re.compile(pattern)
        keys_to_delete = [key for key in list(self._cache.keys()) if regex.search(key)]

        for key in keys_to_delete:
            del self._cache[key]

        return len(keys_to_delete)

    async def keys(self) -> list[str]:
        """Return the keys of all valid entries."""
        return [key for key in list(self._cache.keys()) if self._live_entry(key)]

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._cache[key]
            return None
        return entry

    def __len__(self) -> int:
        """Return the number of stored entries, expired ones included."""
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the cache."""
        return self._maxsize
