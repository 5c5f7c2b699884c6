"""Cache service - read-through caching of remote reads."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

from parceldesk.core.entities.cache_config import CacheConfig
from parceldesk.core.entities.fetch_policy import FetchPolicy
from parceldesk.core.interfaces.cache_backend import ICacheBackend
from parceldesk.core.services.resilience import resilient_call

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheService:
    """Domain service that orchestrates caching operations.

    This is the main entry point for cached reads: it checks the backend
    for a fresh entry, otherwise runs the supplied operation and stores
    its result. Invalidation is explicit; nothing is evicted because of
    session changes.
    """

    def __init__(
        self,
        backend: ICacheBackend,
        config: CacheConfig | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            backend: The cache backend to use for storage.
            config: Optional cache configuration. Uses defaults if not provided.
        """
        self._backend = backend
        self._config = config or CacheConfig()

        # Statistics
        self._hits = 0
        self._misses = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def backend(self) -> ICacheBackend:
        """Get the cache backend."""
        return self._backend

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, and total requests.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": self._hits + self._misses,
        }

    async def with_cache(
        self,
        key: str,
        operation: Callable[[], Awaitable[T]],
        ttl: timedelta | None = None,
    ) -> T:
        """Return the cached value for ``key``, or fetch and cache it.

        A failed operation propagates its error and caches nothing.

        Args:
            key: The cache key.
            operation: Zero-argument callable returning the awaitable to run
                on a miss.
            ttl: How long the result stays fresh. Uses config default if None.

        Returns:
            The cached or freshly fetched value.
        """
        if not self._config.enabled:
            return await operation()

        entry = await self._backend.get(key)
        if entry is not None:
            self._hits += 1
            logger.debug("Cache hit for key: %s", key)
            return entry.value  # type: ignore[no-any-return]

        self._misses += 1
        logger.debug("Cache miss for key: %s, fetching", key)

        value = await operation()
        await self._backend.set(key, value, self._effective_ttl(ttl))
        return value

    async def fetch(
        self,
        key: str,
        operation: Callable[[], Awaitable[T]],
        policy: FetchPolicy,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> T:
        """Cached read guarded by the retry and timeout of ``policy``.

        Args:
            key: The cache key.
            operation: Zero-argument callable returning a fresh awaitable per
                attempt.
            policy: Timeout, retries, backoff and TTL of this read.
            sleep: Coroutine used to wait between attempts.

        Returns:
            The cached or freshly fetched value.
        """
        return await self.with_cache(
            key,
            lambda: resilient_call(operation, policy, sleep=sleep),
            policy.ttl,
        )

    async def get(self, key: str) -> Any | None:
        """Return the cached value for ``key``, or None if absent or stale."""
        entry = await self._backend.get(key)
        return None if entry is None else entry.value

    async def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value directly."""
        await self._backend.set(key, value, self._effective_ttl(ttl))

    async def invalidate(self, key: str) -> bool:
        """Invalidate a single key.

        Returns:
            True if an entry was removed.
        """
        return await self._backend.delete(key)

    async def invalidate_pattern(self, pattern: str) -> int:
        """Invalidate every key matched by a regular expression.

        Returns:
            Number of entries removed.
        """
        return await self._backend.delete_pattern(pattern)

    async def clear(self) -> None:
        """Clear all cached entries."""
        await self._backend.clear()
        self._hits = 0
        self._misses = 0

    def _effective_ttl(self, ttl: timedelta | None) -> timedelta:
        return ttl if ttl is not None else self._config.default_ttl
