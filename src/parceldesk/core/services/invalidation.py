"""Entity-level cache invalidation."""

import logging
from typing import Any

from parceldesk.core.interfaces.key_builder import IKeyBuilder
from parceldesk.core.services.cache_service import CacheService

logger = logging.getLogger(__name__)

PACKAGES = "packages"
PACKAGE = "package"
DOCUMENTS = "documents"
USERS = "users"
CONNECTION = "connection_status"


class CacheInvalidator:
    """Invalidation calls issued after a successful write.

    A change to one record can change how it sorts and filters, so
    invalidating a package also drops every package list variant.
    """

    def __init__(self, cache: CacheService, key_builder: IKeyBuilder) -> None:
        self._cache = cache
        self._keys = key_builder

    async def packages(self) -> int:
        """Drop every cached package list."""
        count = await self._cache.invalidate_pattern(self._keys.list_pattern(PACKAGES))
        logger.debug("Invalidated packages cache (%d entries)", count)
        return count

    async def package(self, package_id: Any) -> int:
        """Drop one package's detail entry and every package list."""
        removed = await self._cache.invalidate(self._keys.build_detail(PACKAGE, package_id))
        count = int(removed) + await self._cache.invalidate_pattern(
            self._keys.list_pattern(PACKAGES)
        )
        logger.debug("Invalidated cache for package %s (%d entries)", package_id, count)
        return count

    async def documents(self, package_id: Any) -> int:
        """Drop the cached document list of one package."""
        removed = await self._cache.invalidate(self._keys.build_detail(DOCUMENTS, package_id))
        logger.debug("Invalidated documents cache for package %s", package_id)
        return int(removed)

    async def users(self) -> int:
        """Drop the cached user list."""
        removed = await self._cache.invalidate(self._keys.build_static(USERS))
        logger.debug("Invalidated users cache")
        return int(removed)

    async def all(self) -> None:
        """Drop everything, for cross-cutting changes such as a settings import."""
        await self._cache.clear()
        logger.debug("Cleared all cache")
