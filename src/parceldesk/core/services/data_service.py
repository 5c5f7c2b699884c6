"""Package data service - the reads and writes every page issues."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from parceldesk.core.entities.fetch_policy import FetchPolicy
from parceldesk.core.entities.query import Query
from parceldesk.core.errors import NotFoundError, ValidationError
from parceldesk.core.interfaces.data_store import IDataStore
from parceldesk.core.interfaces.key_builder import IKeyBuilder
from parceldesk.core.services.cache_service import CacheService
from parceldesk.core.services.invalidation import (
    CONNECTION,
    DOCUMENTS,
    PACKAGE,
    PACKAGES,
    USERS,
    CacheInvalidator,
)
from parceldesk.core.services.resilience import with_timeout

logger = logging.getLogger(__name__)

PACKAGE_LIST_COLUMNS = (
    "id,tracking_number,sender_type,shipping_date,expected_arrival_date,"
    "description,priority_level,status,created_at,updated_at,"
    "package_processing(tracking_number_confirmation,reservation_confirmation,"
    "assigned_to,due_date)"
)
PACKAGE_DETAIL_COLUMNS = (
    "*,package_processing(tracking_number_confirmation,reservation_confirmation,"
    "assigned_to,due_date)"
)
PACKAGE_LIST_LIMIT = 50
WRITE_TIMEOUT = 15.0


class PackageDataService:
    """Cached, timeout- and retry-guarded access to the tracking data.

    Reads go through ``CacheService.fetch`` (cache, then retry, then
    timeout). Writes run under a timeout only, are never retried, and
    invalidate every key they could have made stale before returning.

    Example:
        data = PackageDataService(store, cache, DefaultKeyBuilder())
        packages = await data.fetch_packages({"status": "arrived"})
        await data.update_package(packages[0]["id"], {"status": "received"})
    """

    def __init__(
        self,
        store: IDataStore,
        cache: CacheService,
        key_builder: IKeyBuilder,
        list_policy: FetchPolicy | None = None,
        detail_policy: FetchPolicy | None = None,
        probe_policy: FetchPolicy | None = None,
        write_timeout: float = WRITE_TIMEOUT,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._cache = cache
        self._keys = key_builder
        self._list_policy = list_policy or FetchPolicy.list_read()
        self._detail_policy = detail_policy or FetchPolicy.detail_read()
        self._probe_policy = probe_policy or FetchPolicy.connection_probe()
        self._write_timeout = write_timeout
        self._sleep = sleep
        self.invalidate = CacheInvalidator(cache, key_builder)

    # Reads

    async def fetch_packages(self, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Newest packages first, optionally narrowed by equality filters."""
        query = Query(PACKAGES).select(PACKAGE_LIST_COLUMNS)
        for column, value in sorted((filters or {}).items()):
            query = query.eq(column, value)
        query = query.order_by("created_at", descending=True).limit(PACKAGE_LIST_LIMIT)

        return await self._cache.fetch(
            self._keys.build(PACKAGES, filters),
            lambda: self._store.select(query),
            self._list_policy.with_message("Fetching packages timed out."),
            sleep=self._sleep,
        )

    async def fetch_package(self, package_id: Any) -> dict[str, Any]:
        """One package with its processing record.

        Raises:
            NotFoundError: If no package has this id.
        """
        query = Query(PACKAGES).select(PACKAGE_DETAIL_COLUMNS).eq("id", package_id).single()
        return await self._cache.fetch(
            self._keys.build_detail(PACKAGE, package_id),
            lambda: self._store.select(query),
            self._detail_policy.with_message("Fetching package details timed out."),
            sleep=self._sleep,
        )

    async def fetch_users(self) -> list[dict[str, Any]]:
        """All user profiles, newest first."""
        query = Query("profiles").order_by("created_at", descending=True)
        return await self._cache.fetch(
            self._keys.build_static(USERS),
            lambda: self._store.select(query),
            self._detail_policy.with_message("Fetching users timed out."),
            sleep=self._sleep,
        )

    async def fetch_documents(self, package_id: Any) -> list[dict[str, Any]]:
        """Documents attached to one package, newest upload first."""
        query = (
            Query(DOCUMENTS)
            .eq("package_id", package_id)
            .order_by("uploaded_at", descending=True)
        )
        return await self._cache.fetch(
            self._keys.build_detail(DOCUMENTS, package_id),
            lambda: self._store.select(query),
            self._detail_policy.with_message("Fetching documents timed out."),
            sleep=self._sleep,
        )

    async def check_connection(self) -> bool:
        """Probe the backend; True if a trivial read succeeds."""
        query = Query(PACKAGES).select("id").limit(1)
        try:
            await self._cache.fetch(
                self._keys.build_static(CONNECTION),
                lambda: self._store.select(query),
                self._probe_policy,
                sleep=self._sleep,
            )
        except Exception as e:
            logger.warning("Connection check failed: %s", e)
            return False
        return True

    # Writes

    async def create_package(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a package and drop every cached package list."""
        if not values.get("tracking_number"):
            raise ValidationError("A tracking number is required.")

        rows = await self._write(self._store.insert(PACKAGES, values))
        await self.invalidate.packages()
        return rows[0] if rows else values

    async def update_package(self, package_id: Any, changes: dict[str, Any]) -> dict[str, Any]:
        """Update one package and invalidate its detail and list entries."""
        self._require_changes(changes)
        rows = await self._write(
            self._store.update(PACKAGES, changes, Query(PACKAGES).eq("id", package_id))
        )
        await self.invalidate.package(package_id)
        return self._first(rows, f"Package {package_id} not found.")

    async def delete_package(self, package_id: Any) -> None:
        """Delete one package; its detail, lists and documents go stale."""
        await self._write(self._store.delete(Query(PACKAGES).eq("id", package_id)))
        await self.invalidate.package(package_id)
        await self.invalidate.documents(package_id)

    async def update_processing(
        self,
        package_id: Any,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """Update the customs/processing record of a package."""
        self._require_changes(changes)
        table = "package_processing"
        rows = await self._write(
            self._store.update(table, changes, Query(table).eq("package_id", package_id))
        )
        await self.invalidate.package(package_id)
        return self._first(rows, f"No processing record for package {package_id}.")

    async def update_user(self, user_id: Any, changes: dict[str, Any]) -> dict[str, Any]:
        """Update a profile (role, active flag, name)."""
        self._require_changes(changes)
        rows = await self._write(
            self._store.update("profiles", changes, Query("profiles").eq("id", user_id))
        )
        await self.invalidate.users()
        return self._first(rows, f"User {user_id} not found.")

    async def delete_document(self, document_id: Any, package_id: Any) -> None:
        """Delete a document record and drop its package's document list."""
        await self._write(self._store.delete(Query(DOCUMENTS).eq("id", document_id)))
        await self.invalidate.documents(package_id)

    async def _write(self, operation: Awaitable[Any]) -> Any:
        return await with_timeout(operation, self._write_timeout, "Saving data timed out.")

    @staticmethod
    def _require_changes(changes: dict[str, Any]) -> None:
        if not changes:
            raise ValidationError("No changes to save.")

    @staticmethod
    def _first(rows: list[dict[str, Any]], message: str) -> dict[str, Any]:
        if not rows:
            raise NotFoundError(message)
        return rows[0]
