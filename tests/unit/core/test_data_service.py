"""Tests for PackageDataService."""

import asyncio
from typing import Any

import pytest

from parceldesk.core.entities.fetch_policy import FetchPolicy
from parceldesk.core.entities.query import FilterOp
from parceldesk.core.errors import (
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RequestTimeoutError,
    ValidationError,
)
from parceldesk.core.services.cache_service import CacheService
from parceldesk.core.services.data_service import PACKAGE_LIST_LIMIT, PackageDataService
from parceldesk.infrastructure.backends.memory import InMemoryCacheBackend
from parceldesk.infrastructure.key_builders.default import DefaultKeyBuilder

from conftest import FakeClock, FakeDataStore


def package(pid: str, status: str = "arrived", created_at: str = "2024-01-01") -> dict[str, Any]:
    return {
        "id": pid,
        "tracking_number": f"TRK-{pid}",
        "status": status,
        "created_at": created_at,
    }


@pytest.fixture
def seeded_store() -> FakeDataStore:
    return FakeDataStore(
        {
            "packages": [
                package("p1", "arrived", "2024-01-01"),
                package("p2", "received", "2024-01-03"),
                package("p3", "arrived", "2024-01-02"),
            ],
            "package_processing": [{"package_id": "p1", "assigned_to": None}],
            "profiles": [{"id": "u1", "role": "viewer", "created_at": "2024-01-01"}],
            "documents": [
                {"id": "d1", "package_id": "p1", "uploaded_at": "2024-01-01"},
                {"id": "d2", "package_id": "p1", "uploaded_at": "2024-01-05"},
            ],
        }
    )


@pytest.fixture
def data(seeded_store: FakeDataStore, clock: FakeClock, no_sleep: Any) -> PackageDataService:
    cache = CacheService(InMemoryCacheBackend(clock=clock))
    return PackageDataService(seeded_store, cache, DefaultKeyBuilder(), sleep=no_sleep)


class TestReads:
    """Tests for cached reads."""

    async def test_fetch_packages_newest_first(self, data: PackageDataService) -> None:
        packages = await data.fetch_packages()
        assert [p["id"] for p in packages] == ["p2", "p3", "p1"]

    async def test_fetch_packages_query_shape(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_packages({"status": "arrived"})

        query = seeded_store.selects[0]
        assert query.table == "packages"
        assert [(f.column, f.op, f.value) for f in query.filters] == [
            ("status", FilterOp.EQ, "arrived")
        ]
        assert query.ordering[0].column == "created_at"
        assert query.ordering[0].descending is True
        assert query.row_limit == PACKAGE_LIST_LIMIT

    async def test_fetch_packages_filters_rows(self, data: PackageDataService) -> None:
        packages = await data.fetch_packages({"status": "arrived"})
        assert [p["id"] for p in packages] == ["p3", "p1"]

    async def test_repeat_read_is_cached(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_packages({"status": "arrived"})
        await data.fetch_packages({"status": "arrived"})
        await data.fetch_packages({"status": "received"})

        assert len(seeded_store.selects) == 2

    async def test_cached_until_invalidated(
        self, data: PackageDataService, seeded_store: FakeDataStore, clock: FakeClock
    ) -> None:
        """Miss, hit within three minutes, then a miss again after invalidation."""
        first = await data.fetch_packages()
        clock.advance(minutes=2)
        second = await data.fetch_packages()

        assert second == first
        assert len(seeded_store.selects) == 1

        await data.invalidate.packages()
        await data.fetch_packages()

        assert len(seeded_store.selects) == 2

    async def test_cache_expires_after_list_ttl(
        self, data: PackageDataService, seeded_store: FakeDataStore, clock: FakeClock
    ) -> None:
        await data.fetch_packages()
        clock.advance(minutes=3, seconds=1)
        await data.fetch_packages()

        assert len(seeded_store.selects) == 2

    async def test_fetch_package(self, data: PackageDataService) -> None:
        assert (await data.fetch_package("p2"))["status"] == "received"

    async def test_fetch_missing_package(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        """Not found is not retried."""
        with pytest.raises(NotFoundError):
            await data.fetch_package("nope")

        assert len(seeded_store.selects) == 1

    async def test_fetch_users(self, data: PackageDataService) -> None:
        assert [u["id"] for u in await data.fetch_users()] == ["u1"]

    async def test_fetch_documents(self, data: PackageDataService) -> None:
        documents = await data.fetch_documents("p1")
        assert [d["id"] for d in documents] == ["d2", "d1"]

    async def test_transient_failures_are_retried(
        self, data: PackageDataService, seeded_store: FakeDataStore, no_sleep: Any
    ) -> None:
        seeded_store.failures = [NetworkError(), NetworkError()]

        packages = await data.fetch_packages()

        assert len(packages) == 3
        assert len(seeded_store.selects) == 3
        assert no_sleep.delays == [1.0, 2.0]

    async def test_permission_error_is_not_retried(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        seeded_store.failures = [PermissionDeniedError()]

        with pytest.raises(PermissionDeniedError):
            await data.fetch_packages()

        assert len(seeded_store.selects) == 1

    async def test_timeout_message(self, seeded_store: FakeDataStore, no_sleep: Any) -> None:
        seeded_store.delay = 0.2
        data = PackageDataService(
            seeded_store,
            CacheService(InMemoryCacheBackend()),
            DefaultKeyBuilder(),
            list_policy=FetchPolicy(timeout=0.01, retries=0),
            sleep=no_sleep,
        )

        with pytest.raises(RequestTimeoutError, match="Fetching packages timed out."):
            await data.fetch_packages()


class TestCheckConnection:
    """Tests for the connection probe."""

    async def test_reachable(self, data: PackageDataService) -> None:
        assert await data.check_connection() is True

    async def test_unreachable(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        """The probe does not retry and reports failure as False."""
        seeded_store.failures = [NetworkError()]

        assert await data.check_connection() is False
        assert len(seeded_store.selects) == 1

    async def test_result_is_cached(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.check_connection()
        await data.check_connection()

        assert len(seeded_store.selects) == 1


class TestWrites:
    """Tests for writes and the invalidation they trigger."""

    async def test_update_invalidates_lists_and_detail(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        """After an update every affected read goes back to the store."""
        await data.fetch_packages({"status": "arrived"})
        await data.fetch_package("p1")

        updated = await data.update_package("p1", {"status": "received"})

        assert updated["status"] == "received"
        assert [p["id"] for p in await data.fetch_packages({"status": "arrived"})] == ["p3"]
        assert (await data.fetch_package("p1"))["status"] == "received"
        assert len(seeded_store.selects) == 4

    async def test_update_leaves_other_details_cached(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_package("p2")
        await data.update_package("p1", {"status": "received"})
        await data.fetch_package("p2")

        assert len(seeded_store.selects) == 1

    async def test_update_requires_changes(self, data: PackageDataService) -> None:
        with pytest.raises(ValidationError):
            await data.update_package("p1", {})

    async def test_update_missing_package(self, data: PackageDataService) -> None:
        with pytest.raises(NotFoundError):
            await data.update_package("nope", {"status": "received"})

    async def test_create_package(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_packages()

        created = await data.create_package(package("p4", created_at="2024-02-01"))

        assert created["id"] == "p4"
        assert (await data.fetch_packages())[0]["id"] == "p4"

    async def test_create_requires_tracking_number(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        with pytest.raises(ValidationError, match="tracking number"):
            await data.create_package({"status": "arrived"})

        assert seeded_store.writes == []

    async def test_delete_package(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_documents("p1")
        await data.delete_package("p1")

        assert [p["id"] for p in await data.fetch_packages()] == ["p2", "p3"]
        await data.fetch_documents("p1")
        assert len([q for q in seeded_store.selects if q.table == "documents"]) == 2

    async def test_update_processing(self, data: PackageDataService) -> None:
        await data.fetch_package("p1")

        row = await data.update_processing("p1", {"assigned_to": "u1"})

        assert row == {"package_id": "p1", "assigned_to": "u1"}

    async def test_update_user_invalidates_users(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_users()
        await data.update_user("u1", {"role": "editor"})

        assert (await data.fetch_users())[0]["role"] == "editor"

    async def test_delete_document(
        self, data: PackageDataService, seeded_store: FakeDataStore
    ) -> None:
        await data.fetch_documents("p1")
        await data.delete_document("d1", "p1")

        assert [d["id"] for d in await data.fetch_documents("p1")] == ["d2"]

    async def test_write_timeout_is_not_retried(self, no_sleep: Any) -> None:
        class SlowStore(FakeDataStore):
            inserts = 0

            async def insert(self, table: str, rows: Any) -> list[dict[str, Any]]:
                SlowStore.inserts += 1
                await asyncio.sleep(0.2)
                return []

        data = PackageDataService(
            SlowStore(),
            CacheService(InMemoryCacheBackend()),
            DefaultKeyBuilder(),
            write_timeout=0.01,
            sleep=no_sleep,
        )

        with pytest.raises(RequestTimeoutError, match="Saving data timed out."):
            await data.create_package(package("p9"))

        assert SlowStore.inserts == 1
