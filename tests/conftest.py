"""Pytest configuration and shared fakes for parceldesk tests."""

import asyncio
import copy
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from parceldesk.core.entities.query import Filter, FilterOp, Query
from parceldesk.core.entities.session import AuthChange, AuthEvent, AuthSession, Identity
from parceldesk.core.errors import AuthenticationError, NotFoundError


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def matches(query: Query, row: dict[str, Any]) -> bool:
    """Check a row against every filter of a query.

    The pattern operators treat ``%`` as a wildcard the way SQL ``LIKE`` does.
    """
    return all(_match(f, row.get(f.column)) for f in query.filters)


def _match(condition: Filter, actual: Any) -> bool:
    if condition.op is FilterOp.EQ:
        return bool(actual == condition.value)
    if condition.op is FilterOp.NEQ:
        return bool(actual != condition.value)
    if condition.op is FilterOp.IN:
        return actual in condition.value
    if actual is None:
        return False

    regex = "^" + ".*".join(re.escape(part) for part in str(condition.value).split("%")) + "$"
    flags = re.IGNORECASE if condition.op is FilterOp.ILIKE else 0
    return re.match(regex, str(actual), flags) is not None


class FakeDataStore:
    """In-memory IDataStore recording every call.

    ``failures`` is consumed one exception per select before any rows are
    returned; ``delay`` makes every select sleep first.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = tables or {}
        self.selects: list[Query] = []
        self.writes: list[tuple[str, str]] = []
        self.failures: list[Exception] = []
        self.delay = 0.0

    async def select(self, query: Query) -> Any:
        self.selects.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)

        rows = [r for r in self.tables.get(query.table, []) if matches(query, r)]
        for ordering in reversed(query.ordering):
            rows.sort(key=lambda r: r.get(ordering.column) or "", reverse=ordering.descending)
        if query.row_limit is not None:
            rows = rows[: query.row_limit]

        if query.single_row:
            if len(rows) != 1:
                raise NotFoundError("The result contains 0 rows", code="PGRST116")
            return copy.deepcopy(rows[0])
        return copy.deepcopy(rows)

    async def insert(self, table: str, rows: Any) -> list[dict[str, Any]]:
        self.writes.append(("insert", table))
        new_rows = rows if isinstance(rows, list) else [rows]
        stored = []
        for row in new_rows:
            row = dict(row)
            row.setdefault("id", f"{table}-{len(self.tables.get(table, [])) + 1}")
            self.tables.setdefault(table, []).append(row)
            stored.append(copy.deepcopy(row))
        return stored

    async def update(
        self, table: str, values: dict[str, Any], query: Query
    ) -> list[dict[str, Any]]:
        self.writes.append(("update", table))
        updated = []
        for row in self.tables.get(table, []):
            if matches(query, row):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, query: Query) -> list[dict[str, Any]]:
        self.writes.append(("delete", query.table))
        rows = self.tables.get(query.table, [])
        removed = [r for r in rows if matches(query, r)]
        self.tables[query.table] = [r for r in rows if not matches(query, r)]
        return removed


class FakeSubscription:
    def __init__(self, auth: "FakeAuthService", listener: Any) -> None:
        self._auth = auth
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._auth.listeners:
            self._auth.listeners.remove(self._listener)


class FakeAuthService:
    """IAuthService double whose events are pushed by the test.

    Set ``probe_gate`` to an unset asyncio.Event to hold ``get_session``
    until the test releases it.
    """

    def __init__(self, session: AuthSession | None = None) -> None:
        self.session = session
        self.listeners: list[Any] = []
        self.passwords: dict[str, str] = {}
        self.probe_gate: asyncio.Event | None = None
        self.probe_error: Exception | None = None
        self.sign_out_error: Exception | None = None
        self.get_session_calls = 0
        self.sign_out_calls = 0

    async def get_session(self) -> AuthSession | None:
        self.get_session_calls += 1
        if self.probe_gate is not None:
            await self.probe_gate.wait()
        if self.probe_error is not None:
            raise self.probe_error
        return self.session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        if self.passwords.get(email) != password:
            raise AuthenticationError()
        session = make_session(f"user-{email}", email)
        self.emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.emit(AuthEvent.SIGNED_OUT, None)

    def subscribe(self, listener: Any) -> FakeSubscription:
        self.listeners.append(listener)
        return FakeSubscription(self, listener)

    def emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        self.session = session
        for listener in list(self.listeners):
            listener(AuthChange(event=event, session=session))


PROJECT_URL = "https://proj.supabase.co"


def mock_client(handler: Any) -> httpx.AsyncClient:
    """An AsyncClient for the test project whose requests go to ``handler``."""
    return httpx.AsyncClient(base_url=PROJECT_URL, transport=httpx.MockTransport(handler))


def make_session(user_id: str = "user-1", email: str | None = "alice@example.com") -> AuthSession:
    return AuthSession(
        identity=Identity(id=user_id, email=email),
        access_token=f"token-{user_id}",
        refresh_token=f"refresh-{user_id}",
    )


def profile_row(
    user_id: str = "user-1",
    role: str = "editor",
    is_active: bool = True,
    email: str = "alice@example.com",
) -> dict[str, Any]:
    return {
        "id": user_id,
        "email": email,
        "full_name": "Alice Example",
        "role": role,
        "is_active": is_active,
        "created_at": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at 2024-01-01 UTC."""
    return FakeClock()


@pytest.fixture
def store() -> FakeDataStore:
    """An empty in-memory data store."""
    return FakeDataStore()


@pytest.fixture
def auth() -> FakeAuthService:
    """An auth service with nobody signed in."""
    return FakeAuthService()


@pytest.fixture
def no_sleep() -> Any:
    """A sleep replacement recording requested delays without waiting."""
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays  # type: ignore[attr-defined]
    return sleep
