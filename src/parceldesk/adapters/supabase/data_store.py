"""Structured-query data store over the backend's REST interface."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from parceldesk.adapters.supabase.errors import raise_for_status, transport_errors
from parceldesk.core.entities.query import Filter, FilterOp, Query

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class SupabaseDataStore:
    """IDataStore implementation for a PostgREST endpoint.

    Requests are authorised with the signed-in user's access token when
    one is available, so row-level security applies; otherwise the
    anonymous API key is used.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        token_provider: Callable[[], str | None] | None = None,
    ) -> None:
        """Initialize the data store.

        Args:
            client: HTTP client whose base URL is the project URL.
            api_key: Anonymous API key of the project.
            token_provider: Returns the current access token, if any.
        """
        self._client = client
        self._api_key = api_key
        self._token_provider = token_provider or (lambda: None)

    async def select(self, query: Query) -> Any:
        """Run a read; single-row queries return one dict."""
        params = encode_query(query)
        headers = self._headers(accept=SINGLE_OBJECT if query.single_row else None)
        response = await self._request("GET", query.table, params=params, headers=headers)
        return response.json()

    async def insert(
        self,
        table: str,
        rows: dict[str, Any] | list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Insert one or more rows and return them as stored."""
        response = await self._request(
            "POST",
            table,
            json=rows,
            headers=self._headers(prefer="return=representation"),
        )
        return _as_rows(response.json())

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        query: Query,
    ) -> list[dict[str, Any]]:
        """Update the rows matched by ``query`` and return them."""
        response = await self._request(
            "PATCH",
            table,
            params=encode_filters(query.filters),
            json=values,
            headers=self._headers(prefer="return=representation"),
        )
        return _as_rows(response.json())

    async def delete(self, query: Query) -> list[dict[str, Any]]:
        """Delete the rows matched by ``query`` and return them."""
        response = await self._request(
            "DELETE",
            query.table,
            params=encode_filters(query.filters),
            headers=self._headers(prefer="return=representation"),
        )
        return _as_rows(response.json())

    async def _request(
        self,
        method: str,
        table: str,
        **kwargs: Any,
    ) -> httpx.Response:
        logger.debug("%s %s %s", method, table, kwargs.get("params"))
        with transport_errors():
            response = await self._client.request(method, f"{REST_PREFIX}/{table}", **kwargs)
        raise_for_status(response)
        return response

    def _headers(self, accept: str | None = None, prefer: str | None = None) -> dict[str, str]:
        token = self._token_provider() or self._api_key
        headers = {"apikey": self._api_key, "Authorization": f"Bearer {token}"}
        if accept:
            headers["Accept"] = accept
        if prefer:
            headers["Prefer"] = prefer
        return headers


def encode_query(query: Query) -> list[tuple[str, str]]:
    """Translate a Query into REST query parameters.

    Args:
        query: The query to encode.

    Returns:
        Ordered ``(name, value)`` pairs, such as
        ``[("select", "*"), ("status", "eq.arrived"), ("order", "created_at.desc")]``.
    """
    params = [("select", query.columns)]
    params.extend(encode_filters(query.filters))
    if query.ordering:
        order = ",".join(
            f"{o.column}.{'desc' if o.descending else 'asc'}" for o in query.ordering
        )
        params.append(("order", order))
    if query.row_limit is not None:
        params.append(("limit", str(query.row_limit)))
    return params


def encode_filters(filters: tuple[Filter, ...]) -> list[tuple[str, str]]:
    """Translate filters into ``column=op.value`` parameters."""
    return [(f.column, _encode_filter(f)) for f in filters]


def _encode_filter(condition: Filter) -> str:
    if condition.op is FilterOp.IN:
        return "in.(" + ",".join(_quote(v) for v in condition.value) + ")"
    if condition.value is None and condition.op in (FilterOp.EQ, FilterOp.NEQ):
        return "is.null" if condition.op is FilterOp.EQ else "not.is.null"
    return f"{condition.op.value}.{_literal(condition.value)}"


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:
    text = _literal(value)
    if any(ch in text for ch in ',()"'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


def _as_rows(payload: Any) -> list[dict[str, Any]]:
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]
