"""Data store interface."""

from typing import Any, Protocol

from parceldesk.core.entities.query import Query


class IDataStore(Protocol):
    """Contract for the structured-query backend.

    Implementations raise the parceldesk error taxonomy: NotFoundError for
    a single-row query with no match, PermissionDeniedError for access
    control rejections, RequestTimeoutError and NetworkError for transport
    failures.
    """

    async def select(self, query: Query) -> Any:
        """Run a read.

        Args:
            query: The query to run.

        Returns:
            A list of row dicts, or a single row dict when the query is in
            single-row mode.
        """
        ...

    async def insert(
        self,
        table: str,
        rows: dict[str, Any] | list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Insert one or more rows and return them as stored."""
        ...

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        query: Query,
    ) -> list[dict[str, Any]]:
        """Update the rows matched by ``query`` and return them."""
        ...

    async def delete(self, query: Query) -> list[dict[str, Any]]:
        """Delete the rows matched by ``query`` and return them."""
        ...
