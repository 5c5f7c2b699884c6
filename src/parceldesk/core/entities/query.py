"""Structured query entity.

A backend-neutral description of a read against the data store: one
table, a set of filters, an ordering, an optional limit and a fetch mode
(many rows or exactly one). Queries are immutable; every builder method
returns a new instance.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class FilterOp(Enum):
    """Comparison applied by a filter."""

    EQ = "eq"
    NEQ = "neq"
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"


@dataclass(frozen=True)
class Filter:
    """A single ``column <op> value`` condition."""

    column: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class Ordering:
    """Sort order on one column."""

    column: str
    descending: bool = False


@dataclass(frozen=True)
class Query:
    """Immutable description of a select against one table."""

    table: str
    columns: str = "*"
    filters: tuple[Filter, ...] = ()
    ordering: tuple[Ordering, ...] = ()
    row_limit: int | None = None
    single_row: bool = False

    def select(self, columns: str) -> "Query":
        return replace(self, columns=columns)

    def where(self, column: str, op: FilterOp, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, op, value),))

    def eq(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.EQ, value)

    def neq(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.NEQ, value)

    def like(self, column: str, pattern: str) -> "Query":
        return self.where(column, FilterOp.LIKE, pattern)

    def ilike(self, column: str, pattern: str) -> "Query":
        return self.where(column, FilterOp.ILIKE, pattern)

    def in_(self, column: str, values: list[Any] | tuple[Any, ...]) -> "Query":
        return self.where(column, FilterOp.IN, tuple(values))

    def order_by(self, column: str, descending: bool = False) -> "Query":
        return replace(self, ordering=self.ordering + (Ordering(column, descending),))

    def limit(self, count: int) -> "Query":
        if count < 1:
            raise ValueError("limit must be positive")
        return replace(self, row_limit=count)

    def single(self) -> "Query":
        """Expect exactly one row; the store raises NotFoundError on none."""
        return replace(self, single_row=True)
