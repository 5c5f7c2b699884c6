"""Cache entry entity."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Holds an opaque cached payload together with the moment it was stored
    and how long it stays fresh. An entry is valid while
    ``now - stored_at <= ttl``.
    """

    key: str
    value: Any
    stored_at: datetime
    ttl: timedelta

    @property
    def expires_at(self) -> datetime:
        """The last instant at which this entry is still valid."""
        return self.stored_at + self.ttl

    def is_valid(self, now: datetime | None = None) -> bool:
        """Check whether the entry is still fresh.

        Args:
            now: The instant to check against. Defaults to the current time.

        Returns:
            True if ``now - stored_at <= ttl``.
        """
        current = now if now is not None else utc_now()
        return current - self.stored_at <= self.ttl

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the entry has gone stale."""
        return not self.is_valid(now)

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: How long the value stays fresh.
            now: Storage time. Defaults to the current time.

        Returns:
            A new CacheEntry instance.
        """
        return cls(
            key=key,
            value=value,
            stored_at=now if now is not None else utc_now(),
            ttl=ttl,
        )
