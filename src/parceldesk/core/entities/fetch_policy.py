"""Fetch policy entity."""

from dataclasses import dataclass, replace
from datetime import timedelta


@dataclass(frozen=True)
class FetchPolicy:
    """How a single remote read is guarded.

    Attributes:
        timeout: Seconds to wait for one attempt before giving up on it.
        retries: Extra attempts after the first one for transient failures.
        base_delay: Seconds of linear backoff; attempt ``n`` waits
            ``base_delay * n`` before the next try.
        ttl: How long a successful result is cached. None means use the
            cache's default TTL.
        timeout_message: Message carried by the timeout error.
    """

    timeout: float = 15.0
    retries: int = 2
    base_delay: float = 1.0
    ttl: timedelta | None = None
    timeout_message: str = "The request timed out."

    def with_message(self, message: str) -> "FetchPolicy":
        """Return a copy of this policy with a different timeout message."""
        return replace(self, timeout_message=message)

    @classmethod
    def list_read(cls) -> "FetchPolicy":
        """Policy for list views: short timeout, more retries, 3 minute cache."""
        return cls(timeout=8.0, retries=3, ttl=timedelta(minutes=3))

    @classmethod
    def detail_read(cls) -> "FetchPolicy":
        """Policy for single-record reads."""
        return cls(timeout=8.0, retries=2)

    @classmethod
    def connection_probe(cls) -> "FetchPolicy":
        """Policy for the backend reachability check."""
        return cls(
            timeout=5.0,
            retries=0,
            ttl=timedelta(seconds=30),
            timeout_message="The connection check timed out.",
        )
