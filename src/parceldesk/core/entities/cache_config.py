"""Cache configuration entity."""

from dataclasses import dataclass
from datetime import timedelta


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the client-side cache: whether it
    is used at all, the TTL applied when a caller does not pass one, and
    the maximum number of entries kept in memory.
    """

    enabled: bool = True
    default_ttl: timedelta = timedelta(minutes=5)
    max_size: int = 1000
