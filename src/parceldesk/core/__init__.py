"""Core domain layer for parceldesk."""

from parceldesk.core.entities import (
    CacheConfig,
    CacheEntry,
    FetchPolicy,
    Query,
    SessionConfig,
    SessionState,
)
from parceldesk.core.interfaces import (
    IAuthService,
    IBlobStorage,
    ICacheBackend,
    IDataStore,
    IKeyBuilder,
)
from parceldesk.core.services import CacheService, SessionManager

__all__ = [
    # Entities
    "CacheConfig",
    "CacheEntry",
    "FetchPolicy",
    "Query",
    "SessionConfig",
    "SessionState",
    # Interfaces
    "ICacheBackend",
    "IKeyBuilder",
    "IDataStore",
    "IAuthService",
    "IBlobStorage",
    # Services
    "CacheService",
    "SessionManager",
]
