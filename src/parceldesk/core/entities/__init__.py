"""Domain entities for parceldesk."""

from parceldesk.core.entities.access import AccessDecision
from parceldesk.core.entities.cache_config import CacheConfig
from parceldesk.core.entities.cache_entry import CacheEntry, utc_now
from parceldesk.core.entities.fetch_policy import FetchPolicy
from parceldesk.core.entities.query import Filter, FilterOp, Ordering, Query
from parceldesk.core.entities.session import (
    AuthChange,
    AuthEvent,
    AuthSession,
    Identity,
    Profile,
    Role,
    SessionPhase,
    SessionState,
    role_values,
)
from parceldesk.core.entities.session_config import SessionConfig
from parceldesk.core.entities.storage import StoredObject

__all__ = [
    "AccessDecision",
    "CacheConfig",
    "CacheEntry",
    "FetchPolicy",
    "utc_now",
    # Queries
    "Filter",
    "FilterOp",
    "Ordering",
    "Query",
    # Session
    "AuthChange",
    "AuthEvent",
    "AuthSession",
    "Identity",
    "Profile",
    "Role",
    "SessionConfig",
    "SessionPhase",
    "SessionState",
    "role_values",
    "StoredObject",
]
