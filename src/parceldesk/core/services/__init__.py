"""Domain services for parceldesk."""

from parceldesk.core.services.access_guard import AccessGuard, evaluate_access
from parceldesk.core.services.cache_service import CacheService
from parceldesk.core.services.data_service import PackageDataService
from parceldesk.core.services.documents import DocumentService
from parceldesk.core.services.invalidation import CacheInvalidator
from parceldesk.core.services.profile_loader import ProfileLoader
from parceldesk.core.services.resilience import (
    resilient_call,
    with_retry,
    with_timeout,
)
from parceldesk.core.services.session_manager import SessionManager

__all__ = [
    "CacheService",
    "CacheInvalidator",
    # Resilience
    "with_timeout",
    "with_retry",
    "resilient_call",
    # Data
    "PackageDataService",
    "DocumentService",
    # Session
    "ProfileLoader",
    "SessionManager",
    "AccessGuard",
    "evaluate_access",
]
