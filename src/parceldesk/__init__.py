"""parceldesk - cache, resilient fetch and session core of a package-tracking admin app.

Staff record inbound packages, follow their customs and shipping status,
attach documents and manage users. Persistence, authentication and file
storage live in a hosted backend; this library is what every page uses to
talk to it: a TTL read-through cache with entity-level invalidation,
timeout and retry around every remote call, and the session state
machine that decides who may see what.

Example:
    from parceldesk import Settings, create_app, AccessGuard

    async with create_app(Settings.from_env()) as app:
        await app.session.wait_ready()
        guard = AccessGuard(app.session, navigate=router.replace,
                            required_roles=["admin", "editor"])
        if guard.granted:
            packages = await app.data.fetch_packages({"status": "arrived"})

Lower-level pieces compose the same way:
    from parceldesk import CacheService, InMemoryCacheBackend, FetchPolicy

    cache = CacheService(InMemoryCacheBackend())
    rows = await cache.fetch("packages:{}", lambda: store.select(query),
                             FetchPolicy.list_read())
"""

from parceldesk.app import ParcelDeskApp, create_app
from parceldesk.config import Settings
from parceldesk.core.entities import (
    AccessDecision,
    AuthChange,
    AuthEvent,
    AuthSession,
    CacheConfig,
    CacheEntry,
    FetchPolicy,
    Identity,
    Profile,
    Query,
    Role,
    SessionConfig,
    SessionPhase,
    SessionState,
    StoredObject,
)
from parceldesk.core.errors import (
    AuthenticationError,
    DataStoreError,
    NetworkError,
    NotFoundError,
    ParcelDeskError,
    PermissionDeniedError,
    RequestTimeoutError,
    ValidationError,
    describe_error,
    is_retryable,
)
from parceldesk.core.interfaces import (
    IAuthService,
    IBlobStorage,
    ICacheBackend,
    IDataStore,
    IKeyBuilder,
)
from parceldesk.core.services import (
    AccessGuard,
    CacheInvalidator,
    CacheService,
    DocumentService,
    PackageDataService,
    ProfileLoader,
    SessionManager,
    evaluate_access,
    resilient_call,
    with_retry,
    with_timeout,
)
from parceldesk.infrastructure import DefaultKeyBuilder, InMemoryCacheBackend

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Application
    "ParcelDeskApp",
    "create_app",
    "Settings",
    # Cache entities
    "CacheConfig",
    "CacheEntry",
    "FetchPolicy",
    "Query",
    # Session entities
    "AccessDecision",
    "AuthChange",
    "AuthEvent",
    "AuthSession",
    "Identity",
    "Profile",
    "Role",
    "SessionConfig",
    "SessionPhase",
    "SessionState",
    "StoredObject",
    # Errors
    "ParcelDeskError",
    "RequestTimeoutError",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "ValidationError",
    "AuthenticationError",
    "DataStoreError",
    "describe_error",
    "is_retryable",
    # Core interfaces
    "ICacheBackend",
    "IKeyBuilder",
    "IDataStore",
    "IAuthService",
    "IBlobStorage",
    # Core services
    "CacheService",
    "CacheInvalidator",
    "with_timeout",
    "with_retry",
    "resilient_call",
    "PackageDataService",
    "DocumentService",
    "ProfileLoader",
    "SessionManager",
    "AccessGuard",
    "evaluate_access",
    # Infrastructure implementations
    "InMemoryCacheBackend",
    "DefaultKeyBuilder",
]
