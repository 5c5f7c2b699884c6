"""Core interfaces (Protocol classes) for parceldesk."""

from parceldesk.core.interfaces.auth_service import (
    AuthListener,
    IAuthService,
    ISubscription,
)
from parceldesk.core.interfaces.blob_storage import IBlobStorage
from parceldesk.core.interfaces.cache_backend import ICacheBackend
from parceldesk.core.interfaces.data_store import IDataStore
from parceldesk.core.interfaces.key_builder import IKeyBuilder

__all__ = [
    "ICacheBackend",
    "IKeyBuilder",
    "IDataStore",
    "IAuthService",
    "ISubscription",
    "AuthListener",
    "IBlobStorage",
]
