"""Composition root: builds every parceldesk service explicitly."""

import logging
from dataclasses import dataclass

import httpx

from parceldesk.adapters.supabase import (
    SupabaseAuthService,
    SupabaseDataStore,
    SupabaseStorage,
)
from parceldesk.config import Settings
from parceldesk.core.entities.cache_config import CacheConfig
from parceldesk.core.entities.session_config import SessionConfig
from parceldesk.core.interfaces.auth_service import IAuthService
from parceldesk.core.interfaces.blob_storage import IBlobStorage
from parceldesk.core.interfaces.data_store import IDataStore
from parceldesk.core.services.cache_service import CacheService
from parceldesk.core.services.data_service import PackageDataService
from parceldesk.core.services.documents import DocumentService
from parceldesk.core.services.profile_loader import ProfileLoader
from parceldesk.core.services.session_manager import SessionManager
from parceldesk.infrastructure.backends.memory import InMemoryCacheBackend
from parceldesk.infrastructure.key_builders.default import DefaultKeyBuilder

logger = logging.getLogger(__name__)

OFFLINE_BASE_URL = "http://offline.invalid"
CLIENT_INFO = "parceldesk/0.1.0"


@dataclass
class ParcelDeskApp:
    """Every service a page layer needs, wired to one backend."""

    settings: Settings
    cache: CacheService
    data: PackageDataService
    documents: DocumentService
    session: SessionManager
    store: IDataStore
    auth: IAuthService
    storage: IBlobStorage
    http_client: httpx.AsyncClient
    owns_client: bool = True

    async def start(self) -> None:
        await self.session.start()

    async def aclose(self) -> None:
        """Stop the session manager and close the HTTP client if we created it."""
        await self.session.close()
        if self.owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "ParcelDeskApp":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    cache_config: CacheConfig | None = None,
) -> ParcelDeskApp:
    """Build a ParcelDeskApp.

    Args:
        settings: Backend settings. Read from the environment if None.
        http_client: Client to use. One is created (and later closed by
            ``aclose``) if None; its base URL must be the project URL.
        cache_config: Cache configuration. Defaults if None.

    Returns:
        The wired application; call ``start()`` or use ``async with``.
    """
    settings = settings or Settings.from_env()
    cache_config = cache_config or CacheConfig()
    api_key = settings.supabase_anon_key or ""

    owns_client = http_client is None
    if http_client is None:
        http_client = httpx.AsyncClient(
            base_url=settings.supabase_url or OFFLINE_BASE_URL,
            headers={"x-client-info": CLIENT_INFO},
            timeout=settings.request_timeout,
        )
    if settings.offline:
        logger.info("No backend configured; starting in offline mode")

    auth = SupabaseAuthService(http_client, api_key)
    store = SupabaseDataStore(http_client, api_key, token_provider=lambda: auth.access_token)
    storage = SupabaseStorage(
        http_client,
        api_key,
        bucket=settings.storage_bucket,
        token_provider=lambda: auth.access_token,
    )

    key_builder = DefaultKeyBuilder()
    cache = CacheService(InMemoryCacheBackend(maxsize=cache_config.max_size), cache_config)
    data = PackageDataService(store, cache, key_builder)
    documents = DocumentService(store, storage, data.invalidate)

    session_config = SessionConfig(
        fallback_role=settings.fallback_role,
        offline=settings.offline,
    )
    session = SessionManager(auth, ProfileLoader(store, session_config), session_config)

    return ParcelDeskApp(
        settings=settings,
        cache=cache,
        data=data,
        documents=documents,
        session=session,
        store=store,
        auth=auth,
        storage=storage,
        http_client=http_client,
        owns_client=owns_client,
    )
