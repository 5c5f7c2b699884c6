"""Profile lookup with fallback."""

import logging

from parceldesk.core.entities.query import Query
from parceldesk.core.entities.session import Identity, Profile
from parceldesk.core.entities.session_config import SessionConfig
from parceldesk.core.errors import NotFoundError
from parceldesk.core.interfaces.data_store import IDataStore
from parceldesk.core.services.resilience import with_timeout

logger = logging.getLogger(__name__)

UNKNOWN_EMAIL = "unknown@example.com"
UNKNOWN_NAME = "Unknown User"


class ProfileLoader:
    """Loads the Profile that authorizes an Identity.

    Successful lookups are remembered per identity for the lifetime of
    the loader. When a lookup fails, ``resolve`` builds a fallback profile
    from the identity so the session never stays stuck; the fallback
    carries ``SessionConfig.fallback_role`` and is not remembered, so the
    next lookup tries the backend again.
    """

    def __init__(self, store: IDataStore, config: SessionConfig | None = None) -> None:
        self._store = store
        self._config = config or SessionConfig()
        self._profiles: dict[str, Profile] = {}

    async def load(self, identity: Identity) -> Profile:
        """Fetch the active profile of ``identity``.

        Raises:
            NotFoundError: If there is no active profile for this identity.
            RequestTimeoutError: If the lookup exceeds the profile timeout.
        """
        cached = self._profiles.get(identity.id)
        if cached is not None:
            return cached

        query = Query("profiles").eq("id", identity.id).eq("is_active", True).single()
        row = await with_timeout(
            self._store.select(query),
            self._config.profile_timeout,
            "Profile fetch timed out.",
        )
        if not row:
            raise NotFoundError(f"No active profile for user {identity.id}.")

        profile = Profile.from_row(row)
        self._profiles[identity.id] = profile
        return profile

    async def resolve(self, identity: Identity) -> Profile:
        """Like ``load``, but never fails: errors yield the fallback profile."""
        try:
            return await self.load(identity)
        except Exception as e:
            logger.warning("Profile fetch for %s failed, using fallback: %s", identity.id, e)
            return self.fallback(identity)

    def fallback(self, identity: Identity) -> Profile:
        """Build a profile from whatever the identity carries."""
        email = identity.email or UNKNOWN_EMAIL
        name = identity.metadata.get("full_name")
        if not name and identity.email:
            name = identity.email.split("@")[0]

        return Profile(
            id=identity.id,
            email=email,
            role=self._config.fallback_role,
            active=True,
            display_name=name or UNKNOWN_NAME,
        )

    def forget(self, identity_id: str | None = None) -> None:
        """Drop remembered profiles (one identity, or all of them)."""
        if identity_id is None:
            self._profiles.clear()
        else:
            self._profiles.pop(identity_id, None)
