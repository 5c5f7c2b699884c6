"""Application settings read from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlparse

from parceldesk.core.entities.session import Role

DEMO_HOST_SUFFIX = "demo.supabase.co"


@dataclass(frozen=True)
class Settings:
    """Backend connection settings.

    Offline (demo) mode is on when no backend URL is configured or the URL
    points at a demo host; the application then runs without the auth
    service and only demo login is available.
    """

    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    request_timeout: float = 15.0
    fallback_role: Role = Role.VIEWER
    storage_bucket: str = "file"

    @property
    def offline(self) -> bool:
        """Whether no usable backend is configured, so only demo login works."""
        if not self.supabase_url or not self.supabase_anon_key:
            return True
        host = urlparse(self.supabase_url).hostname or ""
        return host == DEMO_HOST_SUFFIX or host.endswith("." + DEMO_HOST_SUFFIX)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Reads ``PARCELDESK_SUPABASE_URL`` (or ``SUPABASE_URL``),
        ``PARCELDESK_SUPABASE_ANON_KEY`` (or ``SUPABASE_ANON_KEY``),
        ``PARCELDESK_REQUEST_TIMEOUT``, ``PARCELDESK_FALLBACK_ROLE`` and
        ``PARCELDESK_STORAGE_BUCKET``.

        Raises:
            ValueError: If a numeric or role value cannot be parsed.
        """
        env = os.environ if environ is None else environ

        url = env.get("PARCELDESK_SUPABASE_URL") or env.get("SUPABASE_URL")
        key = env.get("PARCELDESK_SUPABASE_ANON_KEY") or env.get("SUPABASE_ANON_KEY")
        timeout = float(env.get("PARCELDESK_REQUEST_TIMEOUT", "15"))
        if timeout <= 0:
            raise ValueError("PARCELDESK_REQUEST_TIMEOUT must be positive")

        return cls(
            supabase_url=url.rstrip("/") if url else None,
            supabase_anon_key=key or None,
            request_timeout=timeout,
            fallback_role=Role.parse(env.get("PARCELDESK_FALLBACK_ROLE", Role.VIEWER.value)),
            storage_bucket=env.get("PARCELDESK_STORAGE_BUCKET", "file"),
        )
