"""Auth service over the backend's token endpoints."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from parceldesk.adapters.supabase.errors import (
    error_from_response,
    error_payload,
    raise_for_status,
    transport_errors,
)
from parceldesk.core.entities.cache_entry import utc_now
from parceldesk.core.entities.session import AuthChange, AuthEvent, AuthSession, Identity
from parceldesk.core.errors import AuthenticationError, PermissionDeniedError
from parceldesk.core.interfaces.auth_service import AuthListener

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/auth/v1"


class Subscription:
    """Handle for one registered auth listener."""

    def __init__(self, listeners: list[AuthListener], listener: AuthListener) -> None:
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class SupabaseAuthService:
    """IAuthService implementation for a GoTrue endpoint.

    Keeps the current session in memory, refreshes it when it has
    expired, and tells subscribers about every sign-in, refresh and
    sign-out in the order they happen.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the auth service.

        Args:
            client: HTTP client whose base URL is the project URL.
            api_key: Anonymous API key of the project.
            clock: Returns the current time; injectable for tests.
        """
        self._client = client
        self._api_key = api_key
        self._clock = clock
        self._session: AuthSession | None = None
        self._listeners: list[AuthListener] = []

    @property
    def access_token(self) -> str | None:
        """Access token of the current session, if any."""
        return self._session.access_token if self._session else None

    def subscribe(self, listener: AuthListener) -> Subscription:
        """Register a listener for session lifecycle events."""
        self._listeners.append(listener)
        return Subscription(self._listeners, listener)

    async def get_session(self) -> AuthSession | None:
        """Return the current session, refreshing it first if it has expired."""
        session = self._session
        if session is None or not session.is_expired(self._clock()):
            return session
        if not session.refresh_token:
            self._set_session(None, AuthEvent.SIGNED_OUT)
            return None

        try:
            return await self.refresh_session()
        except (AuthenticationError, PermissionDeniedError) as e:
            logger.warning("Session refresh rejected, signing out: %s", e)
            self._set_session(None, AuthEvent.SIGNED_OUT)
            return None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        payload = await self._token("password", {"email": email, "password": password})
        session = self._parse_session(payload)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def refresh_session(self) -> AuthSession:
        """Exchange the refresh token for a new session.

        Raises:
            AuthenticationError: If there is no session or the refresh token
                is rejected.
        """
        if self._session is None or not self._session.refresh_token:
            raise AuthenticationError("There is no session to refresh.")

        payload = await self._token(
            "refresh_token", {"refresh_token": self._session.refresh_token}
        )
        session = self._parse_session(payload)
        self._set_session(session, AuthEvent.TOKEN_REFRESHED)
        return session

    async def sign_out(self) -> None:
        """Revoke the current session and forget it locally."""
        session = self._session
        if session is None:
            return

        try:
            with transport_errors():
                response = await self._client.post(
                    f"{AUTH_PREFIX}/logout",
                    headers=self._headers(session.access_token),
                )
            # An already invalid token means the session is gone anyway.
            if response.status_code not in (401, 403, 404):
                raise_for_status(response)
        finally:
            self._set_session(None, AuthEvent.SIGNED_OUT)

    async def _token(self, grant_type: str, body: dict[str, Any]) -> dict[str, Any]:
        with transport_errors():
            response = await self._client.post(
                f"{AUTH_PREFIX}/token",
                params={"grant_type": grant_type},
                json=body,
                headers=self._headers(),
            )
        if response.status_code in (400, 401, 422):
            payload = error_payload(response)
            message = (
                payload.get("error_description")
                or payload.get("msg")
                or payload.get("message")
                or AuthenticationError.default_message
            )
            code = payload.get("error") or payload.get("error_code")
            raise AuthenticationError(message, code=code)
        if not response.is_success:
            raise error_from_response(response)
        result: dict[str, Any] = response.json()
        return result

    def _parse_session(self, payload: dict[str, Any]) -> AuthSession:
        if "expires_at" in payload:
            expires_at = datetime.fromtimestamp(int(payload["expires_at"]), tz=timezone.utc)
        else:
            expires_at = self._clock() + timedelta(seconds=int(payload.get("expires_in", 3600)))

        return AuthSession(
            identity=Identity.from_user(payload["user"]),
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_at=expires_at,
        )

    def _set_session(self, session: AuthSession | None, event: AuthEvent) -> None:
        self._session = session
        change = AuthChange(event=event, session=session)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Auth listener failed for %s", event.value)

    def _headers(self, token: str | None = None) -> dict[str, str]:
        return {"apikey": self._api_key, "Authorization": f"Bearer {token or self._api_key}"}
