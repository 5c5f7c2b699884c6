"""Auth service interface."""

from collections.abc import Callable
from typing import Protocol

from parceldesk.core.entities.session import AuthChange, AuthSession

AuthListener = Callable[[AuthChange], None]


class ISubscription(Protocol):
    """Handle returned by ``IAuthService.subscribe``."""

    def unsubscribe(self) -> None:
        """Stop delivering events to the listener."""
        ...


class IAuthService(Protocol):
    """Contract for the external authentication service.

    Listeners are called synchronously, one event at a time, in the order
    the service delivers them.
    """

    async def get_session(self) -> AuthSession | None:
        """Return the current session, or None if nobody is signed in."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Sign in with credentials.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        ...

    async def sign_out(self) -> None:
        """End the current session."""
        ...

    def subscribe(self, listener: AuthListener) -> ISubscription:
        """Register a listener for session lifecycle events."""
        ...
