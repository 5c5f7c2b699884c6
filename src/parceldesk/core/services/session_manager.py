"""Session/authorization state machine.

States:
    LOADING                         initial probe in flight
    READY (no identity)             unauthenticated
    READY (identity, no profile)    signed in, profile still resolving
    READY (identity, profile)       authenticated

The manager subscribes to the auth service once, on ``start``. The
initial probe and every auth event are queued as messages and applied by
a single consumer task, so transitions happen one at a time and in
delivery order.
"""

import asyncio
import contextlib
import dataclasses
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from types import TracebackType

from parceldesk.core.entities.session import (
    AuthChange,
    AuthEvent,
    AuthSession,
    Identity,
    Profile,
    Role,
    SessionPhase,
    SessionState,
)
from parceldesk.core.entities.session_config import SessionConfig
from parceldesk.core.errors import AuthenticationError
from parceldesk.core.interfaces.auth_service import IAuthService, ISubscription
from parceldesk.core.services.profile_loader import ProfileLoader

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]

DEMO_USER_ID = "demo-user-id"
DEMO_EMAIL = "demo@example.com"

_PROBE = object()


class SessionManager:
    """Holds the current identity, profile and loading phase.

    One instance per application. Construct it with the auth service and
    profile loader it should use, ``await start()`` it, then read
    ``state`` or ``subscribe`` to changes. After ``close()`` no further
    state change is applied, so a slow in-flight lookup cannot overwrite
    the state seen by whatever replaced this instance.

    Example:
        async with SessionManager(auth, ProfileLoader(store)) as session:
            await session.wait_ready()
            if session.has_role(["admin", "editor"]):
                ...
    """

    def __init__(
        self,
        auth: IAuthService,
        profiles: ProfileLoader,
        config: SessionConfig | None = None,
    ) -> None:
        self._auth = auth
        self._profiles = profiles
        self._config = config or SessionConfig()

        self._state = SessionState()
        self._listeners: list[StateListener] = []
        self._ready = asyncio.Event()
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._subscription: ISubscription | None = None
        self._started = False
        self._alive = True
        # Bumped by local transitions so that lookups started earlier are dropped.
        self._epoch = 0

    @property
    def state(self) -> SessionState:
        """The current state snapshot."""
        return self._state

    @property
    def config(self) -> SessionConfig:
        """The session configuration."""
        return self._config

    @property
    def is_loading(self) -> bool:
        """Whether the initial session probe is still running."""
        return self._state.is_loading

    @property
    def identity(self) -> Identity | None:
        """The signed-in identity, if any."""
        return self._state.identity

    @property
    def profile(self) -> Profile | None:
        """The resolved profile, if any."""
        return self._state.profile

    def has_role(self, roles: Iterable[Role | str]) -> bool:
        """True iff a profile is present and its role is in ``roles``."""
        return self._state.has_role(roles)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Lifecycle

    async def start(self) -> None:
        """Probe for an existing session and listen for auth events."""
        if self._started:
            return
        self._started = True

        if self._config.offline:
            logger.debug("Offline mode: skipping session probe")
            self._apply(SessionState.signed_out())
            return

        self._queue.put_nowait(_PROBE)
        self._subscription = self._auth.subscribe(self._on_auth_change)
        self._worker = asyncio.create_task(self._run())

    async def wait_ready(self, timeout: float | None = None) -> SessionState:
        """Wait until the initial probe has completed."""
        await asyncio.wait_for(self._ready.wait(), timeout)
        return self._state

    async def settle(self) -> SessionState:
        """Wait until every queued probe and auth event has been applied."""
        if self._worker is not None and not self._worker.done():
            await self._queue.join()
        return self._state

    async def close(self) -> None:
        """Stop listening; later results are no longer applied."""
        self._alive = False
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
        self._listeners.clear()

    async def __aenter__(self) -> "SessionManager":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # Commands

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with credentials.

        The state changes when the auth service reports SIGNED_IN; await
        ``settle()`` to observe the resolved profile.

        Raises:
            AuthenticationError: If the credentials are rejected, or in
                offline mode.
        """
        if self._config.offline:
            raise AuthenticationError("Sign-in is unavailable offline; use demo login.")
        return await self._auth.sign_in_with_password(email, password)

    async def sign_out(self) -> None:
        """End the session. Local state is reset even if the remote call fails."""
        self._epoch += 1
        remote = not (self._config.offline or self._state.demo)
        try:
            if remote:
                await self._auth.sign_out()
        finally:
            self._apply(SessionState.signed_out())

    async def demo_login(self) -> SessionState:
        """Sign in a synthetic admin without contacting the auth service.

        Meant for an unreachable or unconfigured backend only.
        """
        self._epoch += 1
        identity = Identity(id=DEMO_USER_ID, email=DEMO_EMAIL, metadata={"full_name": "Demo User"})
        profile = Profile(
            id=DEMO_USER_ID,
            email=DEMO_EMAIL,
            role=Role.ADMIN,
            active=True,
            display_name="Demo User",
        )
        session = AuthSession(
            identity=identity,
            access_token="demo-token",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        self._apply(
            SessionState(
                phase=SessionPhase.READY,
                identity=identity,
                profile=profile,
                auth_session=session,
                demo=True,
            )
        )
        return self._state

    async def refresh_profile(self) -> Profile | None:
        """Forget the remembered profile of the current identity and reload it."""
        state = self._state
        if state.identity is None or state.demo:
            return state.profile

        epoch = self._epoch
        self._profiles.forget(state.identity.id)
        profile = await self._profiles.resolve(state.identity)
        if epoch == self._epoch and self._state.identity == state.identity:
            self._apply(dataclasses.replace(self._state, profile=profile))
        return self._state.profile

    # Transitions

    def _on_auth_change(self, change: AuthChange) -> None:
        if self._alive:
            logger.debug("Auth event received: %s", change.event.value)
            self._queue.put_nowait(change)

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                if message is _PROBE:
                    await self._probe()
                elif isinstance(message, AuthChange):
                    await self._handle(message)
            finally:
                self._queue.task_done()

    async def _probe(self) -> None:
        epoch = self._epoch
        try:
            session = await self._auth.get_session()
        except Exception as e:
            logger.warning("Session probe failed, continuing signed out: %s", e)
            self._apply_if_current(epoch, SessionState.signed_out())
            return

        if session is None:
            self._apply_if_current(epoch, SessionState.signed_out())
            return

        profile = await self._profiles.resolve(session.identity)
        self._apply_if_current(
            epoch,
            SessionState(
                phase=SessionPhase.READY,
                identity=session.identity,
                profile=profile,
                auth_session=session,
            ),
        )

    async def _handle(self, change: AuthChange) -> None:
        if change.event is AuthEvent.SIGNED_OUT or change.session is None:
            self._apply(SessionState.signed_out())
            return

        epoch = self._epoch
        session = change.session
        identity = session.identity
        current = self._state
        same_user = current.identity is not None and current.identity.id == identity.id

        self._apply(
            SessionState(
                phase=SessionPhase.READY,
                identity=identity,
                profile=current.profile if same_user else None,
                auth_session=session,
            )
        )

        profile = await self._profiles.resolve(identity)
        self._apply_if_current(
            epoch,
            SessionState(
                phase=SessionPhase.READY,
                identity=identity,
                profile=profile,
                auth_session=session,
            ),
        )

    def _apply_if_current(self, epoch: int, state: SessionState) -> None:
        if epoch != self._epoch:
            logger.debug("Dropping stale session update")
            return
        self._apply(state)

    def _apply(self, state: SessionState) -> None:
        if not self._alive or state == self._state:
            return

        self._state = state
        if state.phase is SessionPhase.READY:
            self._ready.set()
        logger.debug(
            "Session state: phase=%s identity=%s role=%s",
            state.phase.value,
            state.identity.id if state.identity else None,
            state.profile.role.value if state.profile else None,
        )

        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed")

