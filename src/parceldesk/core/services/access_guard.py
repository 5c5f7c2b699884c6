"""Authorization gate consumed by every protected page."""

import logging
from collections.abc import Callable, Iterable

from parceldesk.core.entities.access import AccessDecision
from parceldesk.core.entities.session import Role, SessionState, role_values
from parceldesk.core.services.session_manager import SessionManager

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"


def evaluate_access(
    state: SessionState,
    required_roles: Iterable[Role | str] = (),
) -> AccessDecision:
    """Decide what a protected page should do for the given session state.

    Args:
        state: Current session snapshot.
        required_roles: Roles allowed to see the page. Empty means any
            active profile.

    Returns:
        The access decision.
    """
    if state.is_loading:
        return AccessDecision.PENDING
    if state.identity is None:
        return AccessDecision.LOGIN_REQUIRED
    if state.profile is None:
        return AccessDecision.PROFILE_PENDING
    if not state.profile.active:
        return AccessDecision.INACTIVE

    roles = role_values(required_roles)
    if roles and state.profile.role not in roles:
        return AccessDecision.FORBIDDEN
    return AccessDecision.GRANTED


class AccessGuard:
    """Re-evaluates access on every session change and redirects when needed.

    ``navigate`` is called with the redirect target the first time a
    redirect decision is reached, and again only after the decision has
    changed in between; nothing is navigated while the session is loading.
    """

    def __init__(
        self,
        session: SessionManager,
        navigate: Callable[[str], None],
        required_roles: Iterable[Role | str] = (),
        redirect_to: str = LOGIN_PATH,
        unauthorized_to: str = UNAUTHORIZED_PATH,
    ) -> None:
        self._session = session
        self._navigate = navigate
        self._required_roles = role_values(required_roles)
        self._redirect_to = redirect_to
        self._unauthorized_to = unauthorized_to
        self._decision = AccessDecision.PENDING
        self._unsubscribe: Callable[[], None] | None = session.subscribe(self._on_state)
        self._on_state(session.state)

    @property
    def decision(self) -> AccessDecision:
        """The decision for the latest session state."""
        return self._decision

    @property
    def granted(self) -> bool:
        """Whether the protected content may be shown."""
        return self._decision is AccessDecision.GRANTED

    def close(self) -> None:
        """Stop following session changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_state(self, state: SessionState) -> None:
        decision = evaluate_access(state, self._required_roles)
        if decision is self._decision:
            return

        self._decision = decision
        target = decision.redirect_target(self._redirect_to, self._unauthorized_to)
        if target is not None:
            logger.debug("Access %s, redirecting to %s", decision.value, target)
            self._navigate(target)
