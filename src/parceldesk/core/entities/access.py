"""Access decision entity."""

from enum import Enum


class AccessDecision(Enum):
    """Outcome of the authorization gate for one page.

    PENDING: the initial session probe is still running.
    LOGIN_REQUIRED: nobody is signed in.
    PROFILE_PENDING: signed in, but the profile has not resolved yet.
    INACTIVE: the profile is deactivated.
    FORBIDDEN: the profile's role is not among the required roles.
    GRANTED: render the protected content.
    """

    PENDING = "pending"
    LOGIN_REQUIRED = "login_required"
    PROFILE_PENDING = "profile_pending"
    INACTIVE = "inactive"
    FORBIDDEN = "forbidden"
    GRANTED = "granted"

    def redirect_target(self, login_path: str, unauthorized_path: str) -> str | None:
        """Where this decision sends the user, or None to stay put."""
        if self is AccessDecision.LOGIN_REQUIRED:
            return login_path
        if self in (AccessDecision.INACTIVE, AccessDecision.FORBIDDEN):
            return unauthorized_path
        return None
