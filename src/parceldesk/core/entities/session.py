"""Session and authorization entities.

Identity is who the auth service says is signed in; Profile is the
authorization record (role, active flag) kept in the ``profiles`` table.
SessionState is an immutable snapshot of what the SessionManager knows.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Role(Enum):
    """User role, declared from most to least privileged."""

    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: "Role | str") -> "Role":
        """Parse a role from its string value (case-insensitive)."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            raise ValueError(f"Unknown role: {value!r}") from e


def role_values(roles: Iterable["Role | str"]) -> frozenset[Role]:
    """Normalise a collection of roles or role names to a set of Role."""
    return frozenset(Role.parse(role) for role in roles)


@dataclass(frozen=True)
class Identity:
    """The authenticated principal as reported by the auth service."""

    id: str
    email: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_user(cls, user: dict[str, Any]) -> "Identity":
        """Build an identity from an auth service user payload."""
        return cls(
            id=str(user["id"]),
            email=user.get("email"),
            metadata=dict(user.get("user_metadata") or {}),
        )


@dataclass(frozen=True)
class Profile:
    """Authorization-relevant user record."""

    id: str
    email: str
    role: Role
    active: bool = True
    display_name: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        """Build a profile from a ``profiles`` table row."""
        return cls(
            id=str(row["id"]),
            email=row.get("email") or "",
            role=Role.parse(row["role"]),
            active=bool(row.get("is_active", True)),
            display_name=row.get("full_name"),
        )


@dataclass(frozen=True)
class AuthSession:
    """A session issued by the auth service."""

    identity: Identity
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = now if now is not None else datetime.now(timezone.utc)
        return current >= self.expires_at


class AuthEvent(Enum):
    """Session lifecycle events pushed by the auth service."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class AuthChange:
    """One auth event together with the session it carries (if any)."""

    event: AuthEvent
    session: AuthSession | None = None


class SessionPhase(Enum):
    """Whether the initial session probe has completed."""

    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session state machine.

    Once the phase is READY, an absent identity implies an absent profile.
    """

    phase: SessionPhase = SessionPhase.LOADING
    identity: Identity | None = None
    profile: Profile | None = None
    auth_session: AuthSession | None = None
    demo: bool = False

    @property
    def is_loading(self) -> bool:
        """Whether the initial session probe is still running."""
        return self.phase is SessionPhase.LOADING

    @property
    def is_authenticated(self) -> bool:
        """Whether the probe finished and someone is signed in."""
        return self.phase is SessionPhase.READY and self.identity is not None

    def has_role(self, roles: Iterable[Role | str]) -> bool:
        """True iff a profile is present and its role is one of ``roles``."""
        if self.profile is None:
            return False
        return self.profile.role in role_values(roles)

    @classmethod
    def signed_out(cls) -> "SessionState":
        """The READY state with no identity and no profile."""
        return cls(phase=SessionPhase.READY)
