"""Session configuration entity."""

from dataclasses import dataclass

from parceldesk.core.entities.session import Role


@dataclass
class SessionConfig:
    """Session state machine configuration.

    Attributes:
        fallback_role: Role given to the synthetic profile built when the
            real profile cannot be loaded. Defaults to the least privileged
            role so that a backend outage never widens access.
        profile_timeout: Seconds allowed for one profile lookup.
        offline: Skip the auth service entirely (demo/offline mode). The
            session settles unauthenticated until ``demo_login`` is used.
    """

    fallback_role: Role = Role.VIEWER
    profile_timeout: float = 1.5
    offline: bool = False

    def __post_init__(self) -> None:
        """Accept role names as well as Role members."""
        self.fallback_role = Role.parse(self.fallback_role)
        if self.profile_timeout <= 0:
            raise ValueError("profile_timeout must be positive")
