"""Role-based access control for rate publishing. No FastAPI."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rateboard.security.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidActorError,
)


class Role(Enum):
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    ANALYST = "ANALYST"
    PUBLIC = "PUBLIC"


class Capability(str, Enum):
    READ_RATES = "read_rates"
    VIEW_ADMIN_RATES = "view_admin_rates"
    WRITE_RATES = "write_rates"
    MANAGE_CURRENCIES = "manage_currencies"
    VIEW_ACTIVITY = "view_activity"
    MANAGE_ACTIVITY = "manage_activity"


# Capability matrix:
# Role      Read  AdminRead  Write  Manage  ViewLog  ManageLog
# ADMIN     ✓     ✓          ✓      ✓       ✓        ✓
# EDITOR    ✓     ✓          ✓      ✗       ✗        ✗
# ANALYST   ✓     ✓          ✗      ✗       ✓        ✗
# PUBLIC    ✓     ✗          ✗      ✗       ✗        ✗

_ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.EDITOR: frozenset(
        {Capability.READ_RATES, Capability.VIEW_ADMIN_RATES, Capability.WRITE_RATES}
    ),
    Role.ANALYST: frozenset(
        {Capability.READ_RATES, Capability.VIEW_ADMIN_RATES, Capability.VIEW_ACTIVITY}
    ),
    Role.PUBLIC: frozenset({Capability.READ_RATES}),
}


@dataclass(frozen=True)
class Actor:
    """Caller identity as asserted by the upstream gateway. actor_id None means anonymous."""

    actor_id: Optional[str] = None
    role: Role = Role.PUBLIC

    @property
    def is_anonymous(self) -> bool:
        return self.actor_id is None

    @classmethod
    def from_headers(cls, actor_id: Optional[str], role: Optional[str]) -> "Actor":
        """Build from raw header values. Raises InvalidActorError on an unknown role."""
        actor_id = actor_id.strip() if actor_id and actor_id.strip() else None
        if not role or not role.strip():
            return cls(actor_id=actor_id, role=Role.PUBLIC)
        try:
            parsed = Role(role.strip().upper())
        except ValueError as e:
            raise InvalidActorError(f"Unknown role '{role.strip()}'") from e
        return cls(actor_id=actor_id, role=parsed)


ANONYMOUS = Actor()


class RBACService:
    """Check capability for an actor. authorize() answers, check_permission() raises."""

    def authorize(self, actor: Actor, capability: Capability) -> bool:
        if capability != Capability.READ_RATES and actor.is_anonymous:
            return False
        return capability in _ROLE_CAPABILITIES.get(actor.role, frozenset())

    def check_permission(self, actor: Actor, capability: Capability) -> None:
        """Raises AuthenticationError for anonymous actors, AuthorizationError otherwise."""
        if self.authorize(actor, capability):
            return
        if actor.is_anonymous:
            raise AuthenticationError(
                f"Authentication required for '{capability.value}'"
            )
        raise AuthorizationError(
            f"Role {actor.role.value} does not have permission for '{capability.value}'"
        )
