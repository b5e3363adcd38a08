"""Security: actor identity and role-based access control. No FastAPI."""

from rateboard.security.rbac import ANONYMOUS, Actor, Capability, RBACService, Role

__all__ = [
    "ANONYMOUS",
    "Actor",
    "Capability",
    "RBACService",
    "Role",
]
