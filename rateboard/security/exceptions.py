"""Security-layer exceptions. Typed, no HTTP."""


class SecurityError(Exception):
    """Base for all security-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthenticationError(SecurityError):
    """Raised when a guarded action is attempted by an anonymous actor."""


class AuthorizationError(SecurityError):
    """Raised when role does not have the capability for the action."""


class InvalidActorError(SecurityError):
    """Raised when the actor headers cannot be parsed (e.g. unknown role)."""
