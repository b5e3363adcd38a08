"""Governance-layer exceptions. Typed, no HTTP."""


class GovernanceError(Exception):
    """Base for all governance-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuditFailureError(GovernanceError):
    """Raised by an activity repository when an entry cannot be stored. Never leaves AuditLogger."""
