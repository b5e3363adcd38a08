"""Governance: activity audit logging. No FastAPI."""

from rateboard.governance.audit_logger import FALLBACK_LOGGER_NAME, AuditLogger
from rateboard.governance.exceptions import AuditFailureError, GovernanceError

__all__ = [
    "AuditFailureError",
    "AuditLogger",
    "FALLBACK_LOGGER_NAME",
    "GovernanceError",
]
