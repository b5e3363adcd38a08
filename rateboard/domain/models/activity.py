"""Domain model for activity log entries. Append-only; never mutated after creation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

ANONYMOUS_ACTOR = "anonymous"


class ActivityAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    RATE_UPDATE = "rate_update"
    RATE_CREATE = "rate_create"
    RATE_DELETE = "rate_delete"
    RATE_RESTORE = "rate_restore"
    VISIBILITY_TOGGLE = "visibility_toggle"
    SOCIAL_PUBLISH = "social_publish"
    ACTIVITY_PURGE = "activity_purge"


class ActivityResource(str, Enum):
    CURRENCY = "currency"
    USER = "user"
    SOCIAL_MEDIA = "social_media"
    SYSTEM = "system"
    AUTH = "auth"


class ActivityStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


_ACTION_DESCRIPTIONS: Dict[ActivityAction, str] = {
    ActivityAction.LOGIN: "User logged in",
    ActivityAction.LOGOUT: "User logged out",
    ActivityAction.RATE_UPDATE: "Currency rates updated",
    ActivityAction.RATE_CREATE: "New currency created",
    ActivityAction.RATE_DELETE: "Currency deleted",
    ActivityAction.RATE_RESTORE: "Currency restored",
    ActivityAction.VISIBILITY_TOGGLE: "Currency visibility toggled",
    ActivityAction.SOCIAL_PUBLISH: "Published to social media",
    ActivityAction.ACTIVITY_PURGE: "Expired activity logs purged",
}


@dataclass(frozen=True)
class ActivityLogEntry:
    """Who did what to which resource, when, and how it ended."""

    entry_id: str
    actor: str
    action: ActivityAction
    resource: ActivityResource
    status: ActivityStatus
    created_at: datetime
    details: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None
    correlation_id: Optional[str] = None

    @property
    def description(self) -> str:
        return _ACTION_DESCRIPTIONS.get(self.action, self.action.value)

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON logging."""
        return {
            "entry_id": self.entry_id,
            "actor": self.actor,
            "action": self.action.value,
            "description": self.description,
            "resource": self.resource.value,
            "status": self.status.value,
            "details": self.details,
            "error_message": self.error_message,
            "correlation_id": self.correlation_id,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ActivityFilter:
    """Optional filters for activity queries. None means 'any'."""

    actor: Optional[str] = None
    action: Optional[ActivityAction] = None
    resource: Optional[ActivityResource] = None
    status: Optional[ActivityStatus] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def matches(self, entry: ActivityLogEntry) -> bool:
        if self.actor is not None and entry.actor != self.actor:
            return False
        if self.action is not None and entry.action != self.action:
            return False
        if self.resource is not None and entry.resource != self.resource:
            return False
        if self.status is not None and entry.status != self.status:
            return False
        if self.start is not None and entry.created_at < self.start:
            return False
        if self.end is not None and entry.created_at > self.end:
            return False
        return True


@dataclass(frozen=True)
class ActionStats:
    """Count of entries for one action, split by outcome."""

    action: ActivityAction
    total: int
    by_status: Dict[ActivityStatus, int]
