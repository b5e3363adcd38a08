"""Pydantic schemas for activity log reads."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from rateboard.domain.models.activity import (
    ActionStats,
    ActivityAction,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
)


class ActivityLogView(BaseModel):
    entry_id: str
    actor: str
    action: ActivityAction
    description: str
    resource: ActivityResource
    status: ActivityStatus
    details: Dict[str, Any]
    error_message: Optional[str] = None
    correlation_id: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: ActivityLogEntry) -> "ActivityLogView":
        return cls(
            entry_id=entry.entry_id,
            actor=entry.actor,
            action=entry.action,
            description=entry.description,
            resource=entry.resource,
            status=entry.status,
            details=entry.details,
            error_message=entry.error_message,
            correlation_id=entry.correlation_id,
            created_at=entry.created_at,
        )


class ActivityLogsResponse(BaseModel):
    logs: List[ActivityLogView]


class ActionStatsView(BaseModel):
    action: ActivityAction
    total: int
    by_status: Dict[ActivityStatus, int]

    @classmethod
    def from_stats(cls, stats: ActionStats) -> "ActionStatsView":
        return cls(action=stats.action, total=stats.total, by_status=stats.by_status)


class ActivityStatsResponse(BaseModel):
    stats: List[ActionStatsView]


class PurgeResponse(BaseModel):
    deleted: int
    cutoff: datetime
