"""Activity log reads and retention. Writes go through AuditLogger only."""

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple

from rateboard.application.activity_repository import ActivityRepository
from rateboard.domain.models.activity import (
    ActionStats,
    ActivityAction,
    ActivityFilter,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
)

if TYPE_CHECKING:
    from rateboard.governance.audit_logger import AuditLogger

DEFAULT_LOG_LIMIT = 100
MAX_LOG_LIMIT = 1000


class ActivityService:
    def __init__(
        self,
        repository: ActivityRepository,
        audit_logger: "AuditLogger",
        logger: logging.Logger,
        *,
        retention_days: int = 90,
    ) -> None:
        self._repository = repository
        self._audit = audit_logger
        self._logger = logger
        self._retention = timedelta(days=retention_days)

    async def list_logs(
        self,
        filters: Optional[ActivityFilter] = None,
        limit: int = DEFAULT_LOG_LIMIT,
    ) -> List[ActivityLogEntry]:
        """Newest first; limit is clamped to [1, MAX_LOG_LIMIT]."""
        limit = min(max(1, limit), MAX_LOG_LIMIT)
        return await self._repository.list(filters or ActivityFilter(), limit)

    async def get_stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActionStats]:
        return await self._repository.stats(start, end)

    async def purge_expired(
        self,
        actor: Optional[str],
        now: Optional[datetime] = None,
    ) -> Tuple[int, datetime]:
        """Delete entries older than the retention window. Returns (deleted, cutoff)."""
        cutoff = (now or datetime.now(timezone.utc)) - self._retention
        deleted = await self._repository.purge_before(cutoff)
        self._logger.info(
            "activity_purged",
            extra={"deleted": deleted, "cutoff": cutoff.isoformat()},
        )
        self._audit.dispatch(
            actor=actor,
            action=ActivityAction.ACTIVITY_PURGE,
            resource=ActivityResource.SYSTEM,
            status=ActivityStatus.SUCCESS,
            details={"deleted": deleted, "cutoff": cutoff.isoformat()},
        )
        return deleted, cutoff
