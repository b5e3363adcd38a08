"""DB-backed activity repository. Persists entries to PostgreSQL (activity_logs table)."""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rateboard.domain.models.activity import (
    ActionStats,
    ActivityAction,
    ActivityFilter,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
)
from rateboard.governance.exceptions import AuditFailureError
from rateboard.infrastructure.database.models import ActivityLogRecord


def _to_domain(row: ActivityLogRecord) -> ActivityLogEntry:
    logged_at = row.logged_at
    if logged_at.tzinfo is None:
        logged_at = logged_at.replace(tzinfo=timezone.utc)
    return ActivityLogEntry(
        entry_id=row.entry_id,
        actor=row.actor,
        action=ActivityAction(row.action),
        resource=ActivityResource(row.resource),
        status=ActivityStatus(row.status),
        created_at=logged_at,
        details=row.details or {},
        error_message=row.error_message,
        correlation_id=row.correlation_id,
    )


def _window(stmt, start: Optional[datetime], end: Optional[datetime]):
    if start is not None:
        stmt = stmt.where(ActivityLogRecord.logged_at >= start)
    if end is not None:
        stmt = stmt.where(ActivityLogRecord.logged_at <= end)
    return stmt


class DbActivityRepository:
    """Implements ActivityRepository on SQLAlchemy async."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, entry: ActivityLogEntry) -> None:
        """Insert one entry. Raises AuditFailureError if the database rejects it."""
        row = ActivityLogRecord(
            entry_id=entry.entry_id,
            actor=entry.actor,
            action=entry.action.value,
            resource=entry.resource.value,
            status=entry.status.value,
            details=entry.details,
            error_message=entry.error_message,
            correlation_id=entry.correlation_id,
            logged_at=entry.created_at,
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(row)
        except SQLAlchemyError as e:
            raise AuditFailureError(f"Could not store activity entry: {e}") from e

    async def list(self, filters: ActivityFilter, limit: int = 100) -> List[ActivityLogEntry]:
        stmt = select(ActivityLogRecord)
        if filters.actor is not None:
            stmt = stmt.where(ActivityLogRecord.actor == filters.actor)
        if filters.action is not None:
            stmt = stmt.where(ActivityLogRecord.action == filters.action.value)
        if filters.resource is not None:
            stmt = stmt.where(ActivityLogRecord.resource == filters.resource.value)
        if filters.status is not None:
            stmt = stmt.where(ActivityLogRecord.status == filters.status.value)
        stmt = _window(stmt, filters.start, filters.end)
        stmt = stmt.order_by(ActivityLogRecord.logged_at.desc()).limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_domain(row) for row in result.scalars().all()]

    async def stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActionStats]:
        stmt = select(
            ActivityLogRecord.action,
            ActivityLogRecord.status,
            func.count().label("count"),
        ).group_by(ActivityLogRecord.action, ActivityLogRecord.status)
        stmt = _window(stmt, start, end)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()

        counts: Dict[ActivityAction, Dict[ActivityStatus, int]] = defaultdict(dict)
        for action, status, count in rows:
            counts[ActivityAction(action)][ActivityStatus(status)] = int(count)
        result = [
            ActionStats(action=action, total=sum(by_status.values()), by_status=by_status)
            for action, by_status in counts.items()
        ]
        result.sort(key=lambda s: s.total, reverse=True)
        return result

    async def purge_before(self, cutoff: datetime) -> int:
        stmt = delete(ActivityLogRecord).where(ActivityLogRecord.logged_at < cutoff)
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            return result.rowcount or 0
