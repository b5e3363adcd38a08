"""Best-effort activity audit logging. No FastAPI."""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from rateboard.application.activity_repository import ActivityRepository
from rateboard.core.context import correlation_id_ctx
from rateboard.domain.models.activity import (
    ANONYMOUS_ACTOR,
    ActivityAction,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
)

FALLBACK_LOGGER_NAME = "rateboard.audit.fallback"


class AuditLogger:
    """
    Writes immutable activity entries via repository.
    Never raises to its caller: a failed write goes to the fallback logger with the full entry.
    dispatch() schedules the write as a background task so the caller never waits on it.
    """

    def __init__(
        self,
        repository: ActivityRepository,
        fallback_logger: Optional[logging.Logger] = None,
    ) -> None:
        self._repository = repository
        self._fallback = fallback_logger or logging.getLogger(FALLBACK_LOGGER_NAME)
        self._pending: Set[asyncio.Task] = set()

    async def log(self, entry: ActivityLogEntry) -> None:
        """Store entry. Any failure is swallowed and reported to the fallback logger."""
        try:
            await self._repository.save(entry)
        except Exception as e:
            self._fallback.error(
                "audit_write_failed",
                extra={"entry": entry.to_dict(), "error": str(e)},
            )

    async def log_action(
        self,
        *,
        actor: Optional[str],
        action: ActivityAction,
        resource: ActivityResource,
        status: ActivityStatus,
        details: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> ActivityLogEntry:
        """Build and store one entry. Timestamp is UTC."""
        entry = ActivityLogEntry(
            entry_id=str(uuid.uuid4()),
            actor=actor or ANONYMOUS_ACTOR,
            action=action,
            resource=resource,
            status=status,
            created_at=datetime.now(timezone.utc),
            details=details or {},
            error_message=error_message,
            correlation_id=correlation_id or correlation_id_ctx.get(),
        )
        await self.log(entry)
        return entry

    def dispatch(self, **kwargs: Any) -> "asyncio.Task[ActivityLogEntry]":
        """Schedule log_action without awaiting it. Requires a running event loop."""
        kwargs.setdefault("correlation_id", correlation_id_ctx.get())
        task = asyncio.get_running_loop().create_task(self.log_action(**kwargs))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched write (shutdown and tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
