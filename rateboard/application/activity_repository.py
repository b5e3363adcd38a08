"""Activity repository protocol. Governance and application layers depend on this."""

from datetime import datetime
from typing import List, Optional, Protocol

from rateboard.domain.models.activity import ActionStats, ActivityFilter, ActivityLogEntry


class ActivityRepository(Protocol):
    """Append-only store for activity entries with reverse-chronological reads."""

    async def save(self, entry: ActivityLogEntry) -> None:
        """Persist an immutable entry."""
        ...

    async def list(self, filters: ActivityFilter, limit: int = 100) -> List[ActivityLogEntry]:
        """Entries matching filters, newest first."""
        ...

    async def stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActionStats]:
        """Counts per action and outcome, most frequent action first."""
        ...

    async def purge_before(self, cutoff: datetime) -> int:
        """Delete entries created before cutoff. Returns the number deleted."""
        ...
