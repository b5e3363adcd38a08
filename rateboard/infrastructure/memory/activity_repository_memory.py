"""In-process activity repository. Implements ActivityRepository."""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from rateboard.domain.models.activity import (
    ActionStats,
    ActivityAction,
    ActivityFilter,
    ActivityLogEntry,
    ActivityStatus,
)


class InMemoryActivityRepository:
    """Append-only list of immutable entries."""

    def __init__(self) -> None:
        self._entries: List[ActivityLogEntry] = []

    async def save(self, entry: ActivityLogEntry) -> None:
        self._entries.append(entry)

    async def list(self, filters: ActivityFilter, limit: int = 100) -> List[ActivityLogEntry]:
        matching = [e for e in self._entries if filters.matches(e)]
        matching.sort(key=lambda e: e.created_at, reverse=True)
        return matching[:limit]

    async def stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActionStats]:
        window = ActivityFilter(start=start, end=end)
        counts: Dict[ActivityAction, Dict[ActivityStatus, int]] = defaultdict(dict)
        for entry in self._entries:
            if not window.matches(entry):
                continue
            by_status = counts[entry.action]
            by_status[entry.status] = by_status.get(entry.status, 0) + 1
        result = [
            ActionStats(action=action, total=sum(by_status.values()), by_status=by_status)
            for action, by_status in counts.items()
        ]
        result.sort(key=lambda s: s.total, reverse=True)
        return result

    async def purge_before(self, cutoff: datetime) -> int:
        kept = [e for e in self._entries if e.created_at >= cutoff]
        deleted = len(self._entries) - len(kept)
        self._entries = kept
        return deleted
