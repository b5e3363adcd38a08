"""Activity API router: log query, statistics, retention purge."""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from rateboard.api.dependencies import get_activity_service, require_capability
from rateboard.application.activity_service import ActivityService
from rateboard.domain.models.activity import (
    ActivityAction,
    ActivityFilter,
    ActivityResource,
    ActivityStatus,
)
from rateboard.domain.schemas.activity import (
    ActionStatsView,
    ActivityLogsResponse,
    ActivityLogView,
    ActivityStatsResponse,
    PurgeResponse,
)
from rateboard.security.rbac import Actor, Capability

router = APIRouter()


@router.get("/logs", response_model=ActivityLogsResponse)
async def list_logs(
    actor: Annotated[Actor, Depends(require_capability(Capability.VIEW_ACTIVITY))],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
    user: Optional[str] = None,
    action: Optional[ActivityAction] = None,
    resource: Optional[ActivityResource] = None,
    status: Optional[ActivityStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
):
    """Reverse-chronological activity entries matching every given filter."""
    filters = ActivityFilter(
        actor=user,
        action=action,
        resource=resource,
        status=status,
        start=start_date,
        end=end_date,
    )
    entries = await activity_service.list_logs(filters, limit=limit)
    return ActivityLogsResponse(logs=[ActivityLogView.from_entry(e) for e in entries])


@router.get("/stats", response_model=ActivityStatsResponse)
async def get_stats(
    actor: Annotated[Actor, Depends(require_capability(Capability.VIEW_ACTIVITY))],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
):
    stats = await activity_service.get_stats(start_date, end_date)
    return ActivityStatsResponse(stats=[ActionStatsView.from_stats(s) for s in stats])


@router.delete("/expired", response_model=PurgeResponse)
async def purge_expired(
    actor: Annotated[
        Actor,
        Depends(
            require_capability(
                Capability.MANAGE_ACTIVITY,
                ActivityAction.ACTIVITY_PURGE,
                ActivityResource.SYSTEM,
            )
        ),
    ],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    deleted, cutoff = await activity_service.purge_expired(actor.actor_id)
    return PurgeResponse(deleted=deleted, cutoff=cutoff)
