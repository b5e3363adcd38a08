"""Governance tests: activity entry fields, immutability, fallback on store failure."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from rateboard.core.context import correlation_id_ctx
from rateboard.domain.models.activity import (
    ANONYMOUS_ACTOR,
    ActivityAction,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
)
from rateboard.governance.audit_logger import FALLBACK_LOGGER_NAME, AuditLogger


@pytest.fixture
def activity_repository():
    repo = AsyncMock()
    repo.save = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def audit_logger(activity_repository):
    return AuditLogger(repository=activity_repository)


async def test_log_action_builds_complete_entry(audit_logger, activity_repository):
    await audit_logger.log_action(
        actor="editor-1",
        action=ActivityAction.RATE_UPDATE,
        resource=ActivityResource.CURRENCY,
        status=ActivityStatus.SUCCESS,
        details={"updated_currencies": ["USD"]},
        correlation_id="corr-1",
    )
    assert activity_repository.save.await_count == 1
    entry = activity_repository.save.call_args[0][0]
    assert isinstance(entry, ActivityLogEntry)
    assert entry.actor == "editor-1"
    assert entry.action == ActivityAction.RATE_UPDATE
    assert entry.description == "Currency rates updated"
    assert entry.details == {"updated_currencies": ["USD"]}
    assert entry.correlation_id == "corr-1"
    assert entry.created_at.tzinfo is not None
    # Immutability: frozen dataclass
    with pytest.raises(AttributeError):
        entry.actor = "other"  # type: ignore[misc]


async def test_anonymous_actor_recorded(audit_logger, activity_repository):
    entry = await audit_logger.log_action(
        actor=None,
        action=ActivityAction.RATE_UPDATE,
        resource=ActivityResource.CURRENCY,
        status=ActivityStatus.FAILURE,
        error_message="Authentication required",
    )
    assert entry.actor == ANONYMOUS_ACTOR
    assert entry.error_message == "Authentication required"


async def test_store_failure_goes_to_fallback_and_does_not_raise(activity_repository):
    activity_repository.save = AsyncMock(side_effect=RuntimeError("disk full"))
    fallback = MagicMock(spec=logging.Logger)
    audit_logger = AuditLogger(repository=activity_repository, fallback_logger=fallback)

    entry = await audit_logger.log_action(
        actor="editor-1",
        action=ActivityAction.RATE_UPDATE,
        resource=ActivityResource.CURRENCY,
        status=ActivityStatus.SUCCESS,
    )

    fallback.error.assert_called_once()
    message = fallback.error.call_args[0][0]
    extra = fallback.error.call_args.kwargs["extra"]
    assert message == "audit_write_failed"
    assert extra["entry"]["entry_id"] == entry.entry_id
    assert extra["error"] == "disk full"


def test_default_fallback_logger_name(activity_repository):
    audit_logger = AuditLogger(repository=activity_repository)
    assert audit_logger._fallback.name == FALLBACK_LOGGER_NAME


async def test_dispatch_runs_in_background_with_correlation_id(audit_logger, activity_repository):
    token = correlation_id_ctx.set("corr-ctx")
    try:
        task = audit_logger.dispatch(
            actor="admin-1",
            action=ActivityAction.VISIBILITY_TOGGLE,
            resource=ActivityResource.CURRENCY,
            status=ActivityStatus.SUCCESS,
        )
    finally:
        correlation_id_ctx.reset(token)
    await audit_logger.drain()
    assert task.done()
    assert activity_repository.save.call_args[0][0].correlation_id == "corr-ctx"
