"""FastAPI dependency injection: stores, audit, broadcaster, services, actor and capability guards."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from rateboard.application.activity_repository import ActivityRepository
from rateboard.application.activity_service import ActivityService
from rateboard.application.broadcaster import RatesAnnouncer, RatesCache
from rateboard.application.rate_service import RateService
from rateboard.application.rate_store import RateStore
from rateboard.config.settings import get_settings
from rateboard.domain.models.activity import ActivityAction, ActivityResource, ActivityStatus
from rateboard.governance.audit_logger import AuditLogger
from rateboard.infrastructure.cache.rates_cache_redis import RedisRatesCache
from rateboard.infrastructure.cache.redis_client import RedisClient
from rateboard.infrastructure.memory import InMemoryActivityRepository, InMemoryRateStore
from rateboard.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher
from rateboard.infrastructure.realtime.connection_manager import ConnectionManager
from rateboard.security.exceptions import SecurityError
from rateboard.security.rbac import ANONYMOUS, Actor, Capability, RBACService

_rate_store: Optional[RateStore] = None
_activity_repository: Optional[ActivityRepository] = None
_audit_logger: Optional[AuditLogger] = None
_connection_manager: Optional[ConnectionManager] = None
_redis_client: Optional[RedisClient] = None
_publisher: Optional[RabbitMQPublisher] = None
_rate_service: Optional[RateService] = None
_activity_service: Optional[ActivityService] = None
_rbac = RBACService()


def get_rate_store() -> RateStore:
    """Return singleton rate store: SQLAlchemy when database_url is set, in-memory otherwise."""
    global _rate_store
    if _rate_store is None:
        settings = get_settings()
        if settings.database_url:
            from rateboard.infrastructure.database.rate_store_db import DbRateStore
            from rateboard.infrastructure.database.session import get_sessionmaker

            _rate_store = DbRateStore(
                get_sessionmaker(), history_limit=settings.rate_history_limit
            )
        else:
            _rate_store = InMemoryRateStore(history_limit=settings.rate_history_limit)
    return _rate_store


def get_activity_repository() -> ActivityRepository:
    """Return singleton activity repository, same backend selection as the rate store."""
    global _activity_repository
    if _activity_repository is None:
        if get_settings().database_url:
            from rateboard.infrastructure.database.activity_repository_db import (
                DbActivityRepository,
            )
            from rateboard.infrastructure.database.session import get_sessionmaker

            _activity_repository = DbActivityRepository(get_sessionmaker())
        else:
            _activity_repository = InMemoryActivityRepository()
    return _activity_repository


def get_audit_logger() -> AuditLogger:
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger(repository=get_activity_repository())
    return _audit_logger


def get_connection_manager() -> ConnectionManager:
    """Return singleton WebSocket connection manager."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager(
            send_timeout=get_settings().broadcast_send_timeout_seconds
        )
    return _connection_manager


def get_redis_client() -> Optional[RedisClient]:
    """Return singleton Redis client, or None when Redis is not configured."""
    global _redis_client
    settings = get_settings()
    if _redis_client is None and settings.redis_url:
        _redis_client = RedisClient(settings.redis_url)
    return _redis_client


def get_rates_cache() -> Optional[RatesCache]:
    redis = get_redis_client()
    if redis is None:
        return None
    return RedisRatesCache(redis, ttl=get_settings().rates_cache_ttl)


def get_publisher() -> Optional[RatesAnnouncer]:
    """Return singleton RabbitMQ publisher, or None when RabbitMQ is not configured."""
    global _publisher
    settings = get_settings()
    if _publisher is None and settings.rabbitmq_url:
        _publisher = RabbitMQPublisher(settings.rabbitmq_url)
    return _publisher


def get_rate_service() -> RateService:
    """
    Return singleton RateService. One instance per process so that every commit goes
    through the same commit lock and broadcasts leave in commit order.
    """
    global _rate_service
    if _rate_service is None:
        settings = get_settings()
        _rate_service = RateService(
            store=get_rate_store(),
            audit_logger=get_audit_logger(),
            broadcaster=get_connection_manager(),
            logger=logging.getLogger("rateboard.rates"),
            allowed_codes=settings.allowed_currency_codes,
            currency_names=settings.currency_names,
            history_limit=settings.rate_history_limit,
            persist_timeout=settings.persist_timeout_seconds,
            cache=get_rates_cache(),
            announcer=get_publisher(),
            rates_exchange=settings.rates_exchange,
        )
    return _rate_service


def get_activity_service() -> ActivityService:
    global _activity_service
    if _activity_service is None:
        _activity_service = ActivityService(
            repository=get_activity_repository(),
            audit_logger=get_audit_logger(),
            logger=logging.getLogger("rateboard.activity"),
            retention_days=get_settings().activity_retention_days,
        )
    return _activity_service


def get_rbac() -> RBACService:
    return _rbac


def get_actor(request: Request) -> Actor:
    """Extract the actor from request.state (set by middleware)."""
    return getattr(request.state, "actor", ANONYMOUS)


def enforce_capability(
    actor: Actor,
    capability: Capability,
    rbac: RBACService,
    audit_logger: AuditLogger,
    action: Optional[ActivityAction] = None,
    resource: ActivityResource = ActivityResource.CURRENCY,
) -> Actor:
    """Raise unless actor holds capability. A denied attempt at action is recorded as a failure."""
    try:
        rbac.check_permission(actor, capability)
    except SecurityError as e:
        if action is not None:
            audit_logger.dispatch(
                actor=actor.actor_id,
                action=action,
                resource=resource,
                status=ActivityStatus.FAILURE,
                details={"capability": capability.value, "role": actor.role.value},
                error_message=e.message,
            )
        raise
    return actor


def require_capability(
    capability: Capability,
    action: Optional[ActivityAction] = None,
    resource: ActivityResource = ActivityResource.CURRENCY,
):
    """
    Build a dependency that lets the request through only when the actor holds capability.
    When action is given, a denied attempt is recorded as a failed activity entry.
    """

    async def dependency(
        actor: Annotated[Actor, Depends(get_actor)],
        rbac: Annotated[RBACService, Depends(get_rbac)],
        audit_logger: Annotated[AuditLogger, Depends(get_audit_logger)],
    ) -> Actor:
        return enforce_capability(actor, capability, rbac, audit_logger, action, resource)

    return dependency


async def shutdown_dependencies() -> None:
    """Flush pending audit writes and close external clients."""
    if _audit_logger is not None:
        await _audit_logger.drain()
    if _publisher is not None:
        await _publisher.close()
    if _redis_client is not None:
        await _redis_client.close()
    if get_settings().database_url:
        from rateboard.infrastructure.database.session import dispose_engine

        await dispose_engine()
