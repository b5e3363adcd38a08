"""Fixtures for API unit tests: in-memory stores, real services, AsyncClient."""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from rateboard.api import dependencies
from rateboard.application.activity_service import ActivityService
from rateboard.application.rate_service import RateService
from rateboard.config.settings import AppSettings
from rateboard.governance.audit_logger import AuditLogger
from rateboard.infrastructure.memory import InMemoryActivityRepository, InMemoryRateStore
from rateboard.infrastructure.realtime.connection_manager import ConnectionManager
from rateboard.infrastructure.seed import seed_default_currencies
from rateboard.main import app


@pytest.fixture
def test_settings():
    return AppSettings(environment="test")


@pytest.fixture
async def rate_store(test_settings):
    store = InMemoryRateStore(history_limit=test_settings.rate_history_limit)
    await seed_default_currencies(store, test_settings)
    return store


@pytest.fixture
def activity_repository():
    return InMemoryActivityRepository()


@pytest.fixture
def audit_logger(activity_repository):
    return AuditLogger(repository=activity_repository)


@pytest.fixture
def connection_manager():
    return ConnectionManager()


@pytest.fixture
def rate_service(rate_store, audit_logger, connection_manager, test_settings):
    return RateService(
        store=rate_store,
        audit_logger=audit_logger,
        broadcaster=connection_manager,
        logger=logging.getLogger("rateboard.rates"),
        allowed_codes=test_settings.allowed_currency_codes,
        currency_names=test_settings.currency_names,
        history_limit=test_settings.rate_history_limit,
    )


@pytest.fixture
def activity_service(activity_repository, audit_logger):
    return ActivityService(
        repository=activity_repository,
        audit_logger=audit_logger,
        logger=logging.getLogger("rateboard.activity"),
    )


@pytest.fixture
def app_with_overrides(rate_service, activity_service, audit_logger, connection_manager):
    """App with every stateful dependency replaced by a per-test instance."""
    app.dependency_overrides[dependencies.get_rate_service] = lambda: rate_service
    app.dependency_overrides[dependencies.get_activity_service] = lambda: activity_service
    app.dependency_overrides[dependencies.get_audit_logger] = lambda: audit_logger
    app.dependency_overrides[dependencies.get_connection_manager] = lambda: connection_manager
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers():
    return {"X-Actor-ID": "admin-1", "X-Actor-Role": "ADMIN"}


@pytest.fixture
def editor_headers():
    return {"X-Actor-ID": "editor-1", "X-Actor-Role": "EDITOR"}


@pytest.fixture
def analyst_headers():
    return {"X-Actor-ID": "analyst-1", "X-Actor-Role": "ANALYST"}
