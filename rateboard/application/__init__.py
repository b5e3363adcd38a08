# Application layer: services that orchestrate domain and infrastructure.

from rateboard.application.activity_repository import ActivityRepository
from rateboard.application.activity_service import ActivityService
from rateboard.application.broadcaster import (
    ADMIN_RATE_CHANGED_EVENT,
    RATE_CHANGED_EVENT,
    RateBroadcaster,
    RatesAnnouncer,
    RatesCache,
)
from rateboard.application.exceptions import (
    ApplicationError,
    PersistenceFailureError,
    PersistenceTimeoutError,
)
from rateboard.application.rate_service import RateService, rates_payload
from rateboard.application.rate_store import RateStore

__all__ = [
    "ADMIN_RATE_CHANGED_EVENT",
    "RATE_CHANGED_EVENT",
    "ActivityRepository",
    "ActivityService",
    "ApplicationError",
    "PersistenceFailureError",
    "PersistenceTimeoutError",
    "RateBroadcaster",
    "RateService",
    "RateStore",
    "RatesAnnouncer",
    "RatesCache",
    "rates_payload",
]
