"""Broadcast and downstream-announcement protocols used by the rate service."""

from typing import Any, Dict, Optional, Protocol

RATE_CHANGED_EVENT = "rateChanged"
ADMIN_RATE_CHANGED_EVENT = "adminRateChanged"


class RateBroadcaster(Protocol):
    """Fire-and-forget fan-out to every connected subscriber."""

    async def publish(
        self,
        event: str,
        payload: Dict[str, Any],
        admin_payload: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Send payload to all subscribers and admin_payload to admin subscribers. Returns deliveries."""
        ...


class RatesAnnouncer(Protocol):
    """Downstream notification (e.g. social-media message generation). Best-effort."""

    async def publish(
        self,
        exchange_name: str,
        routing_key: str,
        message: dict,
        message_id: str,
    ) -> None:
        ...


class RatesCache(Protocol):
    async def get_public_rates(self) -> Optional[Dict[str, Any]]:
        ...

    async def set_public_rates(self, rates: Dict[str, Any]) -> None:
        ...

    async def invalidate(self) -> None:
        ...
