"""WebSocket subscriber registry and fan-out. Implements RateBroadcaster."""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket

from rateboard.application.broadcaster import ADMIN_RATE_CHANGED_EVENT

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Keeps public and admin subscriber sets. The sets change only on connect/disconnect
    and are copied at publish time. Delivery is at-most-once: a subscriber whose send
    fails or does not complete within send_timeout is dropped and must resynchronize
    through the read path, so a stalled reader never holds up the next commit.
    """

    def __init__(self, send_timeout: float = 1.0) -> None:
        self._send_timeout = send_timeout
        self._public: Set[WebSocket] = set()
        self._admin: Set[WebSocket] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._public) + len(self._admin)

    async def connect(self, websocket: WebSocket, *, admin: bool = False) -> None:
        await websocket.accept()
        (self._admin if admin else self._public).add(websocket)
        logger.info(
            "subscriber_connected",
            extra={"admin": admin, "subscribers": self.subscriber_count},
        )

    def disconnect(self, websocket: WebSocket) -> None:
        self._public.discard(websocket)
        self._admin.discard(websocket)
        logger.info("subscriber_disconnected", extra={"subscribers": self.subscriber_count})

    async def publish(
        self,
        event: str,
        payload: Dict[str, Any],
        admin_payload: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Send event to everyone, then the admin variant to admin subscribers. Returns deliveries."""
        public_message = {"event": event, "data": payload}
        admin_message = None
        if admin_payload is not None:
            admin_message = {"event": ADMIN_RATE_CHANGED_EVENT, "data": admin_payload}

        targets = [(ws, public_message) for ws in self._public | self._admin]
        if admin_message is not None:
            targets.extend((ws, admin_message) for ws in set(self._admin))

        results = await asyncio.gather(
            *(self._send(ws, message) for ws, message in targets)
        )
        return sum(results)

    async def _send(self, websocket: WebSocket, message: Dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(websocket.send_json(message), timeout=self._send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(
                "subscriber_send_timeout", extra={"timeout_seconds": self._send_timeout}
            )
            self.disconnect(websocket)
            return False
        except Exception as e:
            logger.warning("subscriber_send_failed", extra={"error": str(e)})
            self.disconnect(websocket)
            return False
