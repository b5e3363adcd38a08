"""Real-time router: WebSocket subscription to committed rate changes."""

from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from rateboard.api.dependencies import get_connection_manager, get_rbac
from rateboard.api.middleware import ACTOR_ID_HEADER, ACTOR_ROLE_HEADER
from rateboard.infrastructure.realtime.connection_manager import ConnectionManager
from rateboard.security.exceptions import InvalidActorError
from rateboard.security.rbac import Actor, Capability, RBACService

router = APIRouter()


def _actor_from_websocket(websocket: WebSocket) -> Actor:
    """Identity from the gateway headers, or actor_id/role query parameters for browser clients."""
    return Actor.from_headers(
        websocket.headers.get(ACTOR_ID_HEADER) or websocket.query_params.get("actor_id"),
        websocket.headers.get(ACTOR_ROLE_HEADER) or websocket.query_params.get("role"),
    )


@router.websocket("/ws/rates")
async def rates_socket(
    websocket: WebSocket,
    manager: Annotated[ConnectionManager, Depends(get_connection_manager)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
):
    """Push-only channel. Inbound frames are read only to detect disconnects."""
    try:
        actor = _actor_from_websocket(websocket)
    except InvalidActorError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(
        websocket, admin=rbac.authorize(actor, Capability.VIEW_ADMIN_RATES)
    )
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)
