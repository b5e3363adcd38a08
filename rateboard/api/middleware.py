"""API middleware: correlation ID, actor context, request log."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from rateboard.core.context import actor_id_ctx, correlation_id_ctx
from rateboard.security.exceptions import InvalidActorError
from rateboard.security.rbac import Actor

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
ACTOR_ID_HEADER = "X-Actor-ID"
ACTOR_ROLE_HEADER = "X-Actor-Role"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class ActorContextMiddleware(BaseHTTPMiddleware):
    """Parse X-Actor-ID / X-Actor-Role; return 400 on an unknown role; attach to request.state."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            actor = Actor.from_headers(
                request.headers.get(ACTOR_ID_HEADER),
                request.headers.get(ACTOR_ROLE_HEADER),
            )
        except InvalidActorError as e:
            return JSONResponse(status_code=400, content={"detail": e.message})
        request.state.actor = actor
        actor_id_ctx.set(actor.actor_id)
        return await call_next(request)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """After response: log one structured line (path, method, status_code, duration)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        actor = getattr(request.state, "actor", None)
        logger.info(
            "request_completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "role": actor.role.value if actor is not None else None,
            },
        )
        return response
