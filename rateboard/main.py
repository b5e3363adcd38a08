# rateboard/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from rateboard.api.dependencies import get_rate_store, shutdown_dependencies
from rateboard.api.middleware import (
    ActorContextMiddleware,
    CorrelationIdMiddleware,
    RequestLogMiddleware,
)
from rateboard.api.routers import activity, health, rates, realtime
from rateboard.application.exceptions import ApplicationError, PersistenceFailureError
from rateboard.config.logging import configure_logging
from rateboard.config.settings import get_settings
from rateboard.domain.exceptions import (
    DomainError,
    DuplicateCodeError,
    RateValidationError,
    RecordNotFoundError,
)
from rateboard.infrastructure.seed import seed_default_currencies
from rateboard.security.exceptions import AuthenticationError, AuthorizationError

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.database_url:
        from rateboard.infrastructure.database.session import init_models

        await init_models()
    if settings.seed_default_currencies:
        await seed_default_currencies(get_rate_store(), settings)
    yield
    await shutdown_dependencies()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> ActorContext -> RequestLog.
app.add_middleware(RequestLogMiddleware)
app.add_middleware(ActorContextMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(RateValidationError)
async def rate_validation_error_handler(request, exc: RateValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": exc.message,
            "violations": [v.to_dict() for v in exc.violations],
        },
    )


@app.exception_handler(RecordNotFoundError)
async def not_found_error_handler(request, exc: RecordNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(DuplicateCodeError)
async def duplicate_code_error_handler(request, exc: DuplicateCodeError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(PersistenceFailureError)
async def persistence_failure_error_handler(request, exc: PersistenceFailureError):
    return JSONResponse(
        status_code=503,
        content={"detail": "Rates are temporarily unavailable, please retry"},
    )


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    logger.error("application_error", extra={"error": exc.message})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.error("unhandled_error", extra={"error": str(exc)}, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /rates, /activity, /ws/rates
app.include_router(health.router)
app.include_router(rates.router, prefix="/rates")
app.include_router(activity.router, prefix="/activity")
app.include_router(realtime.router)
