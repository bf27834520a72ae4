"""
FastAPI application factory.

* Registers routes for rides and admin.
* Loads the ride catalog on startup and closes the session on shutdown
  via lifespan events, so late store answers are dropped.
* Maps the engine's error taxonomy to HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, rides
from src.config import settings
from src.domain.errors import (
    PersistenceFailure,
    ReadOnlyMode,
    RideEngineError,
    RideNotFound,
    RosterError,
    StaleRevision,
    ValidationError,
)
from src.infrastructure.database import async_session_factory
from src.infrastructure.locks import RedisRideLocks, RideLocks
from src.infrastructure.redis_client import get_redis
from src.infrastructure.store import RideStore, SqlRideStore
from src.services.roster_engine import RosterEngine
from src.services.session import CatalogSession

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the catalog on startup; close the session on shutdown."""
    catalog: CatalogSession = app.state.catalog
    try:
        await catalog.load()
    except PersistenceFailure as exc:
        # not fatal: the first request retries the load
        logger.warning("Initial catalog load failed: %s", exc)
    yield
    catalog.close()


# ── Error mapping ─────────────────────────────────────────────────────


def _error_response(
    status_code: int, exc: RideEngineError, **extra
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.user_message, "code": type(exc).__name__, **extra},
    )


async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(422, exc, errors=exc.errors)


async def roster_error_handler(request: Request, exc: RosterError):
    if isinstance(exc, RideNotFound):
        return _error_response(404, exc)
    if isinstance(exc, ReadOnlyMode):
        return _error_response(423, exc)
    return _error_response(409, exc)


async def persistence_error_handler(request: Request, exc: PersistenceFailure):
    if isinstance(exc, StaleRevision):
        return _error_response(409, exc)
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return _error_response(503, exc)


# ── Factory ───────────────────────────────────────────────────────────


def create_app(
    store: Optional[RideStore] = None, locks: Optional[RideLocks] = None
) -> FastAPI:
    store = store or SqlRideStore(
        async_session_factory, timeout_seconds=settings.store_timeout_seconds
    )
    if locks is None and settings.use_distributed_locks:
        locks = RedisRideLocks(get_redis(), ttl_seconds=settings.ride_lock_ttl_seconds)

    app = FastAPI(
        title="Group Rides API",
        description=(
            "Browse, search and map group cycling rides, create your own and "
            "join or leave others.  Falls back to a read-only demo catalog "
            "while the ride database is not provisioned."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.catalog = CatalogSession(
        store,
        RosterEngine(store, locks),
        default_point=(settings.default_start_latitude, settings.default_start_longitude),
        default_zoom=settings.map_default_zoom,
        map_padding=settings.map_fit_padding,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Engine errors
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RosterError, roster_error_handler)
    app.add_exception_handler(PersistenceFailure, persistence_error_handler)

    # Routers
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
