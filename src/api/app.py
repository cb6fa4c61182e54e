"""
FastAPI application factory.

* Registers routes for profiles, missions, geo, views, drivers and admin.
* Starts / stops the admin dashboard poller via lifespan events.
* Maps domain errors to HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, drivers, geo, missions, profiles, views
from src.domain.entities import InvalidStateTransition, MalformedRecord, NotAuthorized
from src.infrastructure.redis_client import close_redis
from src.workers import dashboard as _dashboard

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the dashboard poller on startup; stop it and Redis on shutdown."""
    await _dashboard.start_dashboard_loop()
    yield
    await _dashboard.stop_dashboard_loop()
    await close_redis()


async def _invalid_transition_handler(request: Request, exc: InvalidStateTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def _not_authorized_handler(request: Request, exc: NotAuthorized):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def _malformed_record_handler(request: Request, exc: MalformedRecord):
    logger.error("Malformed record on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Stored record is invalid"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Delivery Dispatch API",
        description=(
            "Customers place delivery missions, drivers accept and fulfil "
            "them, admins watch the fleet.  Prices come from road distance "
            "by vehicle class; views are refreshed by polling."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(InvalidStateTransition, _invalid_transition_handler)
    app.add_exception_handler(NotAuthorized, _not_authorized_handler)
    app.add_exception_handler(MalformedRecord, _malformed_record_handler)

    # Routers
    for module in (profiles, missions, geo, views, drivers, admin):
        app.include_router(module.router, prefix="/api/v1")

    return app
