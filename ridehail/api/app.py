"""
FastAPI application factory.

* Builds the in-memory ride service (and seeds demo data when enabled).
* Registers routes for rides, riders and admin.
* Maps core rejections to HTTP errors and applies rate limiting.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridehail.api.errors import RejectionError, rejection_handler
from ridehail.api.middleware import limiter
from ridehail.api.routes import admin, riders, rides
from ridehail.config import Settings, settings as default_settings
from ridehail.seed import seed_demo
from ridehail.services.rides import RideService

logging.basicConfig(level=default_settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    service: RideService = app.state.ride_service
    logger.info(
        "Ride-hailing API ready (%d drivers, %d promos)",
        len(service.list_drivers()),
        len(service.list_promos()),
    )
    yield
    logger.info("Ride-hailing API stopped; in-memory state discarded")


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[RideService] = None,
) -> FastAPI:
    settings = settings or default_settings
    if service is None:
        service = RideService.from_settings(settings)
        if settings.seed_demo_data:
            seed_demo(service)

    app = FastAPI(
        title="Ride Hailing API",
        description=(
            "Riders request trips, get matched to the nearest available "
            "driver, and see fare, ETA and fuel estimates.  Supports promo "
            "codes, cancellation fees and driver ratings.  All state is "
            "in-memory for the lifetime of the process."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.ride_service = service

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RejectionError, rejection_handler)

    # Routers
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(riders.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
