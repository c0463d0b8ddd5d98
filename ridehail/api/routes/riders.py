"""
Rider-facing catalogue and history
==================================

GET /api/v1/riders/{rider}/bookings -- ride history (``?active_only=true``)
GET /api/v1/drivers                 -- drivers with availability and rating
GET /api/v1/promos                  -- promos and their remaining uses
"""

from fastapi import APIRouter, Depends, Request

from ridehail.api.dependencies import get_ride_service
from ridehail.api.middleware import limiter
from ridehail.api.schemas import BookingResponse, DriverResponse, PromoResponse
from ridehail.config import settings
from ridehail.services.rides import RideService

router = APIRouter(tags=["riders"])


@router.get(
    "/riders/{rider}/bookings",
    response_model=list[BookingResponse],
    summary="List a rider's bookings",
)
@limiter.limit(settings.rate_limit)
async def rider_bookings(
    request: Request,
    rider: str,
    active_only: bool = False,
    service: RideService = Depends(get_ride_service),
):
    if active_only:
        bookings = service.active_bookings_for_rider(rider)
    else:
        bookings = service.bookings_for_rider(rider)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/drivers", response_model=list[DriverResponse], summary="List drivers")
@limiter.limit(settings.rate_limit)
async def list_drivers(
    request: Request,
    service: RideService = Depends(get_ride_service),
):
    return [DriverResponse.from_driver(d) for d in service.list_drivers()]


@router.get("/promos", response_model=list[PromoResponse], summary="List promos")
@limiter.limit(settings.rate_limit)
async def list_promos(
    request: Request,
    service: RideService = Depends(get_ride_service),
):
    return [PromoResponse.model_validate(p) for p in service.list_promos()]
