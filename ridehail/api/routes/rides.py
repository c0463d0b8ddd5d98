"""
Ride endpoints
==============

POST  /api/v1/rides/quote              -- fare quote, never consumes a promo
POST  /api/v1/rides                    -- estimate, match a driver and book (201)
GET   /api/v1/rides/{booking_id}       -- booking details
PATCH /api/v1/rides/{booking_id}/complete
PATCH /api/v1/rides/{booking_id}/cancel -- returns the cancellation fee
POST  /api/v1/rides/{booking_id}/rating -- rate the driver of a completed ride
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ridehail.api.dependencies import get_ride_service
from ridehail.api.errors import unwrap
from ridehail.api.middleware import limiter
from ridehail.api.schemas import (
    BookingResponse,
    CancellationResponse,
    DriverResponse,
    ErrorResponse,
    FareEstimateResponse,
    FareQuoteRequest,
    RatingRequest,
    RideCreateRequest,
    RideCreatedResponse,
    RiderActionRequest,
)
from ridehail.config import settings
from ridehail.services.rides import RideService

router = APIRouter(prefix="/rides", tags=["rides"])


def _booking_or_404(service: RideService, booking_id: int) -> BookingResponse:
    booking = service.find_booking(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingResponse.model_validate(booking)


@router.post(
    "/quote",
    response_model=FareEstimateResponse,
    summary="Quote a fare without applying a promo",
)
@limiter.limit(settings.rate_limit)
async def quote_fare(
    request: Request,
    body: FareQuoteRequest,
    service: RideService = Depends(get_ride_service),
):
    estimate = service.quote_fare(body.distance_km, body.category)
    return FareEstimateResponse.model_validate(estimate)


@router.post(
    "",
    status_code=201,
    response_model=RideCreatedResponse,
    summary="Request a ride",
    responses={503: {"model": ErrorResponse, "description": "No driver available."}},
)
@limiter.limit(settings.rate_limit)
async def request_ride(
    request: Request,
    body: RideCreateRequest,
    service: RideService = Depends(get_ride_service),
):
    estimate = service.estimate_fare(body.distance_km, body.category, body.promo_code)
    booking = unwrap(
        service.request_ride(
            body.rider,
            body.pickup,
            body.drop,
            body.distance_km,
            body.category,
            estimate,
        )
    )
    driver = service.find_driver(booking.driver_id)
    return RideCreatedResponse(
        booking=BookingResponse.model_validate(booking),
        fare=FareEstimateResponse.model_validate(estimate),
        driver=DriverResponse.from_driver(driver),
    )


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
)
@limiter.limit(settings.rate_limit)
async def get_ride(
    request: Request,
    booking_id: int,
    service: RideService = Depends(get_ride_service),
):
    return _booking_or_404(service, booking_id)


@router.patch(
    "/{booking_id}/complete",
    response_model=BookingResponse,
    summary="Complete an active booking",
    description="Releases the driver. Rate the driver afterwards via /rating.",
)
@limiter.limit(settings.rate_limit)
async def complete_ride(
    request: Request,
    booking_id: int,
    body: RiderActionRequest,
    service: RideService = Depends(get_ride_service),
):
    booking = unwrap(service.complete_booking(booking_id, body.rider))
    return BookingResponse.model_validate(booking)


@router.patch(
    "/{booking_id}/cancel",
    response_model=CancellationResponse,
    summary="Cancel an active booking",
    description=(
        "Free within the grace period after booking; afterwards the fee is "
        "10 % of the estimated fare with a minimum charge."
    ),
)
@limiter.limit(settings.rate_limit)
async def cancel_ride(
    request: Request,
    booking_id: int,
    body: RiderActionRequest,
    service: RideService = Depends(get_ride_service),
):
    fee = unwrap(service.cancel_booking(booking_id, body.rider))
    return CancellationResponse(booking=_booking_or_404(service, booking_id), fee=fee)


@router.post(
    "/{booking_id}/rating",
    response_model=DriverResponse,
    summary="Rate the driver of a completed ride",
)
@limiter.limit(settings.rate_limit)
async def rate_ride(
    request: Request,
    booking_id: int,
    body: RatingRequest,
    service: RideService = Depends(get_ride_service),
):
    driver = unwrap(service.rate_booking(booking_id, body.rider, body.stars))
    return DriverResponse.from_driver(driver)
