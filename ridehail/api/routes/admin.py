"""
Admin endpoints
===============

Every route except ``/health`` requires the ``X-Admin-Token`` header.

GET    /api/v1/admin/health              -- simple health check
GET    /api/v1/admin/drivers             -- list drivers
POST   /api/v1/admin/drivers             -- register a driver
DELETE /api/v1/admin/drivers/{driver_id} -- remove an idle driver
GET    /api/v1/admin/promos              -- list promos
POST   /api/v1/admin/promos              -- add / overwrite a promo
GET    /api/v1/admin/promos/{code}       -- look up a promo
DELETE /api/v1/admin/promos/{code}       -- remove a promo
GET    /api/v1/admin/bookings            -- every booking, in creation order
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ridehail.api.dependencies import get_ride_service, require_admin
from ridehail.api.errors import unwrap
from ridehail.api.middleware import limiter
from ridehail.api.schemas import (
    BookingResponse,
    DriverCreateRequest,
    DriverResponse,
    HealthResponse,
    PromoCreateRequest,
    PromoResponse,
)
from ridehail.config import settings
from ridehail.services.rides import RideService

router = APIRouter(prefix="/admin", tags=["admin"])

admin_only = [Depends(require_admin)]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()


# ── Drivers ───────────────────────────────────────────────────────────


@router.get(
    "/drivers",
    response_model=list[DriverResponse],
    dependencies=admin_only,
    summary="List drivers",
)
@limiter.limit(settings.rate_limit)
async def list_drivers(
    request: Request,
    service: RideService = Depends(get_ride_service),
):
    return [DriverResponse.from_driver(d) for d in service.list_drivers()]


@router.post(
    "/drivers",
    status_code=201,
    response_model=DriverResponse,
    dependencies=admin_only,
    summary="Register a driver",
)
@limiter.limit(settings.rate_limit)
async def add_driver(
    request: Request,
    body: DriverCreateRequest,
    service: RideService = Depends(get_ride_service),
):
    driver = service.register_driver(body.name, body.model, body.plate, body.category)
    return DriverResponse.from_driver(driver)


@router.delete(
    "/drivers/{driver_id}",
    status_code=204,
    dependencies=admin_only,
    summary="Remove a driver",
    description="Fails with 409 while the driver is on an active booking.",
)
@limiter.limit(settings.rate_limit)
async def remove_driver(
    request: Request,
    driver_id: int,
    service: RideService = Depends(get_ride_service),
):
    unwrap(service.remove_driver(driver_id))
    return Response(status_code=204)


# ── Promos ────────────────────────────────────────────────────────────


@router.get(
    "/promos",
    response_model=list[PromoResponse],
    dependencies=admin_only,
    summary="List promos",
)
@limiter.limit(settings.rate_limit)
async def list_promos(
    request: Request,
    service: RideService = Depends(get_ride_service),
):
    return [PromoResponse.model_validate(p) for p in service.list_promos()]


@router.post(
    "/promos",
    status_code=201,
    response_model=PromoResponse,
    dependencies=admin_only,
    summary="Add or overwrite a promo",
)
@limiter.limit(settings.rate_limit)
async def add_promo(
    request: Request,
    body: PromoCreateRequest,
    service: RideService = Depends(get_ride_service),
):
    try:
        promo = service.add_promo(body.code, body.percent, body.max_uses)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return PromoResponse.model_validate(promo)


@router.get(
    "/promos/{code}",
    response_model=PromoResponse,
    dependencies=admin_only,
    summary="Look up a promo by code",
)
@limiter.limit(settings.rate_limit)
async def get_promo(
    request: Request,
    code: str,
    service: RideService = Depends(get_ride_service),
):
    promo = service.find_promo(code)
    if promo is None:
        raise HTTPException(status_code=404, detail="Promo not found")
    return PromoResponse.model_validate(promo)


@router.delete(
    "/promos/{code}",
    status_code=204,
    dependencies=admin_only,
    summary="Remove a promo",
)
@limiter.limit(settings.rate_limit)
async def remove_promo(
    request: Request,
    code: str,
    service: RideService = Depends(get_ride_service),
):
    if not service.remove_promo(code):
        raise HTTPException(status_code=404, detail="Promo not found")
    return Response(status_code=204)


# ── Bookings ──────────────────────────────────────────────────────────


@router.get(
    "/bookings",
    response_model=list[BookingResponse],
    dependencies=admin_only,
    summary="List every booking",
)
@limiter.limit(settings.rate_limit)
async def list_bookings(
    request: Request,
    service: RideService = Depends(get_ride_service),
):
    return [BookingResponse.model_validate(b) for b in service.all_bookings()]
