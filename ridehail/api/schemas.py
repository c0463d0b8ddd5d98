"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ridehail.domain.entities import Driver
from ridehail.domain.enums import BookingStatus, VehicleCategory


# ── Requests ──────────────────────────────────────────────────────────


class FareQuoteRequest(BaseModel):
    distance_km: int = Field(..., gt=0, le=1000)
    category: VehicleCategory = VehicleCategory.COMPACT


class RideCreateRequest(BaseModel):
    rider: str = Field(..., min_length=1, max_length=64)
    pickup: str = Field(..., min_length=1, max_length=200)
    drop: str = Field(..., min_length=1, max_length=200)
    distance_km: int = Field(..., gt=0, le=1000)
    category: VehicleCategory = VehicleCategory.COMPACT
    promo_code: Optional[str] = Field(
        None,
        max_length=32,
        description="Consumes one use of the promo when a discount is applied.",
    )


class RiderActionRequest(BaseModel):
    rider: str = Field(..., min_length=1, max_length=64)


class RatingRequest(BaseModel):
    rider: str = Field(..., min_length=1, max_length=64)
    stars: int = Field(..., ge=1, le=5)


class DriverCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    model: str = Field(..., min_length=1, max_length=80)
    plate: str = Field(..., min_length=1, max_length=20)
    category: VehicleCategory = VehicleCategory.SEDAN


class PromoCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    percent: float = Field(..., ge=0, le=100)
    max_uses: Optional[int] = Field(
        None, ge=0, description="Defaults to the configured number of uses."
    )


# ── Responses ─────────────────────────────────────────────────────────


class FareEstimateResponse(BaseModel):
    base_fare: float
    distance_fare: float
    surge_amount: float
    promo_discount: float
    final_fare: float
    eta_minutes: int
    estimated_fuel_litres: float
    promo_code: Optional[str] = None

    model_config = {"from_attributes": True}


class DriverResponse(BaseModel):
    id: int
    name: str
    model: str
    plate: str
    category: VehicleCategory
    is_available: bool
    average_rating: float
    rating_count: int

    @classmethod
    def from_driver(cls, driver: Driver) -> DriverResponse:
        return cls(
            id=driver.id,
            name=driver.name,
            model=driver.vehicle.model,
            plate=driver.vehicle.plate,
            category=driver.category,
            is_available=driver.is_available,
            average_rating=round(driver.average_rating, 2),
            rating_count=driver.rating_count,
        )


class PromoResponse(BaseModel):
    code: str
    percent: float
    uses_left: int

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    rider: str
    pickup: str
    drop: str
    category: VehicleCategory
    distance_km: int
    driver_id: int
    status: BookingStatus
    estimated_fare: float
    eta_minutes: int
    estimated_fuel_litres: float
    applied_promo: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_fee: Optional[float] = None
    rating: Optional[int] = None

    model_config = {"from_attributes": True}


class RideCreatedResponse(BaseModel):
    booking: BookingResponse
    fare: FareEstimateResponse
    driver: DriverResponse


class CancellationResponse(BaseModel):
    booking: BookingResponse
    fee: float


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None
