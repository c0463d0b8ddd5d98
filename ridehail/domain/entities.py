"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Booking``: enforces valid lifecycle transitions
  (ACTIVE -> COMPLETED | CANCELLED).
- ``Driver`` keeps a running rating accumulator instead of a rating list.
- ``Promo.use`` is the only place a promo's remaining uses go down.

A ``Booking`` references its driver by id only; the driver record itself
lives in the driver registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import BOOKING_TRANSITIONS, BookingStatus, VehicleCategory


class InvalidStateTransition(Exception):
    """Raised when a booking status change violates the state machine."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Vehicle:
    model: str
    plate: str
    category: VehicleCategory = VehicleCategory.COMPACT


@dataclass(frozen=True)
class FareEstimate:
    base_fare: float
    distance_fare: float
    surge_amount: float
    promo_discount: float
    final_fare: float
    eta_minutes: int
    estimated_fuel_litres: float
    promo_code: Optional[str] = None

    @property
    def raw_fare(self) -> float:
        return round(self.base_fare + self.distance_fare + self.surge_amount, 2)


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Driver:
    id: int
    name: str
    vehicle: Vehicle
    is_available: bool = True
    rating_sum: int = 0
    rating_count: int = 0

    @property
    def category(self) -> VehicleCategory:
        return self.vehicle.category

    @property
    def average_rating(self) -> float:
        if self.rating_count == 0:
            return 0.0
        return self.rating_sum / self.rating_count

    def add_rating(self, stars: int) -> None:
        self.rating_sum += stars
        self.rating_count += 1


@dataclass
class Promo:
    code: str
    percent: float
    uses_left: int

    @property
    def is_exhausted(self) -> bool:
        return self.uses_left <= 0

    def use(self) -> bool:
        """Consume one use.  Returns False (and changes nothing) when exhausted."""
        if self.is_exhausted:
            return False
        self.uses_left -= 1
        return True


@dataclass
class Booking:
    id: int
    rider: str
    pickup: str
    drop: str
    category: VehicleCategory
    distance_km: int
    driver_id: int
    estimated_fare: float
    eta_minutes: int
    estimated_fuel_litres: float
    created_at: datetime
    applied_promo: Optional[str] = None
    status: BookingStatus = BookingStatus.ACTIVE
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_fee: Optional[float] = None
    rating: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.ACTIVE

    def can_transition_to(self, new_status: BookingStatus) -> bool:
        return new_status in BOOKING_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: BookingStatus, at: datetime) -> None:
        """Move to *new_status* and stamp the matching timestamp, else raise."""
        if not self.can_transition_to(new_status):
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        if new_status == BookingStatus.COMPLETED:
            self.completed_at = at
        elif new_status == BookingStatus.CANCELLED:
            self.cancelled_at = at
