"""
Repository Pattern -- owns the in-memory records so domain logic stays
storage-agnostic.

Each repository guards its records with its own re-entrant lock and hands
out copies, never the stored objects.  ``BookingLedger`` holds a reference
to the ``DriverRegistry`` and always takes its own lock first, then the
registry's.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from .locks import IdSequence
from ridehail.domain.entities import Booking, Driver, FareEstimate, Promo, Vehicle
from ridehail.domain.enums import BookingStatus, ErrorCode, VehicleCategory
from ridehail.domain.outcomes import Outcome

MIN_STARS, MAX_STARS = 1, 5

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalise_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


class DriverRegistry:
    def __init__(self):
        self._drivers: dict[int, Driver] = {}  # insertion order == registration order
        self._engaged: set[int] = set()  # claimed by an active booking
        self._ids = IdSequence()
        self._lock = threading.RLock()

    def register(
        self, name: str, model: str, plate: str, category: VehicleCategory
    ) -> Driver:
        with self._lock:
            driver = Driver(
                id=self._ids.next(),
                name=name,
                vehicle=Vehicle(model=model, plate=plate, category=category),
            )
            self._drivers[driver.id] = driver
            return replace(driver)

    def remove(self, driver_id: int) -> Outcome[Driver]:
        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                return Outcome.reject(ErrorCode.NOT_FOUND, f"Driver #{driver_id} not found")
            if not driver.is_available:
                return Outcome.reject(
                    ErrorCode.CONFLICT, f"Driver #{driver_id} is on an active booking"
                )
            del self._drivers[driver_id]
            return Outcome.success(driver)

    def find(self, driver_id: int) -> Optional[Driver]:
        with self._lock:
            driver = self._drivers.get(driver_id)
            return replace(driver) if driver else None

    def list(self) -> list[Driver]:
        with self._lock:
            return [replace(d) for d in self._drivers.values()]

    def set_availability(self, driver_id: int, available: bool) -> bool:
        """Take a driver off duty or back on; a claimed driver stays busy until released."""
        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None or (available and driver_id in self._engaged):
                return False
            driver.is_available = available
            return True

    def claim(self, driver_id: int) -> bool:
        """Atomically flip an available driver to busy."""
        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None or not driver.is_available:
                return False
            driver.is_available = False
            self._engaged.add(driver_id)
            return True

    def release(self, driver_id: int) -> bool:
        with self._lock:
            self._engaged.discard(driver_id)
            return self.set_availability(driver_id, True)

    def add_rating(self, driver_id: int, stars: int) -> Outcome[Driver]:
        if not MIN_STARS <= stars <= MAX_STARS:
            return Outcome.reject(
                ErrorCode.INVALID_INPUT,
                f"Rating must be between {MIN_STARS} and {MAX_STARS}, got {stars}",
            )
        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                return Outcome.reject(ErrorCode.NOT_FOUND, f"Driver #{driver_id} not found")
            driver.add_rating(stars)
            return Outcome.success(replace(driver))


class PromoLedger:
    def __init__(self):
        self._promos: dict[str, Promo] = {}
        self._lock = threading.Lock()

    def add(self, code: str, percent: float, max_uses: int) -> Promo:
        """Create or overwrite the promo stored under *code*."""
        key = _normalise_code(code)
        if key is None:
            raise ValueError("Promo code must not be empty")
        if not 0 <= percent <= 100:
            raise ValueError(f"Discount percent must be within 0-100, got {percent}")
        if max_uses < 0:
            raise ValueError(f"max_uses must not be negative, got {max_uses}")
        promo = Promo(code=key, percent=percent, uses_left=max_uses)
        with self._lock:
            self._promos[key] = promo
            return replace(promo)

    def remove(self, code: str) -> bool:
        with self._lock:
            return self._promos.pop(_normalise_code(code) or "", None) is not None

    def find(self, code: Optional[str]) -> Optional[Promo]:
        key = _normalise_code(code)
        with self._lock:
            promo = self._promos.get(key) if key else None
            return replace(promo) if promo else None

    def list(self) -> list[Promo]:
        with self._lock:
            return [replace(p) for p in self._promos.values()]

    def apply(self, code: Optional[str], raw_fare: float) -> tuple[float, float]:
        """
        Discount *raw_fare* with *code*, consuming one use.

        Returns ``(discounted_fare, discount)``.  Empty, unknown and
        exhausted codes leave the fare untouched and consume nothing.
        """
        discounted, discount, _ = self.redeem(code, raw_fare)
        return discounted, discount

    def redeem(
        self, code: Optional[str], raw_fare: float
    ) -> tuple[float, float, Optional[str]]:
        """Like :meth:`apply`, also returning the stored code when a use was consumed."""
        key = _normalise_code(code)
        if key is None:
            return raw_fare, 0.0, None
        with self._lock:
            promo = self._promos.get(key)
            if promo is None or not promo.use():
                return raw_fare, 0.0, None
            discount = raw_fare * (promo.percent / 100.0)
        return raw_fare - discount, discount, key


class BookingLedger:
    def __init__(
        self,
        drivers: DriverRegistry,
        clock: Clock = utcnow,
        free_cancellation_minutes: int = 2,
        min_cancellation_fee: float = 20.0,
        cancellation_fee_rate: float = 0.10,
    ):
        self.drivers = drivers
        self.clock = clock
        self.free_cancellation_minutes = free_cancellation_minutes
        self.min_cancellation_fee = min_cancellation_fee
        self.cancellation_fee_rate = cancellation_fee_rate
        self._bookings: dict[int, Booking] = {}
        self._ids = IdSequence()
        self._lock = threading.RLock()

    # ── Transitions ───────────────────────────────────────────────

    def create(
        self,
        rider: str,
        pickup: str,
        drop: str,
        distance_km: int,
        category: VehicleCategory,
        estimate: FareEstimate,
        driver: Optional[Driver],
    ) -> Outcome[Booking]:
        if driver is None:
            return Outcome.reject(ErrorCode.UNAVAILABLE, "No drivers available")
        with self._lock:
            if not self.drivers.claim(driver.id):
                return Outcome.reject(
                    ErrorCode.UNAVAILABLE, f"Driver #{driver.id} is no longer available"
                )
            booking = Booking(
                id=self._ids.next(),
                rider=rider,
                pickup=pickup,
                drop=drop,
                category=category,
                distance_km=distance_km,
                driver_id=driver.id,
                estimated_fare=estimate.final_fare,
                eta_minutes=estimate.eta_minutes,
                estimated_fuel_litres=estimate.estimated_fuel_litres,
                applied_promo=estimate.promo_code,
                created_at=self.clock(),
            )
            self._bookings[booking.id] = booking
            return Outcome.success(replace(booking))

    def complete(self, booking_id: int, rider: str) -> Outcome[Booking]:
        with self._lock:
            booking, rejected = self._owned_active(booking_id, rider)
            if rejected is not None:
                return rejected
            booking.transition_to(BookingStatus.COMPLETED, self.clock())
            self.drivers.release(booking.driver_id)
            return Outcome.success(replace(booking))

    def cancel(self, booking_id: int, rider: str) -> Outcome[float]:
        """Cancel an active booking; the outcome's value is the fee charged."""
        with self._lock:
            booking, rejected = self._owned_active(booking_id, rider)
            if rejected is not None:
                return rejected
            now = self.clock()
            fee = self.cancellation_fee(booking, now)
            booking.transition_to(BookingStatus.CANCELLED, now)
            booking.cancellation_fee = fee
            self.drivers.release(booking.driver_id)
            return Outcome.success(fee)

    def rate(self, booking_id: int, rider: str, stars: int) -> Outcome[Driver]:
        """Record the rider's rating of a completed booking's driver, once."""
        with self._lock:
            booking, rejected = self._owned(booking_id, rider)
            if rejected is not None:
                return rejected
            if booking.status != BookingStatus.COMPLETED:
                return Outcome.reject(
                    ErrorCode.INVALID_STATE,
                    f"Booking #{booking_id} is {booking.status.value}, not COMPLETED",
                )
            if booking.rating is not None:
                return Outcome.reject(
                    ErrorCode.INVALID_STATE, f"Booking #{booking_id} is already rated"
                )
            outcome = self.drivers.add_rating(booking.driver_id, stars)
            if outcome:
                booking.rating = stars
            return outcome

    def cancellation_fee(self, booking: Booking, now: datetime) -> float:
        elapsed_minutes = max(0, int((now - booking.created_at).total_seconds() // 60))
        if elapsed_minutes <= self.free_cancellation_minutes:
            return 0.0
        fee = max(
            self.min_cancellation_fee,
            self.cancellation_fee_rate * booking.estimated_fare,
        )
        return round(fee, 2)

    def _owned(self, booking_id: int, rider: str):
        booking = self._bookings.get(booking_id)
        if booking is None:
            return None, Outcome.reject(
                ErrorCode.NOT_FOUND, f"Booking #{booking_id} not found"
            )
        if booking.rider != rider:
            return None, Outcome.reject(
                ErrorCode.UNAUTHORIZED, f"Booking #{booking_id} does not belong to {rider}"
            )
        return booking, None

    def _owned_active(self, booking_id: int, rider: str):
        booking, rejected = self._owned(booking_id, rider)
        if rejected is None and not booking.is_active:
            return None, Outcome.reject(
                ErrorCode.INVALID_STATE,
                f"Booking #{booking_id} is {booking.status.value}, not ACTIVE",
            )
        return booking, rejected

    # ── Queries ───────────────────────────────────────────────────

    def by_id(self, booking_id: int) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return replace(booking) if booking else None

    def by_rider(self, rider: str) -> list[Booking]:
        with self._lock:
            return [replace(b) for b in self._bookings.values() if b.rider == rider]

    def active_by_rider(self, rider: str) -> list[Booking]:
        with self._lock:
            return [
                replace(b)
                for b in self._bookings.values()
                if b.rider == rider and b.is_active
            ]

    def all(self) -> list[Booking]:
        with self._lock:
            return [replace(b) for b in self._bookings.values()]
