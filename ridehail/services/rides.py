"""
Ride Service
============

Application facade over the booking core.  Wires the fare estimator,
promo ledger, driver registry, matching engine and booking ledger together
and is the only object the API layer talks to.

Request flow
------------
1. Estimate the fare (consumes one promo use when a discount applies).
2. Pick the nearest available driver.
3. Create the booking, which marks the driver busy.

Steps 2 and 3 run under one dispatch lock so two concurrent requests can
never select the same driver.  Completion and cancellation release the
driver back to the registry.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ridehail.config import Settings
from ridehail.domain.entities import Booking, Driver, FareEstimate, Promo
from ridehail.domain.enums import VehicleCategory
from ridehail.domain.matching import MatchingEngine
from ridehail.domain.outcomes import Outcome
from ridehail.domain.pricing import FareEstimator, RandomSurge
from ridehail.domain.randomness import RandomSource, SharedRandom
from ridehail.infrastructure.repositories import (
    BookingLedger,
    Clock,
    DriverRegistry,
    PromoLedger,
    utcnow,
)

logger = logging.getLogger(__name__)


class RideService:
    def __init__(
        self,
        drivers: DriverRegistry,
        promos: PromoLedger,
        bookings: BookingLedger,
        estimator: FareEstimator,
        matcher: MatchingEngine,
        default_promo_uses: int = 5,
    ):
        self.drivers = drivers
        self.promos = promos
        self.bookings = bookings
        self.estimator = estimator
        self.matcher = matcher
        self.default_promo_uses = default_promo_uses
        self._dispatch_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        rng: Optional[RandomSource] = None,
        clock: Clock = utcnow,
    ) -> RideService:
        rng = rng if rng is not None else SharedRandom(settings.random_seed)
        drivers = DriverRegistry()
        return cls(
            drivers=drivers,
            promos=PromoLedger(),
            bookings=BookingLedger(
                drivers,
                clock=clock,
                free_cancellation_minutes=settings.free_cancellation_minutes,
                min_cancellation_fee=settings.min_cancellation_fee,
                cancellation_fee_rate=settings.cancellation_fee_rate,
            ),
            estimator=FareEstimator(
                rng,
                base_fare=settings.base_fare,
                rate_per_km=settings.rate_per_km,
                surge=RandomSurge(rng, settings.max_surge_fraction),
                eta_base_minutes=settings.eta_base_minutes,
                eta_per_km_range=(
                    settings.eta_min_minutes_per_km,
                    settings.eta_max_minutes_per_km,
                ),
                min_eta_minutes=settings.min_eta_minutes,
            ),
            matcher=MatchingEngine(
                rng,
                mismatch_penalty_km=settings.category_mismatch_penalty_km,
                distance_range_km=(
                    settings.min_simulated_distance_km,
                    settings.max_simulated_distance_km,
                ),
            ),
            default_promo_uses=settings.default_promo_uses,
        )

    # ── Drivers ───────────────────────────────────────────────────

    def register_driver(
        self, name: str, model: str, plate: str, category: VehicleCategory
    ) -> Driver:
        driver = self.drivers.register(name, model, plate, category)
        logger.info(
            "Registered driver #%d %s (%s, %s)",
            driver.id, driver.name, driver.vehicle.model, driver.category.value,
        )
        return driver

    def remove_driver(self, driver_id: int) -> Outcome[Driver]:
        outcome = self.drivers.remove(driver_id)
        if outcome:
            logger.info("Removed driver #%d", driver_id)
        else:
            logger.debug("Driver removal rejected: %s", outcome.rejection.detail)
        return outcome

    def list_drivers(self) -> list[Driver]:
        return self.drivers.list()

    def find_driver(self, driver_id: int) -> Optional[Driver]:
        return self.drivers.find(driver_id)

    # ── Promos ────────────────────────────────────────────────────

    def add_promo(
        self, code: str, percent: float, max_uses: Optional[int] = None
    ) -> Promo:
        uses = self.default_promo_uses if max_uses is None else max_uses
        promo = self.promos.add(code, percent, uses)
        logger.info("Promo %s added (%.1f%%, %d uses)", promo.code, promo.percent, uses)
        return promo

    def remove_promo(self, code: str) -> bool:
        removed = self.promos.remove(code)
        if removed:
            logger.info("Promo %s removed", code.strip().upper())
        return removed

    def list_promos(self) -> list[Promo]:
        return self.promos.list()

    def find_promo(self, code: str) -> Optional[Promo]:
        return self.promos.find(code)

    # ── Rides ─────────────────────────────────────────────────────

    def estimate_fare(
        self,
        distance_km: int,
        category: VehicleCategory,
        promo_code: Optional[str] = None,
    ) -> FareEstimate:
        return self.estimator.estimate(distance_km, category, promo_code, self.promos)

    def quote_fare(self, distance_km: int, category: VehicleCategory) -> FareEstimate:
        """Estimate without touching any promo."""
        return self.estimator.estimate(distance_km, category)

    def request_ride(
        self,
        rider: str,
        pickup: str,
        drop: str,
        distance_km: int,
        category: VehicleCategory,
        estimate: FareEstimate,
    ) -> Outcome[Booking]:
        with self._dispatch_lock:
            driver = self.matcher.select_driver(category, self.drivers)
            outcome = self.bookings.create(
                rider, pickup, drop, distance_km, category, estimate, driver
            )
        if outcome:
            booking = outcome.value
            logger.info(
                "Booking #%d created for %s: driver #%d, fare %.2f, ETA %d min",
                booking.id, rider, booking.driver_id,
                booking.estimated_fare, booking.eta_minutes,
            )
        else:
            logger.debug("Ride request by %s rejected: %s", rider, outcome.rejection.detail)
        return outcome

    def complete_booking(self, booking_id: int, rider: str) -> Outcome[Booking]:
        outcome = self.bookings.complete(booking_id, rider)
        if outcome:
            logger.info("Booking #%d completed", booking_id)
        else:
            logger.debug("Completion rejected: %s", outcome.rejection.detail)
        return outcome

    def cancel_booking(self, booking_id: int, rider: str) -> Outcome[float]:
        outcome = self.bookings.cancel(booking_id, rider)
        if outcome:
            logger.info("Booking #%d cancelled, fee %.2f", booking_id, outcome.value)
        else:
            logger.debug("Cancellation rejected: %s", outcome.rejection.detail)
        return outcome

    def rate_driver(self, driver_id: int, stars: int) -> Outcome[Driver]:
        return self.drivers.add_rating(driver_id, stars)

    def rate_booking(self, booking_id: int, rider: str, stars: int) -> Outcome[Driver]:
        outcome = self.bookings.rate(booking_id, rider, stars)
        if outcome:
            logger.info(
                "Booking #%d rated %d; driver #%d now %.2f over %d",
                booking_id, stars, outcome.value.id,
                outcome.value.average_rating, outcome.value.rating_count,
            )
        else:
            logger.debug("Rating rejected: %s", outcome.rejection.detail)
        return outcome

    # ── Queries ───────────────────────────────────────────────────

    def bookings_for_rider(self, rider: str) -> list[Booking]:
        return self.bookings.by_rider(rider)

    def active_bookings_for_rider(self, rider: str) -> list[Booking]:
        return self.bookings.active_by_rider(rider)

    def all_bookings(self) -> list[Booking]:
        return self.bookings.all()

    def find_booking(self, booking_id: int) -> Optional[Booking]:
        return self.bookings.by_id(booking_id)
