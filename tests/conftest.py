"""
Shared test fixtures.

Randomness and time are both injected: ``ScriptedRandom`` returns a fixed
position inside each requested range and ``FakeClock`` only moves when a
test advances it, so fares, ETAs, matching and cancellation fees are all
deterministic.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from ridehail.config import Settings
from ridehail.domain.entities import FareEstimate
from ridehail.domain.enums import VehicleCategory
from ridehail.infrastructure.repositories import (
    BookingLedger,
    DriverRegistry,
    PromoLedger,
)
from ridehail.services.rides import RideService


class ScriptedRandom:
    """Returns ``a + f * (b - a)`` for each scripted fraction *f*, cycling."""

    def __init__(self, *fractions: float):
        self._fractions = itertools.cycle(fractions or (0.5,))

    def uniform(self, a: float, b: float) -> float:
        return a + next(self._fractions) * (b - a)


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_estimate(final_fare: float = 150.0, promo_code=None) -> FareEstimate:
    return FareEstimate(
        base_fare=30.0,
        distance_fare=final_fare - 30.0,
        surge_amount=0.0,
        promo_discount=0.0,
        final_fare=final_fare,
        eta_minutes=12,
        estimated_fuel_litres=0.84,
        promo_code=promo_code,
    )


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom(0.0)


@pytest.fixture
def registry() -> DriverRegistry:
    return DriverRegistry()


@pytest.fixture
def promos() -> PromoLedger:
    return PromoLedger()


@pytest.fixture
def ledger(registry: DriverRegistry, clock: FakeClock) -> BookingLedger:
    return BookingLedger(registry, clock=clock)


@pytest.fixture
def driver(registry: DriverRegistry):
    return registry.register("Aarav Etioson", "Toyota Etios", "TN07EX1234", VehicleCategory.SEDAN)


@pytest.fixture
def service(rng: ScriptedRandom, clock: FakeClock) -> RideService:
    return RideService.from_settings(Settings(seed_demo_data=False), rng=rng, clock=clock)
