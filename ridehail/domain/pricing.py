"""
Fare Estimation Engine  (Strategy Pattern for surge)
====================================================

Formula
-------
Raw_Fare   = Base_Fare + Distance_Fare + Surge
Final_Fare = Raw_Fare - Promo_Discount

* **Distance_Fare** = Rate_Per_KM x Distance x Category_Multiplier
* **Surge**         = uniform(0, Max_Surge_Fraction x Distance_Fare), 2 dp
* **ETA**           = max(Min_ETA, round(ETA_Base + Distance x uniform(2, 5)))
* **Fuel**          = Litres_Per_KM(category) x Distance, 2 dp

The promo discount comes from the promo ledger and is the only side effect
of an estimate: one promo use is consumed whenever a live code is given,
even a 0 % one, and that code is recorded on the estimate.

Complexity: O(1) per estimate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Protocol

from .entities import FareEstimate
from .enums import FARE_MULTIPLIERS, FUEL_LITRES_PER_KM, VehicleCategory
from .randomness import RandomSource


class PromoApplier(Protocol):
    def redeem(
        self, code: Optional[str], raw_fare: float
    ) -> tuple[float, float, Optional[str]]: ...


# ── Surge strategies ──────────────────────────────────────────────────


class SurgeStrategy(ABC):
    @abstractmethod
    def surcharge(self, distance_fare: float) -> float: ...


class NoSurge(SurgeStrategy):
    def surcharge(self, distance_fare: float) -> float:
        return 0.0


class RandomSurge(SurgeStrategy):
    """Models variable demand as a bounded, non-negative random surcharge."""

    def __init__(self, rng: RandomSource, max_fraction: float = 0.5):
        self.rng = rng
        self.max_fraction = max_fraction

    def surcharge(self, distance_fare: float) -> float:
        upper = self.max_fraction * distance_fare
        return round(max(0.0, self.rng.uniform(0.0, upper)), 2)


# ── Estimator facade ──────────────────────────────────────────────────


class FareEstimator:
    """High-level API used by the ride service and the quote endpoint."""

    def __init__(
        self,
        rng: RandomSource,
        base_fare: float = 30.0,
        rate_per_km: float = 10.0,
        surge: Optional[SurgeStrategy] = None,
        eta_base_minutes: int = 2,
        eta_per_km_range: tuple[float, float] = (2.0, 5.0),
        min_eta_minutes: int = 2,
    ):
        self.rng = rng
        self.base_fare = base_fare
        self.rate_per_km = rate_per_km
        self.surge = surge if surge is not None else RandomSurge(rng)
        self.eta_base_minutes = eta_base_minutes
        self.eta_per_km_range = eta_per_km_range
        self.min_eta_minutes = min_eta_minutes

    def distance_fare(self, distance_km: int, category: VehicleCategory) -> float:
        return self.rate_per_km * distance_km * FARE_MULTIPLIERS[category]

    def eta_minutes(self, distance_km: int) -> int:
        low, high = self.eta_per_km_range
        per_km = self.rng.uniform(low, high)
        return max(self.min_eta_minutes, round(self.eta_base_minutes + distance_km * per_km))

    @staticmethod
    def fuel_litres(distance_km: int, category: VehicleCategory) -> float:
        return round(FUEL_LITRES_PER_KM[category] * distance_km, 2)

    def estimate(
        self,
        distance_km: int,
        category: VehicleCategory,
        promo_code: Optional[str] = None,
        promos: Optional[PromoApplier] = None,
    ) -> FareEstimate:
        if distance_km <= 0:
            raise ValueError(f"distance_km must be positive, got {distance_km}")

        distance_fare = self.distance_fare(distance_km, category)
        surge = self.surge.surcharge(distance_fare)
        raw = self.base_fare + distance_fare + surge

        discounted, discount, applied = raw, 0.0, None
        if promos is not None:
            discounted, discount, applied = promos.redeem(promo_code, raw)

        return FareEstimate(
            base_fare=self.base_fare,
            distance_fare=round(distance_fare, 2),
            surge_amount=surge,
            promo_discount=round(discount, 2),
            final_fare=round(max(0.0, discounted), 2),
            eta_minutes=self.eta_minutes(distance_km),
            estimated_fuel_litres=self.fuel_litres(distance_km, category),
            promo_code=applied,
        )
