"""
Nearest-Driver Matching
=======================

1. **Filter**   -- skip every driver that is currently busy.
2. **Distance** -- draw a simulated driver-to-pickup distance,
   uniform(1, 11) km, for each available driver.
3. **Penalty**  -- add a fixed penalty (default 2 km) when the driver's
   vehicle category differs from the requested one, so a matching
   category wins unless the mismatched driver is much closer.
4. **Select**   -- keep the strict minimum; the first driver evaluated
   wins a tie.

Complexity
----------
O(D) per request where D = registered drivers.

**Note:** distance is synthetic.  A real deployment would replace
``simulated_distance`` with a routing-service lookup.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from .entities import Driver
from .enums import VehicleCategory
from .randomness import RandomSource


class DriverSource(Protocol):
    def list(self) -> list[Driver]: ...


class MatchingEngine:
    def __init__(
        self,
        rng: RandomSource,
        mismatch_penalty_km: float = 2.0,
        distance_range_km: tuple[float, float] = (1.0, 11.0),
    ):
        self.rng = rng
        self.mismatch_penalty_km = mismatch_penalty_km
        self.distance_range_km = distance_range_km

    def simulated_distance(self, driver: Driver, category: VehicleCategory) -> float:
        low, high = self.distance_range_km
        distance = self.rng.uniform(low, high)
        if driver.category != category:
            distance += self.mismatch_penalty_km
        return distance

    def rank(
        self, category: VehicleCategory, drivers: Iterable[Driver]
    ) -> Optional[Driver]:
        """Return the available driver with the smallest simulated distance."""
        best: Optional[Driver] = None
        best_distance = float("inf")
        for driver in drivers:
            if not driver.is_available:
                continue
            distance = self.simulated_distance(driver, category)
            if distance < best_distance:
                best, best_distance = driver, distance
        return best

    def select_driver(
        self, category: VehicleCategory, registry: DriverSource
    ) -> Optional[Driver]:
        return self.rank(category, registry.list())
