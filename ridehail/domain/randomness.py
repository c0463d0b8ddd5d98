"""
Random source used for surge, ETA jitter and simulated driver distance.

Assumption
----------
There is no real geolocation in this system.  Driver-to-pickup distance,
demand surge and ETA jitter are all drawn from a random source instead.
The source is injected so tests can swap in a scripted one and assert on
bounds rather than exact values.
"""

from __future__ import annotations

import random
import threading
from typing import Optional, Protocol


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


class SharedRandom:
    """A seedable :class:`random.Random` that is safe to share between threads."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def uniform(self, a: float, b: float) -> float:
        with self._lock:
            return self._rng.uniform(a, b)
