"""
Demo seed -- populates a fresh ride service with sample data for reviewers.

Loaded by the app factory when ``SEED_DEMO_DATA`` is enabled.

Creates:
  - 3 sample drivers (two sedans, one compact)
  - 2 sample promos (FIRST50 single-use, SAVE20 five uses)
"""

import logging

from ridehail.domain.enums import VehicleCategory
from ridehail.services.rides import RideService

logger = logging.getLogger(__name__)


DRIVERS = [
    {"name": "Aarav Etioson", "model": "Toyota Etios", "plate": "TN07EX1234", "category": VehicleCategory.SEDAN},
    {"name": "Ryder Dzirex", "model": "Swift Dzire", "plate": "TN11DZ5521", "category": VehicleCategory.SEDAN},
    {"name": "Ethan iDrive", "model": "Hyundai i20", "plate": "TN09I27711", "category": VehicleCategory.COMPACT},
]

PROMOS = [
    {"code": "FIRST50", "percent": 50.0, "max_uses": 1},  # 50 % off the first ride
    {"code": "SAVE20", "percent": 20.0, "max_uses": 5},
]


def seed_demo(service: RideService) -> None:
    if service.list_drivers() or service.list_promos():
        logger.info("Ride service already seeded. Skipping.")
        return

    for d in DRIVERS:
        service.register_driver(d["name"], d["model"], d["plate"], d["category"])
    for p in PROMOS:
        service.add_promo(p["code"], p["percent"], p["max_uses"])

    logger.info("Seeded %d drivers and %d promos", len(DRIVERS), len(PROMOS))
