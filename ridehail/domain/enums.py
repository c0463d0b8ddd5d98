"""Domain enumerations, per-category tariffs and state-transition rules."""

import enum


class VehicleCategory(str, enum.Enum):
    COMPACT = "COMPACT"
    SEDAN = "SEDAN"
    SUV = "SUV"

    @classmethod
    def _missing_(cls, value):
        # Case-insensitive lookup; "MINI" is the legacy name for COMPACT.
        if isinstance(value, str):
            key = value.strip().upper()
            if key == "MINI":
                return cls.COMPACT
            for member in cls:
                if member.value == key:
                    return member
        return None


# Multiplier applied to the per-km rate
FARE_MULTIPLIERS: dict[VehicleCategory, float] = {
    VehicleCategory.COMPACT: 1.0,
    VehicleCategory.SEDAN: 1.3,
    VehicleCategory.SUV: 1.6,
}

# Litres of fuel burnt per km
FUEL_LITRES_PER_KM: dict[VehicleCategory, float] = {
    VehicleCategory.COMPACT: 0.07,
    VehicleCategory.SEDAN: 0.09,
    VehicleCategory.SUV: 0.12,
}


class BookingStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# State machine: maps current status -> set of valid next statuses
BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.ACTIVE: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


class ErrorCode(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    UNAUTHORIZED = "UNAUTHORIZED"
    UNAVAILABLE = "UNAVAILABLE"
    CONFLICT = "CONFLICT"
    INVALID_INPUT = "INVALID_INPUT"
