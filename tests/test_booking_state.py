"""Unit tests for booking state transitions and the booking ledger."""

from datetime import datetime, timezone

import pytest

from ridehail.domain.entities import Booking, InvalidStateTransition
from ridehail.domain.enums import BookingStatus, ErrorCode, VehicleCategory
from tests.conftest import make_estimate

NOW = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def _booking(**overrides) -> Booking:
    fields = dict(
        id=1,
        rider="pravin",
        pickup="Airport",
        drop="Central",
        category=VehicleCategory.SEDAN,
        distance_km=10,
        driver_id=1,
        estimated_fare=150.0,
        eta_minutes=12,
        estimated_fuel_litres=0.9,
        created_at=NOW,
    )
    fields.update(overrides)
    return Booking(**fields)


def _book(ledger, driver, rider="pravin", fare=150.0):
    outcome = ledger.create(
        rider, "Airport", "Central", 10, VehicleCategory.SEDAN,
        make_estimate(fare, promo_code="SAVE20"), driver,
    )
    assert outcome, outcome.rejection
    return outcome.value


class TestBookingStateMachine:
    def test_initial_status_is_active(self):
        assert _booking().status == BookingStatus.ACTIVE

    def test_active_to_completed(self):
        booking = _booking()
        booking.transition_to(BookingStatus.COMPLETED, NOW)
        assert booking.status == BookingStatus.COMPLETED
        assert booking.completed_at == NOW
        assert booking.cancelled_at is None

    def test_active_to_cancelled(self):
        booking = _booking()
        booking.transition_to(BookingStatus.CANCELLED, NOW)
        assert booking.cancelled_at == NOW

    @pytest.mark.parametrize("terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
    def test_terminal_states_are_final(self, terminal):
        booking = _booking(status=terminal)
        for target in BookingStatus:
            with pytest.raises(InvalidStateTransition):
                booking.transition_to(target, NOW)

    def test_active_to_active_fails(self):
        with pytest.raises(InvalidStateTransition):
            _booking().transition_to(BookingStatus.ACTIVE, NOW)


class TestCreate:
    def test_create_marks_driver_busy(self, ledger, registry, driver, clock):
        booking = _book(ledger, driver)
        assert booking.id == 1
        assert booking.status == BookingStatus.ACTIVE
        assert booking.created_at == clock.now
        assert booking.driver_id == driver.id
        assert booking.estimated_fare == 150.0
        assert booking.eta_minutes == 12
        assert booking.estimated_fuel_litres == 0.84
        assert booking.applied_promo == "SAVE20"
        assert not registry.find(driver.id).is_available

    def test_no_driver(self, ledger):
        outcome = ledger.create(
            "pravin", "A", "B", 5, VehicleCategory.SEDAN, make_estimate(), None
        )
        assert outcome.rejection.code == ErrorCode.UNAVAILABLE
        assert ledger.all() == []

    def test_driver_taken_in_the_meantime(self, ledger, registry, driver):
        registry.claim(driver.id)
        outcome = ledger.create(
            "pravin", "A", "B", 5, VehicleCategory.SEDAN, make_estimate(), driver
        )
        assert outcome.rejection.code == ErrorCode.UNAVAILABLE
        assert ledger.all() == []

    def test_ids_are_monotonic(self, ledger, registry, driver):
        first = _book(ledger, driver)
        ledger.complete(first.id, "pravin")
        second = _book(ledger, driver)
        assert second.id == first.id + 1


class TestComplete:
    def test_complete_releases_driver(self, ledger, registry, driver, clock):
        booking = _book(ledger, driver)
        clock.advance(minutes=20)
        outcome = ledger.complete(booking.id, "pravin")
        assert outcome
        assert outcome.value.status == BookingStatus.COMPLETED
        assert outcome.value.completed_at == clock.now
        assert registry.find(driver.id).is_available

    def test_unknown_booking(self, ledger):
        assert ledger.complete(99, "pravin").rejection.code == ErrorCode.NOT_FOUND

    def test_wrong_rider(self, ledger, registry, driver):
        booking = _book(ledger, driver)
        outcome = ledger.complete(booking.id, "mallory")
        assert outcome.rejection.code == ErrorCode.UNAUTHORIZED
        assert ledger.by_id(booking.id).status == BookingStatus.ACTIVE
        assert not registry.find(driver.id).is_available

    def test_second_complete_changes_nothing(self, ledger, registry, driver, clock):
        booking = _book(ledger, driver)
        ledger.complete(booking.id, "pravin")
        completed_at = ledger.by_id(booking.id).completed_at
        _book(ledger, driver, rider="someone-else")  # driver busy again

        clock.advance(minutes=5)
        outcome = ledger.complete(booking.id, "pravin")
        assert outcome.rejection.code == ErrorCode.INVALID_STATE
        assert ledger.by_id(booking.id).completed_at == completed_at
        assert not registry.find(driver.id).is_available


class TestCancel:
    def test_free_within_grace_period(self, ledger, registry, driver, clock):
        booking = _book(ledger, driver)
        clock.advance(minutes=2, seconds=59)
        outcome = ledger.cancel(booking.id, "pravin")
        assert outcome.value == 0.0
        cancelled = ledger.by_id(booking.id)
        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.cancelled_at == clock.now
        assert cancelled.cancellation_fee == 0.0
        assert registry.find(driver.id).is_available

    def test_minimum_fee(self, ledger, driver, clock):
        booking = _book(ledger, driver, fare=150.0)
        clock.advance(minutes=3)
        assert ledger.cancel(booking.id, "pravin").value == 20.0

    def test_percentage_fee(self, ledger, driver, clock):
        booking = _book(ledger, driver, fare=500.0)
        clock.advance(minutes=3)
        assert ledger.cancel(booking.id, "pravin").value == 50.0

    def test_clock_skew_is_free(self, ledger, driver, clock):
        booking = _book(ledger, driver)
        clock.advance(minutes=-10)
        assert ledger.cancel(booking.id, "pravin").value == 0.0

    def test_configurable_policy(self, registry, driver, clock):
        from ridehail.infrastructure.repositories import BookingLedger

        ledger = BookingLedger(
            registry,
            clock=clock,
            free_cancellation_minutes=0,
            min_cancellation_fee=5.0,
            cancellation_fee_rate=0.5,
        )
        booking = _book(ledger, driver, fare=100.0)
        clock.advance(minutes=1)
        assert ledger.cancel(booking.id, "pravin").value == 50.0

    def test_wrong_rider(self, ledger, driver):
        booking = _book(ledger, driver)
        assert ledger.cancel(booking.id, "mallory").rejection.code == ErrorCode.UNAUTHORIZED

    def test_second_cancel_changes_nothing(self, ledger, driver, clock):
        booking = _book(ledger, driver)
        ledger.cancel(booking.id, "pravin")
        cancelled_at = ledger.by_id(booking.id).cancelled_at
        clock.advance(minutes=10)
        assert ledger.cancel(booking.id, "pravin").rejection.code == ErrorCode.INVALID_STATE
        assert ledger.by_id(booking.id).cancelled_at == cancelled_at
        assert ledger.by_id(booking.id).cancellation_fee == 0.0

    def test_complete_after_cancel_fails(self, ledger, driver):
        booking = _book(ledger, driver)
        ledger.cancel(booking.id, "pravin")
        assert ledger.complete(booking.id, "pravin").rejection.code == ErrorCode.INVALID_STATE


class TestRate:
    def test_rate_completed_booking_once(self, ledger, registry, driver):
        booking = _book(ledger, driver)
        ledger.complete(booking.id, "pravin")
        outcome = ledger.rate(booking.id, "pravin", 4)
        assert outcome.value.average_rating == 4.0
        assert ledger.by_id(booking.id).rating == 4
        assert ledger.rate(booking.id, "pravin", 5).rejection.code == ErrorCode.INVALID_STATE
        assert registry.find(driver.id).rating_count == 1

    def test_active_booking_cannot_be_rated(self, ledger, driver):
        booking = _book(ledger, driver)
        assert ledger.rate(booking.id, "pravin", 5).rejection.code == ErrorCode.INVALID_STATE

    def test_only_the_rider_rates(self, ledger, driver):
        booking = _book(ledger, driver)
        ledger.complete(booking.id, "pravin")
        assert ledger.rate(booking.id, "mallory", 1).rejection.code == ErrorCode.UNAUTHORIZED

    def test_invalid_stars_leave_booking_unrated(self, ledger, driver):
        booking = _book(ledger, driver)
        ledger.complete(booking.id, "pravin")
        assert ledger.rate(booking.id, "pravin", 0).rejection.code == ErrorCode.INVALID_INPUT
        assert ledger.by_id(booking.id).rating is None
        assert ledger.rate(booking.id, "pravin", 3)


class TestQueries:
    def test_by_rider_and_active(self, ledger, registry):
        d1 = registry.register("A", "M", "P1", VehicleCategory.SEDAN)
        d2 = registry.register("B", "M", "P2", VehicleCategory.SEDAN)
        d3 = registry.register("C", "M", "P3", VehicleCategory.SEDAN)
        first = _book(ledger, d1, rider="pravin")
        second = _book(ledger, d2, rider="pravin")
        _book(ledger, d3, rider="other")
        ledger.complete(first.id, "pravin")

        assert [b.id for b in ledger.by_rider("pravin")] == [first.id, second.id]
        assert [b.id for b in ledger.active_by_rider("pravin")] == [second.id]
        assert [b.id for b in ledger.all()] == [1, 2, 3]
        assert ledger.by_rider("nobody") == []

    def test_by_id_returns_snapshot(self, ledger, driver):
        booking = _book(ledger, driver)
        snapshot = ledger.by_id(booking.id)
        snapshot.status = BookingStatus.CANCELLED
        assert ledger.by_id(booking.id).status == BookingStatus.ACTIVE

    def test_by_id_missing(self, ledger):
        assert ledger.by_id(1) is None


class TestDriverRemovalDuringBooking:
    def test_busy_driver_removable_after_completion(self, ledger, registry, driver):
        booking = _book(ledger, driver)
        assert not registry.remove(driver.id)
        ledger.complete(booking.id, "pravin")
        assert registry.remove(driver.id)
