# tests/core/test_state_machine.py
"""
Tests for BookingStateMachine.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from ride_booking.common.constants import BookingStatus
from ride_booking.common.errors import InvalidStateError, InvalidTransitionError
from ride_booking.core.bookings.models import Booking
from ride_booking.core.bookings.state_machine import BookingStateMachine

NOW = datetime(2024, 5, 17, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_booking(booking_row_factory: Callable[..., dict[str, Any]]) -> Callable[..., Booking]:
    def make(**overrides: Any) -> Booking:
        return Booking.from_row(booking_row_factory(**overrides))
    return make


class TestInitialStatus:
    def test_confirmed_when_vehicle_and_vendor(self) -> None:
        assert BookingStateMachine.initial_status(True, True) == BookingStatus.CONFIRMED

    @pytest.mark.parametrize(("vehicle", "vendor"), [(False, False), (False, True), (True, False)])
    def test_pending_otherwise(self, vehicle: bool, vendor: bool) -> None:
        assert BookingStateMachine.initial_status(vehicle, vendor) == BookingStatus.PENDING


class TestDriverTransition:
    """Tests for the driver chain."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("confirmed", "driver_assigned"),
            ("driver_assigned", "arriving"),
            ("arriving", "in_ride"),
            ("in_ride", "completed"),
        ],
    )
    def test_valid_steps(self, make_booking, current: str, target: str) -> None:
        changes = BookingStateMachine.driver_transition(make_booking(status=current), target, NOW)
        assert changes["status"] == target

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("driver_assigned", "completed"),
            ("pending", "arriving"),
            ("arriving", "driver_assigned"),
            ("completed", "in_ride"),
            ("cancelled", "arriving"),
            ("in_ride", "cancelled"),
            ("confirmed", "confirmed"),
        ],
    )
    def test_invalid_steps(self, make_booking, current: str, target: str) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            BookingStateMachine.driver_transition(make_booking(status=current), target, NOW)
        assert exc_info.value.current_status == current

    def test_unknown_status_string(self, make_booking) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            BookingStateMachine.driver_transition(make_booking(status="arriving"), "teleported", NOW)
        assert exc_info.value.target_status == "teleported"

    def test_in_ride_stamps_start_time(self, make_booking) -> None:
        changes = BookingStateMachine.driver_transition(make_booking(status="arriving"), "in_ride", NOW)
        assert changes == {"status": "in_ride", "start_time": NOW}

    def test_completed_cash_marks_paid(self, make_booking) -> None:
        changes = BookingStateMachine.driver_transition(
            make_booking(status="in_ride", payment_method="cash"), "completed", NOW
        )
        assert changes == {
            "status": "completed",
            "end_time": NOW,
            "payment_status": "completed",
            "fare_paid": True,
        }

    def test_completed_online_payment_untouched(self, make_booking) -> None:
        changes = BookingStateMachine.driver_transition(
            make_booking(status="in_ride", payment_method="card"), "completed", NOW
        )
        assert "payment_status" not in changes
        assert "fare_paid" not in changes


class TestVendorTransition:
    """Tests for dashboard status changes."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("pending", "confirmed"),
            ("pending", "rejected"),
            ("confirmed", "driver_assigned"),
            ("confirmed", "rejected"),
            ("driver_assigned", "confirmed"),
        ],
    )
    def test_allowed(self, make_booking, current: str, target: str) -> None:
        changes = BookingStateMachine.vendor_transition(make_booking(status=current), BookingStatus(target))
        assert changes == {"status": target}

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("pending", "completed"),
            ("in_ride", "confirmed"),
            ("cancelled", "confirmed"),
            ("driver_assigned", "rejected"),
        ],
    )
    def test_rejected(self, make_booking, current: str, target: str) -> None:
        with pytest.raises(InvalidTransitionError):
            BookingStateMachine.vendor_transition(make_booking(status=current), BookingStatus(target))

    def test_same_status_is_noop(self, make_booking) -> None:
        assert BookingStateMachine.vendor_transition(make_booking(status="in_ride"), BookingStatus.IN_RIDE) == {}


class TestCancellation:
    """Tests for customer cancellation."""

    @pytest.mark.parametrize("status", ["pending", "confirmed", "driver_assigned", "arriving"])
    def test_cancellable(self, make_booking, status: str) -> None:
        changes = BookingStateMachine.cancellation(make_booking(status=status), "Plans changed", NOW)

        assert changes["status"] == "cancelled"
        assert changes["cancelled_by"] == "user"
        assert changes["cancellation_reason"] == "Plans changed"
        assert changes["cancelled_at"] == NOW

    @pytest.mark.parametrize("status", ["in_ride", "completed", "cancelled", "rejected"])
    def test_not_cancellable(self, make_booking, status: str) -> None:
        with pytest.raises(InvalidStateError) as exc_info:
            BookingStateMachine.cancellation(make_booking(status=status), None, NOW)

        assert exc_info.value.current_status == status
        assert exc_info.value.message == f"Cannot cancel ride with status: {status}"

    def test_default_reason(self, make_booking) -> None:
        changes = BookingStateMachine.cancellation(make_booking(), None, NOW)
        assert changes["cancellation_reason"] == "Cancelled by user"

    def test_completed_online_payment_is_refunded(self, make_booking) -> None:
        booking = make_booking(status="pending", payment_method="upi", payment_status="completed")

        changes = BookingStateMachine.cancellation(booking, None, NOW)

        assert changes["payment_status"] == "refunded"
        assert changes["payment_refunded_at"] == NOW

    @pytest.mark.parametrize(
        ("method", "payment_status"),
        [("cash", "completed"), ("card", "pending"), ("wallet", "failed")],
    )
    def test_no_refund_otherwise(self, make_booking, method: str, payment_status: str) -> None:
        booking = make_booking(payment_method=method, payment_status=payment_status)

        changes = BookingStateMachine.cancellation(booking, None, NOW)

        assert "payment_status" not in changes
