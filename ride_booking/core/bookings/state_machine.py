# ride_booking/core/bookings/state_machine.py
"""
Booking lifecycle rules.

    pending -> confirmed -> driver_assigned -> arriving -> in_ride -> completed
    side branches: cancelled (customer), rejected (vendor)

Pure functions over a Booking: they validate a transition and return the
column changes to persist. Persistence and locking are the service's job.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ride_booking.common.constants import (
    CANCELLABLE_STATUSES,
    BookingStatus,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
)
from ride_booking.common.errors import InvalidStateError, InvalidTransitionError
from ride_booking.core.bookings.models import Booking


class BookingStateMachine:
    # Single step chain a driver walks through
    DRIVER_TRANSITIONS: dict[BookingStatus, list[BookingStatus]] = {
        BookingStatus.CONFIRMED: [BookingStatus.DRIVER_ASSIGNED],
        BookingStatus.DRIVER_ASSIGNED: [BookingStatus.ARRIVING],
        BookingStatus.ARRIVING: [BookingStatus.IN_RIDE],
        BookingStatus.IN_RIDE: [BookingStatus.COMPLETED],
    }

    DRIVER_TARGETS = frozenset({
        BookingStatus.DRIVER_ASSIGNED,
        BookingStatus.ARRIVING,
        BookingStatus.IN_RIDE,
        BookingStatus.COMPLETED,
    })

    VENDOR_TRANSITIONS: dict[BookingStatus, list[BookingStatus]] = {
        BookingStatus.PENDING: [BookingStatus.CONFIRMED, BookingStatus.REJECTED],
        BookingStatus.CONFIRMED: [BookingStatus.DRIVER_ASSIGNED, BookingStatus.REJECTED],
        BookingStatus.DRIVER_ASSIGNED: [BookingStatus.CONFIRMED],
    }

    @staticmethod
    def initial_status(vehicle_assigned: bool, vendor_assigned: bool) -> BookingStatus:
        if vehicle_assigned and vendor_assigned:
            return BookingStatus.CONFIRMED
        return BookingStatus.PENDING

    @classmethod
    def driver_transition(cls, booking: Booking, target: str, now: datetime) -> dict[str, Any]:
        """
        Validates a driver-requested status and returns the changes.

        Raises:
            InvalidTransitionError: Target outside the driver chain or not
                the next step from the current status
        """
        current = booking.status
        try:
            new_status = BookingStatus(target)
        except ValueError:
            raise InvalidTransitionError(current.value, str(target)) from None

        if new_status not in cls.DRIVER_TARGETS or new_status not in cls.DRIVER_TRANSITIONS.get(current, []):
            raise InvalidTransitionError(current.value, new_status.value)

        changes: dict[str, Any] = {"status": new_status.value}
        if new_status == BookingStatus.IN_RIDE:
            changes["start_time"] = now
        elif new_status == BookingStatus.COMPLETED:
            changes["end_time"] = now
            if booking.payment.method == PaymentMethod.CASH:
                changes["payment_status"] = PaymentStatus.COMPLETED.value
                changes["fare_paid"] = True
        return changes

    @classmethod
    def vendor_transition(cls, booking: Booking, target: BookingStatus) -> dict[str, Any]:
        """Status change requested from the vendor dashboard."""
        if target == booking.status:
            return {}
        if target not in cls.VENDOR_TRANSITIONS.get(booking.status, []):
            raise InvalidTransitionError(booking.status.value, target.value)
        return {"status": target.value}

    @staticmethod
    def cancellation(booking: Booking, reason: str | None, now: datetime) -> dict[str, Any]:
        """
        Customer cancellation. A completed online payment is flagged refunded;
        the refund itself is handled outside this service.

        Raises:
            InvalidStateError: Booking is already in progress or finished
        """
        if booking.status not in CANCELLABLE_STATUSES:
            raise InvalidStateError(
                f"Cannot cancel ride with status: {booking.status.value}",
                current_status=booking.status.value,
            )

        changes: dict[str, Any] = {
            "status": BookingStatus.CANCELLED.value,
            "cancelled_by": CancelledBy.USER.value,
            "cancellation_reason": reason or "Cancelled by user",
            "cancelled_at": now,
        }
        if booking.payment.is_online and booking.payment.status == PaymentStatus.COMPLETED:
            changes["payment_status"] = PaymentStatus.REFUNDED.value
            changes["payment_refunded_at"] = now
        return changes
