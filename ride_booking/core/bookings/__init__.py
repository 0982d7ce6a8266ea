# ride_booking/core/bookings/__init__.py
"""
Booking lifecycle.
"""

from ride_booking.core.bookings.assignment import Assignment, AssignmentResolver
from ride_booking.core.bookings.models import Booking, BookingDraft, Page
from ride_booking.core.bookings.repository import BookingFilter, BookingRepository
from ride_booking.core.bookings.service import BookingService, RideEstimate, generate_booking_code
from ride_booking.core.bookings.state_machine import BookingStateMachine

__all__ = [
    "Assignment",
    "AssignmentResolver",
    "Booking",
    "BookingDraft",
    "Page",
    "BookingFilter",
    "BookingRepository",
    "BookingService",
    "RideEstimate",
    "generate_booking_code",
    "BookingStateMachine",
]
