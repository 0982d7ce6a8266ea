# ride_booking/common/constants.py
"""
Shared constants and enumerations.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Log message types."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """Account roles."""
    CUSTOMER = "customer"
    VENDOR = "vendor"
    DRIVER = "driver"
    ADMIN = "admin"


class ActorType(str, Enum):
    """Notification channel owners."""
    CUSTOMER = "customer"
    DRIVER = "driver"
    VENDOR = "vendor"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DRIVER_ASSIGNED = "driver_assigned"
    ARRIVING = "arriving"
    IN_RIDE = "in_ride"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class BookingType(str, Enum):
    """Instant or scheduled ride."""
    INSTANT = "instant"
    SCHEDULED = "scheduled"


class PaymentMethod(str, Enum):
    """Payment methods."""
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"
    UPI = "upi"


class PaymentStatus(str, Enum):
    """Payment statuses."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class CancelledBy(str, Enum):
    """Who cancelled a booking."""
    USER = "user"
    DRIVER = "driver"
    SYSTEM = "system"


class VehicleType(str, Enum):
    """Vehicle classes used for matching."""
    SEDAN = "sedan"
    SUV = "suv"
    HATCHBACK = "hatchback"
    LUXURY = "luxury"
    MINIVAN = "minivan"
    TRUCK = "truck"


# Statuses from which a customer may still cancel
CANCELLABLE_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.DRIVER_ASSIGNED,
    BookingStatus.ARRIVING,
})

# Driver and vehicle may still be swapped before the driver heads out
REASSIGNABLE_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.DRIVER_ASSIGNED,
})

# A driver streams their position while on the way and during the ride
TRACKABLE_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.DRIVER_ASSIGNED,
    BookingStatus.ARRIVING,
    BookingStatus.IN_RIDE,
})

STATUS_MESSAGES: dict[BookingStatus, str] = {
    BookingStatus.DRIVER_ASSIGNED: "Driver has been assigned to your booking",
    BookingStatus.ARRIVING: "Driver is on the way to pickup location",
    BookingStatus.IN_RIDE: "Your ride has started",
    BookingStatus.COMPLETED: "Your ride has been completed",
}
