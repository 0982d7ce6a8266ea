# ride_booking/services/booking_api/routes/__init__.py
"""
REST and WebSocket routers of the booking API.
"""

from ride_booking.services.booking_api.routes.bookings import router as bookings_router
from ride_booking.services.booking_api.routes.driver import router as driver_router
from ride_booking.services.booking_api.routes.realtime import router as realtime_router
from ride_booking.services.booking_api.routes.rides import router as rides_router
from ride_booking.services.booking_api.routes.vehicles import router as vehicles_router

__all__ = [
    "bookings_router",
    "driver_router",
    "realtime_router",
    "rides_router",
    "vehicles_router",
]
