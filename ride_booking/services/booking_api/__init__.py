# ride_booking/services/booking_api/__init__.py
"""
HTTP/WebSocket API of the booking marketplace.
"""

from ride_booking.services.booking_api.app import create_app

__all__ = ["create_app"]
