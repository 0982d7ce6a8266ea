# ride_booking/core/notifications/__init__.py
"""
Realtime notifications for customers, drivers and vendors.
"""

from ride_booking.core.notifications.hub import ConnectionHandle, NotificationHub

__all__ = [
    "ConnectionHandle",
    "NotificationHub",
]
