# ride_booking/__init__.py
"""
Ride booking marketplace backend.
Booking lifecycle, fare estimation and realtime notifications for customers, vendors and drivers.
"""

__version__ = "1.0.0"
