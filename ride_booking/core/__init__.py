# ride_booking/core/__init__.py
"""
Domain core: geo, pricing, fleet, users, bookings and notifications.
Business rules only; transport concerns stay in ride_booking.services.
"""
