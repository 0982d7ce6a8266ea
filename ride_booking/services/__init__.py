# ride_booking/services/__init__.py
"""
Service entrypoints.
"""
