# ride_booking/shared/__init__.py
"""
Contracts shared between the domain core and the transport layer.
"""
