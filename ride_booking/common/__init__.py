# ride_booking/common/__init__.py
"""
Shared utilities: constants, errors and logging.
"""

from ride_booking.common.constants import TypeMsg
from ride_booking.common.errors import BookingError
from ride_booking.common.logger import get_logger, log_debug, log_error, log_info, log_warning, setup_logging

__all__ = [
    "TypeMsg",
    "BookingError",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "setup_logging",
]
