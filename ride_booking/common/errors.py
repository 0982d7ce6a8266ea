# ride_booking/common/errors.py
"""
Domain error hierarchy.
Each error carries the HTTP status and machine-readable code used by the API layer.
"""

from __future__ import annotations

from typing import Any


class BookingError(Exception):
    """Base class for every error raised by the booking domain."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(BookingError):
    """Required configuration is missing at startup."""
    error_code = "configuration_error"


class ValidationError(BookingError):
    """Missing or malformed input."""
    status_code = 422
    error_code = "validation_error"


class AuthenticationError(BookingError):
    """Missing, invalid or expired credentials."""
    status_code = 401
    error_code = "authentication_error"


class AuthorizationError(BookingError):
    """Actor is not permitted to perform the action."""
    status_code = 403
    error_code = "authorization_error"


class NotFoundError(BookingError):
    """Unknown booking, vehicle, user or address."""
    status_code = 404
    error_code = "not_found"


class DuplicateError(BookingError):
    """Resource with the same unique key already exists."""
    status_code = 409
    error_code = "duplicate"


class InvalidStateError(BookingError):
    """Operation is not allowed in the booking's current status."""
    status_code = 400
    error_code = "invalid_state"

    def __init__(self, message: str, *, current_status: str | None = None, details: dict[str, Any] | None = None) -> None:
        merged = dict(details or {})
        if current_status is not None:
            merged["current_status"] = current_status
        super().__init__(message, details=merged)
        self.current_status = current_status


class InvalidTransitionError(InvalidStateError):
    """Requested status transition is not part of the lifecycle."""
    error_code = "invalid_transition"

    def __init__(self, current_status: str, target_status: str) -> None:
        super().__init__(
            f"Cannot change booking status from {current_status} to {target_status}",
            current_status=current_status,
            details={"target_status": target_status},
        )
        self.target_status = target_status


class UpstreamError(BookingError):
    """External geocoder or router failed and no fallback applies."""
    status_code = 502
    error_code = "upstream_error"


class PersistenceError(BookingError):
    """Storage operation failed; the enclosing transaction was rolled back."""
    status_code = 500
    error_code = "persistence_error"


class ConflictError(PersistenceError):
    """Unique constraint violated."""
    error_code = "conflict"

    def __init__(self, message: str, *, constraint: str | None = None) -> None:
        super().__init__(message, details={"constraint": constraint} if constraint else None)
        self.constraint = constraint
