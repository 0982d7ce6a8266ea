# ride_booking/services/booking_api/errors.py
"""
Exception handlers: every failure leaves the API as
{"success": false, "error_code", "message", "details"}.

Tracebacks are added to the body only when the app was built with
development settings (`app.state.expose_tracebacks`).
"""

from __future__ import annotations

import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ride_booking.common.errors import BookingError
from ride_booking.common.logger import log_error, log_warning
from ride_booking.config.loader import Settings


def _response(request: Request, status_code: int, body: dict[str, Any], exc: BaseException) -> JSONResponse:
    if getattr(request.app.state, "expose_tracebacks", False):
        body["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        await log_error(
            f"{request.method} {request.url.path} failed: {exc.error_code}: {exc.message}",
        )
    else:
        await log_warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}")
    return _response(request, exc.status_code, exc.to_dict(), exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = {
        "success": False,
        "error_code": "validation_error",
        "message": "Request validation failed",
        "details": {"errors": exc.errors()},
    }
    return _response(request, 422, body, exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await log_error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    body = {
        "success": False,
        "error_code": "internal_error",
        "message": "Internal server error",
        "details": {},
    }
    return _response(request, 500, body, exc)


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    app.state.expose_tracebacks = app_settings.system.is_development
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
