#!/usr/bin/env python3
# main.py
"""
Entry point of the ride booking API.
Serves ride_booking.services.booking_api with uvicorn.
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from ride_booking.common.constants import TypeMsg
from ride_booking.common.logger import log_error, log_info, setup_logging
from ride_booking.config import settings


async def run_booking_api() -> None:
    """Runs the booking API until interrupted."""
    server_cfg = settings.server
    await log_info(
        f"Starting booking API on {server_cfg.HOST}:{server_cfg.PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "ride_booking.services.booking_api.app:app",
        host=server_cfg.HOST,
        port=server_cfg.PORT,
        reload=settings.system.DEBUG,
        log_level="debug" if settings.system.DEBUG else "info",
    )
    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("Booking API: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


def main() -> int:
    setup_logging()
    try:
        asyncio.run(run_booking_api())
    except KeyboardInterrupt:
        print("\nStopped")
    except Exception as e:
        asyncio.run(log_error(f"Booking API crashed: {e}", exc_info=True))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
