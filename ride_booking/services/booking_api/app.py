# ride_booking/services/booking_api/app.py
"""
FastAPI application for the booking marketplace.

REST under /api, realtime notifications on WebSocket /ws, health on /health.
Resources are created in the lifespan and torn down on shutdown.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ride_booking import __version__
from ride_booking.common.constants import TypeMsg
from ride_booking.common.logger import log_info, setup_logging
from ride_booking.config import Settings, settings
from ride_booking.services.booking_api.dependencies import AppContainer, build_container, get_container
from ride_booking.services.booking_api.errors import register_exception_handlers
from ride_booking.services.booking_api.routes import (
    bookings_router,
    driver_router,
    realtime_router,
    rides_router,
    vehicles_router,
)
from ride_booking.shared.models.common import HealthStatus

ContainerFactory = Callable[[Settings], Awaitable[AppContainer]]


def create_app(
    container_factory: ContainerFactory = build_container,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Builds the application; tests pass their own container factory."""
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        app.state.started_at = time.monotonic()
        app.state.container = await container_factory(cfg)
        await log_info(
            f"{cfg.system.PROJECT_NAME} {__version__} started ({cfg.system.ENVIRONMENT})",
            type_msg=TypeMsg.INFO,
        )
        try:
            yield
        finally:
            await app.state.container.aclose()
            app.state.container = None
            await log_info("Booking API stopped", type_msg=TypeMsg.INFO)

    app = FastAPI(
        title=cfg.system.PROJECT_NAME,
        description="Ride booking marketplace: booking lifecycle and realtime notifications.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, cfg)

    for router in (bookings_router, rides_router, driver_router, vehicles_router):
        app.include_router(router, prefix="/api")
    app.include_router(realtime_router)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check(request: Request) -> HealthStatus:
        container = get_container(request)
        dependencies: dict[str, str] = {}
        if container.db is not None:
            healthy = await container.db.health_check()
            dependencies["postgres"] = "healthy" if healthy else "unhealthy"
        degraded = any(state != "healthy" for state in dependencies.values())
        return HealthStatus(
            service="booking_api",
            status="degraded" if degraded else "healthy",
            version=__version__,
            uptime_seconds=round(time.monotonic() - request.app.state.started_at, 1),
            dependencies=dependencies,
            connections=container.hub.get_stats(),
        )

    return app


app = create_app()
