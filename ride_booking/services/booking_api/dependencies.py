# ride_booking/services/booking_api/dependencies.py
"""
Dependency injection for the booking API.

Long-lived resources (database pool, HTTP clients, notification hub) live in
an `AppContainer` built by the lifespan and stored on `app.state`; route
dependencies read them from there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Awaitable, Callable

import httpx
from fastapi import Depends, Header
from starlette.requests import HTTPConnection

from ride_booking.common.constants import PaymentMethod, TypeMsg, UserRole
from ride_booking.common.errors import AuthenticationError, AuthorizationError
from ride_booking.common.logger import log_info
from ride_booking.config.loader import Settings
from ride_booking.core.bookings import AssignmentResolver, BookingRepository, BookingService
from ride_booking.core.fleet.repository import FleetRepository
from ride_booking.core.fleet.service import FleetService
from ride_booking.core.geo.geocoder import GeoResolver
from ride_booking.core.geo.router import RouteEstimator
from ride_booking.core.notifications import NotificationHub
from ride_booking.core.pricing.service import FareCalculator
from ride_booking.core.users.models import User
from ride_booking.core.users.repository import UserRepository
from ride_booking.infra.database import DatabaseManager, close_db, init_db
from ride_booking.services.booking_api.auth import parse_bearer, verify_token


@dataclass
class AppContainer:
    """Everything the routes need, scoped to one application lifetime."""

    bookings: BookingService
    fleet: FleetRepository
    users: UserRepository
    hub: NotificationHub
    token_secret: str
    db: DatabaseManager | None = None
    vehicles: FleetService | None = None
    _closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.vehicles is None:
            self.vehicles = FleetService(self.fleet, self.hub)

    async def aclose(self) -> None:
        for closer in reversed(self._closers):
            await closer()
        self._closers.clear()


async def build_container(settings: Settings) -> AppContainer:
    """Connect storage, open HTTP clients and wire the booking service."""
    db = await init_db()
    hub = NotificationHub()

    geo = settings.geo
    geo_client = httpx.AsyncClient(headers={"User-Agent": geo.GEOCODER_USER_AGENT})
    router_client = httpx.AsyncClient()

    users = UserRepository(db)
    fleet = FleetRepository(db)
    resolver = GeoResolver(
        geo_client,
        base_url=geo.GEOCODER_URL,
        user_agent=geo.GEOCODER_USER_AGENT,
        timeout=geo.GEOCODER_TIMEOUT,
        language=geo.GEOCODER_LANGUAGE,
        country_codes=geo.GEOCODER_COUNTRY_CODES,
        viewbox=geo.GEOCODER_VIEWBOX,
    )
    estimator = RouteEstimator(
        router_client,
        base_url=geo.ROUTER_URL,
        timeout=geo.ROUTER_TIMEOUT,
        fallback_speed_kmh=geo.FALLBACK_SPEED_KMH,
    )
    service = BookingService(
        db,
        BookingRepository(db),
        users,
        fleet,
        AssignmentResolver(fleet),
        resolver,
        estimator,
        FareCalculator(),
        hub,
        default_vehicle_type=settings.bookings.DEFAULT_VEHICLE_TYPE,
        default_payment_method=PaymentMethod(settings.bookings.DEFAULT_PAYMENT_METHOD),
        code_attempts=settings.bookings.BOOKING_CODE_ATTEMPTS,
    )

    container = AppContainer(
        bookings=service,
        fleet=fleet,
        users=users,
        hub=hub,
        token_secret=settings.auth.TOKEN_SECRET,
        db=db,
    )
    container._closers.extend([close_db, geo_client.aclose, router_client.aclose, hub.close])
    await log_info("Booking API dependencies initialized", type_msg=TypeMsg.DEBUG)
    return container


# ===== GETTERS =====

def get_container(conn: HTTPConnection) -> AppContainer:
    container = getattr(conn.app.state, "container", None)
    if container is None:
        raise RuntimeError("AppContainer is not initialized. Is the lifespan running?")
    return container


def get_booking_service(container: Annotated[AppContainer, Depends(get_container)]) -> BookingService:
    return container.bookings


def get_fleet_repository(container: Annotated[AppContainer, Depends(get_container)]) -> FleetRepository:
    return container.fleet


def get_fleet_service(container: Annotated[AppContainer, Depends(get_container)]) -> FleetService:
    return container.vehicles


async def authenticate(container: AppContainer, token: str) -> User:
    """Resolve a bearer token to an active account."""
    claims = verify_token(token, container.token_secret)
    user = await container.users.get_by_id(claims.sub)
    if user is None or not user.is_active:
        raise AuthenticationError("Unknown or inactive user")
    return user


async def get_current_user(
    container: Annotated[AppContainer, Depends(get_container)],
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    return await authenticate(container, parse_bearer(authorization))


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Dependency factory restricting a route to some roles."""
    allowed = frozenset(roles)

    async def dependency(user: Annotated[User, Depends(get_current_user)]) -> User:
        if user.role not in allowed:
            raise AuthorizationError(
                "Insufficient role for this operation",
                details={"role": user.role.value, "allowed": sorted(r.value for r in allowed)},
            )
        return user

    return dependency


CurrentUser = Annotated[User, Depends(get_current_user)]
Customer = Annotated[User, Depends(require_roles(UserRole.CUSTOMER))]
Driver = Annotated[User, Depends(require_roles(UserRole.DRIVER))]
VendorOrAdmin = Annotated[User, Depends(require_roles(UserRole.VENDOR, UserRole.ADMIN))]
Admin = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
Bookings = Annotated[BookingService, Depends(get_booking_service)]
Fleet = Annotated[FleetRepository, Depends(get_fleet_repository)]
Vehicles = Annotated[FleetService, Depends(get_fleet_service)]
