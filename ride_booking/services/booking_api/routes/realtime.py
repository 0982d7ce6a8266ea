# ride_booking/services/booking_api/routes/realtime.py
"""
Realtime notification channel.

WebSocket /ws?token=<bearer>: the socket is registered in the hub under the
account's channel (customer id, driver profile id or vendor id) until it
disconnects. Incoming messages:
- {"action": "ping"} or "ping" -> {"event": "pong", "data": {}}
- {"action": "location:update", "booking_id", "lat", "lng", "heading"?, "speed_kmh"?}
  from a driver -> "driver:location" to the booking's customer, acknowledged
  with {"event": "location:ack", "data": {"booking_id", "delivered"}}

A rejected message is answered with {"event": "error", "data": <error envelope>}
and the socket stays open.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as PydanticValidationError

from ride_booking.common.constants import TypeMsg, UserRole
from ride_booking.common.errors import AuthenticationError, AuthorizationError, BookingError, ValidationError
from ride_booking.common.logger import log_debug, log_info
from ride_booking.core.users.models import User
from ride_booking.services.booking_api.dependencies import AppContainer, authenticate, get_container
from ride_booking.shared.models.booking_dto import DriverLocationMessage

router = APIRouter(tags=["Realtime"])

PONG: dict[str, Any] = {"event": "pong", "data": {}}
LOCATION_UPDATE = "location:update"


def _parse(raw: str) -> dict[str, Any]:
    """Bare "ping" or a JSON object with an "action" key."""
    if raw.strip() == "ping":
        return {"action": "ping"}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError("Message is not valid JSON") from None
    if not isinstance(data, dict):
        raise ValidationError("Message must be a JSON object")
    return data


def _error(exc: BookingError) -> dict[str, Any]:
    body = exc.to_dict()
    body.pop("success", None)
    return {"event": "error", "data": body}


async def _relay_location(container: AppContainer, user: User, data: dict[str, Any]) -> dict[str, Any]:
    if user.role != UserRole.DRIVER:
        raise AuthorizationError("Only drivers can share their location")
    fields = {k: v for k, v in data.items() if k != "action"}
    try:
        message = DriverLocationMessage.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid location update",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from None
    delivered = await container.bookings.relay_driver_location(user, message)
    return {"event": "location:ack", "data": {"booking_id": str(message.booking_id), "delivered": delivered}}


async def _handle(container: AppContainer, user: User, raw: str) -> dict[str, Any]:
    data = _parse(raw)
    action = data.get("action")
    if action == "ping":
        return PONG
    if action == LOCATION_UPDATE:
        return await _relay_location(container, user, data)
    raise ValidationError("Unknown action", details={"action": action})


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket, token: Optional[str] = Query(None)) -> None:
    container = get_container(websocket)

    try:
        if not token:
            raise AuthenticationError("Missing token")
        user = await authenticate(container, token)
    except AuthenticationError as e:
        await log_debug(f"WebSocket rejected: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    channel = user.channel()
    if channel is None:
        await log_debug(f"WebSocket rejected: user {user.id} has no linked profile")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    actor_type, actor_id = channel
    await websocket.accept()
    container.hub.connect(actor_id, actor_type, websocket)
    await log_info(f"WebSocket connected: {actor_type.value} {actor_id}", type_msg=TypeMsg.DEBUG)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                reply = await _handle(container, user, raw)
            except BookingError as e:
                await log_debug(f"WebSocket message from {actor_type.value} {actor_id} rejected: {e.message}")
                reply = _error(e)
            await websocket.send_json(reply)
    except WebSocketDisconnect:
        pass
    finally:
        container.hub.disconnect(websocket)
        await log_info(f"WebSocket disconnected: {actor_type.value} {actor_id}", type_msg=TypeMsg.DEBUG)
