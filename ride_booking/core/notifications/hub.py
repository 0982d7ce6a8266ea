# ride_booking/core/notifications/hub.py
"""
Registry of live client connections.

One mapping per actor type from actor id to its current connection. A new
connection from the same actor replaces the old one. Delivery is
best-effort and at-most-once: events for offline actors are dropped, never
queued, so clients must refetch state after reconnecting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import UUID

from ride_booking.common.constants import ActorType, TypeMsg
from ride_booking.common.logger import log_info, log_warning
from ride_booking.shared.events.base import DomainEvent


class ConnectionHandle(Protocol):
    """Anything that can push JSON to a client (a FastAPI WebSocket qualifies)."""

    async def send_json(self, data: Any) -> None: ...


@dataclass
class _Registration:
    actor_id: str
    actor_type: ActorType
    handle: ConnectionHandle
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationHub:
    """
    Created at application startup and closed at shutdown; tests build
    their own instances.

    connect/disconnect are plain dict operations with no await in between,
    so they are atomic on the event loop and need no lock.
    """

    def __init__(self) -> None:
        self._channels: dict[ActorType, dict[str, _Registration]] = {t: {} for t in ActorType}
        self._total_connections = 0
        self._total_sent = 0
        self._total_dropped = 0
        self._closed = False

    @staticmethod
    def _key(actor_id: str | UUID) -> str:
        return str(actor_id)

    def connect(self, actor_id: str | UUID, actor_type: ActorType, handle: ConnectionHandle) -> None:
        """Registers `handle` for the actor, superseding any earlier connection."""
        self._channels[ActorType(actor_type)][self._key(actor_id)] = _Registration(
            actor_id=self._key(actor_id),
            actor_type=ActorType(actor_type),
            handle=handle,
        )
        self._total_connections += 1

    def disconnect(self, handle: ConnectionHandle) -> bool:
        """
        Removes whichever entry points at `handle`.
        Returns False if it was already gone (e.g. superseded).
        """
        for channel in self._channels.values():
            for key, registration in list(channel.items()):
                if registration.handle is handle:
                    del channel[key]
                    return True
        return False

    def is_connected(self, actor_id: str | UUID, actor_type: ActorType) -> bool:
        return self._key(actor_id) in self._channels[ActorType(actor_type)]

    async def emit(
        self,
        actor_id: str | UUID | None,
        actor_type: ActorType,
        event: str,
        payload: dict[str, Any],
    ) -> bool:
        """
        Sends `{"event": event, "data": payload}` to one actor.
        Never raises; returns whether the message was handed to a connection.
        """
        if actor_id is None:
            return False

        registration = self._channels[ActorType(actor_type)].get(self._key(actor_id))
        if registration is None:
            self._total_dropped += 1
            await log_info(
                f"{actor_type.value} {actor_id} offline, dropped {event}",
                type_msg=TypeMsg.DEBUG,
            )
            return False

        return await self._send(registration, {"event": event, "data": payload})

    async def publish(self, actor_id: str | UUID | None, actor_type: ActorType, event: DomainEvent) -> bool:
        """emit() for a typed event."""
        return await self.emit(actor_id, actor_type, event.event_type, event.payload())

    async def broadcast(self, actor_type: ActorType, event: str, payload: dict[str, Any]) -> int:
        """Sends to every connected actor of a type; returns the delivered count."""
        message = {"event": event, "data": payload}
        delivered = 0
        # Snapshot: failed sends unregister handles while we iterate
        for registration in list(self._channels[ActorType(actor_type)].values()):
            if await self._send(registration, message):
                delivered += 1
        return delivered

    async def _send(self, registration: _Registration, message: dict[str, Any]) -> bool:
        try:
            await registration.handle.send_json(message)
        except Exception as e:
            # Broken socket: forget it, the client reconnects and refetches
            self._total_dropped += 1
            self.disconnect(registration.handle)
            await log_warning(
                f"Delivery of {message['event']} to {registration.actor_type.value} "
                f"{registration.actor_id} failed: {e}"
            )
            return False
        self._total_sent += 1
        return True

    async def close(self) -> None:
        """Forgets every connection at shutdown."""
        active = sum(len(c) for c in self._channels.values())
        for channel in self._channels.values():
            channel.clear()
        self._closed = True
        await log_info(f"Notification hub closed ({active} connections released)", type_msg=TypeMsg.INFO)

    def get_stats(self) -> dict[str, Any]:
        return {
            "active_connections": {t.value: len(c) for t, c in self._channels.items()},
            "total_connections_ever": self._total_connections,
            "total_messages_sent": self._total_sent,
            "total_messages_dropped": self._total_dropped,
            "closed": self._closed,
        }
