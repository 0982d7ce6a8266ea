# ride_booking/shared/events/base.py
"""
Base classes for domain events.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, Field


class EventMetadata(BaseModel):
    """Tracing metadata attached to every event."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: str | None = None
    source_service: str = "ride_booking"
    version: int = 1


class DomainEvent(BaseModel):
    """
    Base class for all domain events.

    Events are immutable snapshots, serialisable to JSON, and identified by
    `metadata.event_id` so a client can drop duplicates.
    """

    event_type: str = ""
    metadata: EventMetadata = Field(default_factory=EventMetadata)

    model_config = {"frozen": True}

    def payload(self) -> dict[str, Any]:
        """Event fields without the envelope keys, JSON compatible."""
        data = self.model_dump(mode="json", exclude={"event_type", "metadata"})
        data["event_id"] = self.metadata.event_id
        data["timestamp"] = self.metadata.timestamp.isoformat().replace("+00:00", "Z")
        return data

    def to_message(self) -> dict[str, Any]:
        return {"event": self.event_type, "data": self.payload()}

    def to_json(self) -> str:
        return self.model_dump_json()

    @property
    def event_id(self) -> str:
        return self.metadata.event_id


EventT = TypeVar("EventT", bound=DomainEvent)
