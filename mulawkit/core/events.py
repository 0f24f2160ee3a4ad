"""Conversion event model for mulawkit.

A conversion can be observed as a finite stream of events: one ProgressEvent
per encoded output sample, then exactly one terminal event (ConversionCompleted
or ConversionFailed). The WebSocket endpoint sends these as JSON.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, Field

from mulawkit.core.models import AudioMetadata


class EventType(str, Enum):
    PROGRESS = "progress"
    CONVERSION_COMPLETED = "conversion_completed"
    CONVERSION_FAILED = "conversion_failed"


class ConversionEvent(BaseModel):
    """Base event that all conversion events inherit from."""

    event_type: EventType
    timestamp: float = Field(default_factory=time.time)


class ProgressEvent(ConversionEvent):
    """Completion percentage after an output sample was produced."""

    event_type: EventType = EventType.PROGRESS
    percent: int = 0
    output_index: int = 0
    total: int = 0


class ConversionCompleted(ConversionEvent):
    """Terminal event carrying the encoded bytes and source metadata."""

    event_type: EventType = EventType.CONVERSION_COMPLETED
    encoded: bytes = b""
    metadata: AudioMetadata | None = None


class ConversionFailed(ConversionEvent):
    """Terminal event for a conversion that raised a ConversionError."""

    event_type: EventType = EventType.CONVERSION_FAILED
    code: str = ""
    message: str = ""


AnyConversionEvent = ProgressEvent | ConversionCompleted | ConversionFailed


EVENT_TYPE_MAP: dict[EventType, type[ConversionEvent]] = {
    EventType.PROGRESS: ProgressEvent,
    EventType.CONVERSION_COMPLETED: ConversionCompleted,
    EventType.CONVERSION_FAILED: ConversionFailed,
}
