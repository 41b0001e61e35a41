from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol, runtime_checkable

from cart_pilot.timing import now_utc_timestamp

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    TASK_STARTED = "task_started"
    THINKING = "thinking"
    ACTION = "action"
    OBSERVATION = "observation"
    TASK_COMPLETED = "task_completed"
    TASK_FAILED = "task_failed"
    TASK_ABORTED = "task_aborted"


@dataclass
class ProgressEvent:
    """Event delivered to the UI layer, in the order operations complete."""
    type: EventType
    message: str
    task_id: Optional[str] = None
    timestamp: float = field(default_factory=now_utc_timestamp)

    def to_dict(self) -> dict:
        return {"type": self.type.value, "message": self.message, "timestamp": self.timestamp, "task_id": self.task_id}


@runtime_checkable
class EventSink(Protocol):
    def emit(self, event: ProgressEvent) -> None: ...


class NullEventSink:
    """Drops every event; used when nobody listens."""

    def emit(self, event: ProgressEvent) -> None:
        return None


class QueueEventSink:
    """Channel-style sink backed by an asyncio.Queue."""

    def __init__(self, maxsize: int = 0):
        self.queue: asyncio.Queue[ProgressEvent] = asyncio.Queue(maxsize=maxsize)

    def emit(self, event: ProgressEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Progress queue full, dropping {event.type.value} event")

    def drain(self) -> list[ProgressEvent]:
        events = []
        while not self.queue.empty():
            events.append(self.queue.get_nowait())
        return events


class CallbackEventSink:
    """Observer-style sink that fans events out to subscribers."""

    def __init__(self, *callbacks: Callable[[ProgressEvent], None]):
        self._callbacks: list[Callable[[ProgressEvent], None]] = list(callbacks)

    def subscribe(self, callback: Callable[[ProgressEvent], None]) -> None:
        self._callbacks.append(callback)

    def unsubscribe(self, callback: Callable[[ProgressEvent], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, event: ProgressEvent) -> None:
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                logger.warning(f"Progress subscriber failed on {event.type.value} event", exc_info=True)


class LoggingEventSink:
    """Writes progress events to the cart_pilot logger at RESULT level."""

    def __init__(self, level: int = 35):
        self.level = level

    def emit(self, event: ProgressEvent) -> None:
        logger.log(self.level, event.message)


def safe_emit(sink: EventSink, event: ProgressEvent) -> None:
    """Deliver an event without letting a broken sink affect the caller."""
    try:
        sink.emit(event)
    except Exception:
        logger.warning(f"Event sink failed to deliver {event.type.value}", exc_info=True)


__all__ = [
    "EventType",
    "ProgressEvent",
    "EventSink",
    "NullEventSink",
    "QueueEventSink",
    "CallbackEventSink",
    "LoggingEventSink",
    "safe_emit",
]
