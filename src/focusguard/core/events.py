#!/usr/bin/env python3
"""
Event definitions and event bus.

The tracker and the air-writing controller publish their transitions here
so that HUDs, loggers and recorders can follow a session without being
wired into the per-frame callback.
"""

import logging
import threading
import time
from collections import deque
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Dict, Any, Optional
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)


# =============================================================================
# EVENT TYPES
# =============================================================================

class EventType(Enum):
    """All event types published by FocusGuard components."""

    # Session lifecycle
    SESSION_STARTED = auto()
    SESSION_PAUSED = auto()
    SESSION_RESUMED = auto()
    SESSION_FINALIZED = auto()

    # Presence
    PRESENCE_CHANGED = auto()     # PresenceState transition
    ABSENCE_STARTED = auto()      # New absence run
    WARNING_FIRED = auto()
    ALARM_STARTED = auto()
    ALARM_STOPPED = auto()

    # Gestures
    GESTURE_DETECTED = auto()     # Classified kind changed
    COMMAND_FIRED = auto()        # Debounced command executed


@dataclass
class Event:
    """A published event. Timestamp is wall-clock milliseconds."""
    type: EventType
    timestamp_ms: float
    data: Dict[str, Any] = field(default_factory=dict)
    source: str = ""  # Component that generated the event


# =============================================================================
# EVENT BUS
# =============================================================================

EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub.

    Handlers run synchronously by default since the core is driven from a
    single frame callback. Pass async_handlers=True to hand them to a
    thread pool instead. Handler errors are logged, never raised.
    """

    def __init__(
        self,
        history_size: int = 100,
        async_handlers: bool = False,
        max_workers: int = 2
    ):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._history: Deque[Event] = deque(maxlen=history_size)
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers) if async_handlers else None
        self._running = True

    def subscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """Subscribe to one event type, or to everything with None."""
        with self._lock:
            if event_type is None:
                self._global_handlers.append(handler)
            else:
                self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Optional[EventType], handler: EventHandler) -> bool:
        """Remove a handler. Returns True if it was registered."""
        with self._lock:
            handlers = self._global_handlers if event_type is None else self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
            return False

    def emit(self, event: Event) -> None:
        """Record the event and deliver it to subscribers."""
        if not self._running:
            return

        with self._lock:
            self._history.append(event)
            handlers = list(self._global_handlers) + list(self._handlers.get(event.type, []))

        for handler in handlers:
            if self._executor:
                self._executor.submit(self._call_handler, handler, event)
            else:
                self._call_handler(handler, event)

    def publish(
        self,
        event_type: EventType,
        source: str = "",
        timestamp_ms: Optional[float] = None,
        **data
    ) -> Event:
        """Build and emit an event in one call."""
        event = Event(
            type=event_type,
            timestamp_ms=timestamp_ms if timestamp_ms is not None else time.time() * 1000,
            data=data,
            source=source
        )
        self.emit(event)
        return event

    def _call_handler(self, handler: EventHandler, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(f"Event handler error for {event.type.name}: {e}")

    def get_history(self, event_type: Optional[EventType] = None, limit: int = 50) -> List[Event]:
        """Recent events, newest first."""
        with self._lock:
            events = [e for e in self._history if event_type is None or e.type == event_type]
        return events[-limit:][::-1]

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()

    def shutdown(self) -> None:
        """Stop delivering events."""
        self._running = False
        if self._executor:
            self._executor.shutdown(wait=True)


# =============================================================================
# HANDLERS
# =============================================================================

class EventLogger:
    """Handler that logs every event."""

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level
        self._logger = logging.getLogger("focusguard.events")

    def __call__(self, event: Event) -> None:
        self._logger.log(self.log_level, f"[{event.type.name}] {event.source}: {event.data}")


class EventFilter:
    """Pass only matching events through to a handler."""

    def __init__(
        self,
        handler: EventHandler,
        event_types: Optional[List[EventType]] = None,
        sources: Optional[List[str]] = None
    ):
        self.handler = handler
        self.event_types = set(event_types) if event_types else None
        self.sources = set(sources) if sources else None

    def __call__(self, event: Event) -> None:
        if self.event_types and event.type not in self.event_types:
            return
        if self.sources and event.source not in self.sources:
            return
        self.handler(event)
