#!/usr/bin/env python3
"""
Event Bus Tests
"""

import sys
import unittest
from unittest.mock import Mock
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from focusguard.core.events import Event, EventBus, EventFilter, EventLogger, EventType


class TestEventBus(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus(history_size=5)

    def test_typed_subscription(self):
        handler = Mock()
        self.bus.subscribe(EventType.WARNING_FIRED, handler)

        self.bus.publish(EventType.WARNING_FIRED, source="session", timestamp_ms=1, elapsed_sec=10)
        self.bus.publish(EventType.ALARM_STARTED, source="session", timestamp_ms=2)

        handler.assert_called_once()
        event = handler.call_args[0][0]
        self.assertEqual(event.data, {"elapsed_sec": 10})
        self.assertEqual(event.source, "session")

    def test_global_subscription(self):
        handler = Mock()
        self.bus.subscribe(None, handler)
        self.bus.publish(EventType.SESSION_STARTED)
        self.bus.publish(EventType.SESSION_FINALIZED)
        self.assertEqual(handler.call_count, 2)

    def test_unsubscribe(self):
        handler = Mock()
        self.bus.subscribe(EventType.SESSION_STARTED, handler)
        self.assertTrue(self.bus.unsubscribe(EventType.SESSION_STARTED, handler))
        self.assertFalse(self.bus.unsubscribe(EventType.SESSION_STARTED, handler))
        self.bus.publish(EventType.SESSION_STARTED)
        handler.assert_not_called()

    def test_handler_error_is_logged(self):
        failing = Mock(side_effect=RuntimeError("boom"))
        after = Mock()
        self.bus.subscribe(None, failing)
        self.bus.subscribe(None, after)

        with self.assertLogs("focusguard.core.events", level="ERROR"):
            self.bus.publish(EventType.SESSION_STARTED)
        after.assert_called_once()

    def test_history_bounded_newest_first(self):
        for i in range(8):
            self.bus.publish(EventType.PRESENCE_CHANGED, timestamp_ms=i)
        history = self.bus.get_history()
        self.assertEqual([e.timestamp_ms for e in history], [7, 6, 5, 4, 3])
        self.assertEqual(len(self.bus.get_history(limit=2)), 2)

        self.bus.clear_history()
        self.assertEqual(self.bus.get_history(), [])

    def test_shutdown_stops_delivery(self):
        handler = Mock()
        self.bus.subscribe(None, handler)
        self.bus.shutdown()
        self.bus.publish(EventType.SESSION_STARTED)
        handler.assert_not_called()

    def test_async_handlers(self):
        bus = EventBus(async_handlers=True)
        handler = Mock()
        bus.subscribe(None, handler)
        bus.publish(EventType.SESSION_STARTED)
        bus.shutdown()
        handler.assert_called_once()


class TestHandlers(unittest.TestCase):

    def test_filter_by_type_and_source(self):
        inner = Mock()
        handler = EventFilter(inner, event_types=[EventType.COMMAND_FIRED], sources=["air_writer"])

        handler(Event(EventType.COMMAND_FIRED, 0, source="air_writer"))
        handler(Event(EventType.COMMAND_FIRED, 0, source="session"))
        handler(Event(EventType.GESTURE_DETECTED, 0, source="air_writer"))

        inner.assert_called_once()

    def test_event_logger(self):
        with self.assertLogs("focusguard.events", level="INFO") as logs:
            EventLogger()(Event(EventType.ALARM_STARTED, 0, {"elapsed_sec": 31}, "session"))
        self.assertIn("ALARM_STARTED", logs.output[0])


if __name__ == "__main__":
    unittest.main(verbosity=2)
