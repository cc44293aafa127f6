#!/usr/bin/env python3
"""
Voice Alerts
============
Speech and alarm output using pyttsx3.
Non-blocking: a worker thread owns the speech engine.
"""

import logging
import threading
import queue
from typing import Any, Optional

from ..core.config import VoiceConfig

logger = logging.getLogger(__name__)


class VoiceAlertSink:
    """
    AlertSink backed by text-to-speech.

    speak() replaces whatever is still queued, so a stale warning is never
    read out after the user has come back. The alarm is a phrase repeated
    every alarm_interval_sec until stop_alarm().
    """

    def __init__(self, config: Optional[VoiceConfig] = None, engine: Any = None):
        """
        Args:
            config: Voice configuration
            engine: Pre-built pyttsx3 engine (default: pyttsx3.init())
        """
        self.config = config or VoiceConfig()
        if engine is None:
            import pyttsx3
            engine = pyttsx3.init()
        self.engine = engine
        self.engine.setProperty('rate', self.config.rate)
        self.engine.setProperty('volume', self.config.volume)

        self._queue: queue.Queue = queue.Queue()
        self._running = True
        self._thread = threading.Thread(target=self._worker, daemon=True)
        self._thread.start()

        self._alarm_stop = threading.Event()
        self._alarm_thread: Optional[threading.Thread] = None

    def _worker(self):
        """Background worker that processes the speech queue."""
        while self._running:
            try:
                text = self._queue.get(timeout=0.5)
            except queue.Empty:
                continue
            if text is None:  # Shutdown signal
                break
            try:
                self.engine.say(text)
                self.engine.runAndWait()
            except RuntimeError as e:
                logger.error(f"Speech failed: {e}")

    def _drain(self):
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def speak(self, text: str) -> None:
        """Queue text, dropping anything not yet spoken."""
        self._drain()
        self._queue.put(text)

    def play_alarm(self) -> None:
        """Start the repeating alarm. No-op if already running."""
        if self.is_alarm_active:
            return
        self._alarm_stop.clear()
        self._alarm_thread = threading.Thread(target=self._alarm_loop, daemon=True)
        self._alarm_thread.start()
        logger.debug("Alarm started")

    def _alarm_loop(self):
        while not self._alarm_stop.is_set():
            self._queue.put(self.config.alarm_text)
            self._alarm_stop.wait(self.config.alarm_interval_sec)

    def stop_alarm(self) -> None:
        """Stop the alarm and drop queued alarm phrases."""
        if self._alarm_thread is None:
            return
        self._alarm_stop.set()
        self._alarm_thread.join(timeout=1.0)
        self._alarm_thread = None
        self._drain()
        logger.debug("Alarm stopped")

    @property
    def is_alarm_active(self) -> bool:
        return self._alarm_thread is not None and self._alarm_thread.is_alive()

    def stop(self):
        """Stop all speech and shutdown."""
        self.stop_alarm()
        self.engine.stop()
        self._running = False
        self._queue.put(None)
        self._thread.join(timeout=1.0)


class LoggingAlertSink:
    """AlertSink for headless runs: alerts only go to the log."""

    def __init__(self):
        self.alarm_active = False

    def speak(self, text: str) -> None:
        logger.info(f"[speak] {text}")

    def play_alarm(self) -> None:
        self.alarm_active = True
        logger.warning("[alarm] started")

    def stop_alarm(self) -> None:
        self.alarm_active = False
        logger.info("[alarm] stopped")

    def stop(self):
        self.stop_alarm()
