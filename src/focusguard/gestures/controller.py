#!/usr/bin/env python3
"""
Air-writing controller.

Runs each hand frame through the classifier, gates repeatable commands
with the debouncer and applies the result to the canvas:

    DRAW          stroke from the previous index-tip position
    ERASE         clear a square under the palm, every frame
    SELECT_COLOR  next palette color   (cooldown)
    SAVE          export PNG           (cooldown)
    pinch         thumb-index distance sets stroke thickness
"""

import logging
from typing import Any, Optional, Tuple

import cv2
import numpy as np

from ..core.config import GestureConfig
from ..core.events import EventBus, EventType
from ..core.models import GestureCommand, GestureKind
from .canvas import AirCanvas
from .classifier import GestureClassifier
from .debouncer import CommandDebouncer, default_cooldowns

logger = logging.getLogger(__name__)

NOTIFICATION_MS = 2000


class AirWriterController:
    """Stateful glue between per-frame gestures and the canvas."""

    def __init__(
        self,
        config: Optional[GestureConfig] = None,
        canvas: Optional[AirCanvas] = None,
        bus: Optional[EventBus] = None,
        output_dir: str = ".",
        mirror: bool = True
    ):
        self.config = config or GestureConfig()
        self.classifier = GestureClassifier(self.config)
        self.debouncer = CommandDebouncer(default_cooldowns(self.config))
        self.canvas = canvas or AirCanvas(self.config)
        self.bus = bus
        self.output_dir = output_dir
        self.mirror = mirror

        self.mode = GestureKind.NONE
        self.cursor: Optional[Tuple[int, int]] = None
        self._last_point: Optional[Tuple[int, int]] = None
        self._notification: Optional[str] = None
        self._notification_until = 0.0

    def on_frame(self, landmarks: Any, timestamp_ms: float) -> GestureCommand:
        """
        Process one hand frame.

        Args:
            landmarks: 21 normalized points, or None if no hand was found
            timestamp_ms: Frame wall-clock time

        Returns:
            The classified command
        """
        command = self.classifier.classify(landmarks)

        if command.kind != self.mode:
            logger.debug(f"Gesture: {self.mode.name} → {command.kind.name}")
            self._publish(EventType.GESTURE_DETECTED, timestamp_ms,
                          previous=self.mode.value, kind=command.kind.value)
            self.mode = command.kind

        if not command.has_anchor:
            self.cursor = None
            self._last_point = None
            return command

        px = self.canvas.to_pixel(command.anchor, mirror=self.mirror)
        self.cursor = px

        if command.kind == GestureKind.DRAW:
            if self._last_point is None:
                self.canvas.snapshot()
            else:
                self.canvas.draw_segment(self._last_point, px)
            self._last_point = px
        else:
            self._last_point = None

        if command.kind == GestureKind.ERASE:
            self.canvas.erase_at(px)

        elif command.kind == GestureKind.SELECT_COLOR:
            if self.debouncer.should_fire(GestureKind.SELECT_COLOR, timestamp_ms):
                color = self.canvas.next_color()
                self._notify(f"Color: {color.name}", timestamp_ms)
                self._publish(EventType.COMMAND_FIRED, timestamp_ms,
                              kind=command.kind.value, color=color.name)

        elif command.kind == GestureKind.SAVE:
            if self.debouncer.should_fire(GestureKind.SAVE, timestamp_ms):
                try:
                    path = self.canvas.save(self.output_dir, timestamp_ms)
                except OSError as e:
                    logger.error(f"Could not save canvas: {e}")
                    self._notify("Save failed", timestamp_ms)
                    return command
                self._notify("Image Saved", timestamp_ms)
                self._publish(EventType.COMMAND_FIRED, timestamp_ms,
                              kind=command.kind.value, path=str(path))

        elif command.pinch:
            self.canvas.set_thickness(self.thickness_for_pinch(command.pinch_distance))

        return command

    def thickness_for_pinch(self, pinch_distance: float) -> float:
        """Tighter pinch, thinner stroke. Linear over [0, pinch_threshold)."""
        ratio = min(1.0, max(0.0, pinch_distance / self.config.pinch_threshold))
        span = self.config.max_thickness - self.config.min_thickness
        return self.config.min_thickness + ratio * span

    # =========================================================================
    # KEYBOARD ACTIONS
    # =========================================================================

    def undo(self, timestamp_ms: float) -> bool:
        done = self.canvas.undo()
        if done:
            self._notify("Undo", timestamp_ms)
        return done

    def redo(self, timestamp_ms: float) -> bool:
        done = self.canvas.redo()
        if done:
            self._notify("Redo", timestamp_ms)
        return done

    def clear(self, timestamp_ms: float) -> None:
        self.canvas.clear()
        self._notify("Canvas Cleared", timestamp_ms)

    # =========================================================================
    # DISPLAY
    # =========================================================================

    def notification(self, timestamp_ms: float) -> Optional[str]:
        """Current toast text, if it has not expired."""
        if self._notification and timestamp_ms < self._notification_until:
            return self._notification
        return None

    def render(self, frame: np.ndarray) -> np.ndarray:
        """Overlay strokes and cursor on a (mirrored) camera frame."""
        canvas = self.canvas.image
        if frame.shape[:2] != canvas.shape[:2]:
            canvas = cv2.resize(canvas, (frame.shape[1], frame.shape[0]))
        out = frame.copy()
        mask = canvas.any(axis=2)
        out[mask] = canvas[mask]

        if self.cursor is not None:
            sx = frame.shape[1] / self.canvas.width
            sy = frame.shape[0] / self.canvas.height
            center = (int(self.cursor[0] * sx), int(self.cursor[1] * sy))
            fill = self.canvas.color.bgr if self.mode == GestureKind.DRAW else (255, 255, 255)
            cv2.circle(out, center, self.config.cursor_radius, fill, -1)
            cv2.circle(out, center, self.config.cursor_radius, (0, 0, 0), 2)
        return out

    def _notify(self, text: str, timestamp_ms: float) -> None:
        logger.info(text)
        self._notification = text
        self._notification_until = timestamp_ms + NOTIFICATION_MS

    def _publish(self, event_type: EventType, ts: float, **data) -> None:
        if self.bus is not None:
            self.bus.publish(event_type, source="air_writer", timestamp_ms=ts, **data)
