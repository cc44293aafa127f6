#!/usr/bin/env python3
"""
Air-Writing Canvas and Controller Tests
"""

import sys
import tempfile
import unittest
from unittest.mock import patch
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from focusguard.core.config import GestureConfig
from focusguard.core.events import EventBus, EventType
from focusguard.core.models import GestureKind
from focusguard.gestures.canvas import AirCanvas, PALETTE, DEFAULT_COLOR_INDEX
from focusguard.gestures.controller import AirWriterController

from test_gestures import make_hand


def small_config(**overrides):
    values = dict(canvas_width=100, canvas_height=80, erase_half_size=5, undo_history_limit=3)
    values.update(overrides)
    return GestureConfig(**values)


class TestCanvas(unittest.TestCase):

    def setUp(self):
        self.canvas = AirCanvas(small_config())

    def test_blank_on_creation(self):
        self.assertEqual(self.canvas.image.shape, (80, 100, 3))
        self.assertFalse(self.canvas.image.any())
        self.assertEqual(self.canvas.color, PALETTE[DEFAULT_COLOR_INDEX])

    def test_draw_segment(self):
        self.canvas.draw_segment((10, 10), (50, 10))
        self.assertTrue(self.canvas.image[10, 30].any())

    def test_color_cycles(self):
        names = [self.canvas.next_color().name for _ in range(len(PALETTE))]
        self.assertEqual(names[-1], PALETTE[DEFAULT_COLOR_INDEX].name)

    def test_bgr_order(self):
        red = next(c for c in PALETTE if c.name == "Red")
        self.assertEqual(red.bgr, (0x13, 0x13, 0xFF))

    def test_thickness_clamped(self):
        self.assertEqual(self.canvas.set_thickness(100), 20)
        self.assertEqual(self.canvas.set_thickness(0), 2)
        self.assertEqual(self.canvas.set_thickness(7.6), 8)

    def test_erase_square(self):
        self.canvas.image[:] = 255
        self.canvas.erase_at((50, 40))
        self.assertFalse(self.canvas.image[40, 50].any())
        self.assertTrue(self.canvas.image[40, 60].all())

    def test_erase_clipped_at_edge(self):
        self.canvas.image[:] = 255
        self.canvas.erase_at((-2, -2))
        self.assertFalse(self.canvas.image[0, 0].any())
        self.assertTrue(self.canvas.image[5, 5].all())

    def test_undo_redo(self):
        self.canvas.snapshot()
        self.canvas.draw_segment((0, 0), (99, 79))

        self.assertTrue(self.canvas.undo())
        self.assertFalse(self.canvas.image.any())
        self.assertTrue(self.canvas.redo())
        self.assertTrue(self.canvas.image.any())

    def test_undo_empty(self):
        self.assertFalse(self.canvas.undo())
        self.assertFalse(self.canvas.redo())

    def test_history_capped(self):
        for _ in range(10):
            self.canvas.snapshot()
        self.assertEqual(self.canvas.history_depth, 3)

    def test_new_stroke_drops_redo(self):
        self.canvas.snapshot()
        self.canvas.undo()
        self.assertEqual(self.canvas.redo_depth, 1)
        self.canvas.snapshot()
        self.assertEqual(self.canvas.redo_depth, 0)

    def test_clear_is_undoable(self):
        self.canvas.draw_segment((0, 0), (99, 79))
        self.canvas.clear()
        self.assertFalse(self.canvas.image.any())
        self.canvas.undo()
        self.assertTrue(self.canvas.image.any())

    def test_save(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.canvas.save(tmp, timestamp_ms=1234)
            self.assertEqual(path.name, "air-writing-1234.png")
            self.assertTrue(path.exists())

    def test_save_failure(self):
        with patch("focusguard.gestures.canvas.cv2.imwrite", return_value=False):
            with tempfile.TemporaryDirectory() as tmp:
                with self.assertRaises(IOError):
                    self.canvas.save(tmp, timestamp_ms=1)

    def test_to_pixel_mirrors(self):
        self.assertEqual(self.canvas.to_pixel((0.25, 0.5)), (75, 40))
        self.assertEqual(self.canvas.to_pixel((0.25, 0.5), mirror=False), (25, 40))


class TestController(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.controller = AirWriterController(small_config(), bus=self.bus, mirror=False)

    def test_draw_stroke(self):
        """First DRAW frame only anchors; the second draws a segment."""
        self.controller.on_frame(make_hand(index=True), 0)
        self.assertFalse(self.controller.canvas.image.any())
        self.assertEqual(self.controller.canvas.history_depth, 1)

        hand = make_hand(index=True)
        hand[8] = (0.6, 0.4)
        self.controller.on_frame(hand, 33)

        self.assertTrue(self.controller.canvas.image.any())
        self.assertEqual(self.controller.canvas.history_depth, 1)

    def test_lost_hand_breaks_stroke(self):
        self.controller.on_frame(make_hand(index=True), 0)
        self.controller.on_frame(None, 33)
        self.assertIsNone(self.controller.cursor)

        hand = make_hand(index=True)
        hand[8] = (0.6, 0.4)
        self.controller.on_frame(hand, 66)
        self.assertFalse(self.controller.canvas.image.any())

    def test_color_debounced(self):
        hand = make_hand(index=True, middle=True)
        start = self.controller.canvas.color_index

        self.controller.on_frame(hand, 0)
        self.controller.on_frame(hand, 500)
        self.assertEqual(self.controller.canvas.color_index, (start + 1) % len(PALETTE))

        self.controller.on_frame(hand, 1001)
        self.assertEqual(self.controller.canvas.color_index, (start + 2) % len(PALETTE))
        self.assertTrue(self.controller.notification(1001).startswith("Color: "))

    def test_save_debounced(self):
        hand = make_hand(thumb_out=True)
        with patch.object(self.controller.canvas, "save", return_value=Path("x.png")) as save:
            for ts in (0, 100, 1999, 2000):
                self.controller.on_frame(hand, ts)
            self.assertEqual(save.call_count, 1)
            self.controller.on_frame(hand, 2001)
            self.assertEqual(save.call_count, 2)

        fired = self.bus.get_history(EventType.COMMAND_FIRED)
        self.assertEqual(len(fired), 2)
        self.assertEqual(fired[0].data["kind"], GestureKind.SAVE.value)

    def test_save_failure_keeps_drawing(self):
        """A failed export is reported and the loop carries on."""
        self.controller.canvas.draw_segment((0, 40), (99, 40))
        with patch("focusguard.gestures.canvas.cv2.imwrite", return_value=False), \
                self.assertLogs("focusguard.gestures.controller", level="ERROR"):
            command = self.controller.on_frame(make_hand(thumb_out=True), 0)

        self.assertEqual(command.kind, GestureKind.SAVE)
        self.assertEqual(self.controller.notification(0), "Save failed")
        self.assertTrue(self.controller.canvas.image.any())
        self.assertEqual(self.bus.get_history(EventType.COMMAND_FIRED), [])

    def test_erase_every_frame(self):
        self.controller.canvas.image[:] = 255
        self.controller.on_frame(make_hand(index=True, middle=True, ring=True, pinky=True), 0)
        self.assertFalse(self.controller.canvas.image.all())

    def test_pinch_sets_thickness(self):
        hand = make_hand(middle=True, ring=True, thumb_tip=(0.43, 0.6))
        self.controller.on_frame(hand, 0)
        # 0.03 of a 0.05 threshold → 60% of the 2-20 range
        self.assertEqual(self.controller.canvas.thickness, 13)

    def test_thickness_for_pinch_bounds(self):
        self.assertEqual(self.controller.thickness_for_pinch(0.0), 2)
        self.assertEqual(self.controller.thickness_for_pinch(1.0), 20)

    def test_gesture_change_published_once(self):
        hand = make_hand(index=True)
        self.controller.on_frame(hand, 0)
        self.controller.on_frame(hand, 10)
        events = self.bus.get_history(EventType.GESTURE_DETECTED)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].data["kind"], "draw")

    def test_notification_expires(self):
        self.controller.clear(1000)
        self.assertEqual(self.controller.notification(2999), "Canvas Cleared")
        self.assertIsNone(self.controller.notification(3000))

    def test_undo_notifies_only_on_change(self):
        self.assertFalse(self.controller.undo(0))
        self.assertIsNone(self.controller.notification(0))

    def test_render_overlays_strokes(self):
        self.controller.canvas.draw_segment((0, 40), (99, 40))
        frame = np.full((160, 200, 3), 30, dtype=np.uint8)
        out = self.controller.render(frame)
        self.assertEqual(out.shape, frame.shape)
        self.assertFalse((out == frame).all())
        self.assertTrue((frame == 30).all())


if __name__ == "__main__":
    unittest.main(verbosity=2)
