#!/usr/bin/env python3
"""
FocusGuard - Study Presence Monitor
===================================
Camera loops around the presence tracker and the air-writing controller.

Pipeline:
  Camera → Face presence → SessionTracker → Voice/alarm → Session history
  Camera → Hand landmarks → AirWriterController → Canvas

Run:
  focusguard focus --subject Maths
  focusguard air
  focusguard history
"""

import argparse
import logging
import sqlite3
import sys
import time
from typing import List, Optional, Union

import cv2

from focusguard.core.config import FocusGuardConfig, SUBJECT_PRESETS
from focusguard.core.events import EventBus, EventLogger
from focusguard.core.models import PresenceState
from focusguard.alerts.voice import VoiceAlertSink, LoggingAlertSink
from focusguard.gestures.controller import AirWriterController
from focusguard.perception.face import MediaPipeFaceDetector
from focusguard.perception.hands import MediaPipeHandDetector
from focusguard.storage.http_sink import HttpSessionSink
from focusguard.storage.session_db import SessionDB
from focusguard.tracking.session import SessionTracker, now_ms

logger = logging.getLogger("focusguard")

STATE_COLORS = {
    PresenceState.PRESENT: (60, 155, 93),
    PresenceState.WARNING: (5, 219, 252),
    PresenceState.ABSENT: (19, 19, 255),
    PresenceState.UNKNOWN: (139, 139, 139),
}


def build_session_sink(config: FocusGuardConfig) -> Union[SessionDB, HttpSessionSink]:
    """HTTP if an api_url is configured, otherwise the local database."""
    if config.api_url:
        return HttpSessionSink(config.api_url)
    return SessionDB(config.database_path)


def open_camera(camera_id: int) -> cv2.VideoCapture:
    cap = cv2.VideoCapture(camera_id)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open camera {camera_id}")
    return cap


# =============================================================================
# FOCUS SESSION
# =============================================================================

class FocusSession:
    """Presence monitoring for one study session."""

    def __init__(self, config: FocusGuardConfig, subject: str, use_voice: bool = True):
        self.config = config
        self.subject = subject
        self.bus = EventBus()
        self.bus.subscribe(None, EventLogger(logging.DEBUG))

        self.sink = VoiceAlertSink(config.voice) if use_voice else LoggingAlertSink()
        self.tracker = SessionTracker(
            subject,
            config=config.subject(subject),
            sink=self.sink,
            phrases=config.phrases,
            bus=self.bus,
        )
        self.detector = MediaPipeFaceDetector(min_confidence=config.face_confidence)
        self.cap = open_camera(config.camera_id)

    def run(self, show_video: bool = True):
        """Run until 'q' (or Ctrl+C). Returns the finalized record."""
        print(f"Subject: {self.subject}  "
              f"(warning {self.tracker.config.warning_delay_sec}s, alarm {self.tracker.config.alarm_delay_sec}s)")
        if show_video:
            print("Controls: 'p' pause/resume, 'q' end session")

        self.tracker.start(now_ms())
        try:
            self._loop(show_video)
        except KeyboardInterrupt:
            print("\nInterrupted by user")
        finally:
            record = self.finish()
        return record

    def _loop(self, show_video: bool):
        last_status = time.time()
        while True:
            ret, frame = self.cap.read()
            if not ret:
                logger.error("Could not read frame")
                break

            self.tracker.ingest(self.detector.detect(frame), now_ms())

            if show_video:
                cv2.imshow("FocusGuard", self._annotate(frame))
                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    break
                elif key == ord('p'):
                    if self.tracker.is_paused:
                        self.tracker.resume(now_ms())
                    else:
                        self.tracker.pause(now_ms())
            elif time.time() - last_status >= 1.0:
                last_status = time.time()
                stats = self.tracker.stats()
                print(f"[{self.tracker.state.value:>8}] focus {stats.focus_percentage:5.1f}% "
                      f"absences {stats.absences_count}")

    def finish(self):
        """Finalize, store the record and release the camera and audio."""
        try:
            record = self.tracker.finalize(now_ms())
            session_id = self._store(record)
        finally:
            self.cleanup()

        print()
        print(f"  {record.grade.badge}")
        print(f"  Focus {record.focus_percentage}%  |  {record.duration_mins} min  |  "
              f"{record.absences_count} absences")
        if session_id is None:
            print("  (session could not be saved)")
        return record

    def _store(self, record):
        try:
            store = build_session_sink(self.config)
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Could not open session storage: {e}")
            return None
        try:
            return store.save(record)
        finally:
            store.close()

    def _annotate(self, frame):
        stats = self.tracker.stats()
        state = self.tracker.state
        color = STATE_COLORS[state]
        label = state.value.upper()
        if state in (PresenceState.WARNING, PresenceState.ABSENT):
            label += f" ({stats.elapsed_absence_sec:.0f}s)"
        if self.tracker.is_paused:
            label = "PAUSED"

        out = frame.copy()
        cv2.rectangle(out, (0, 0), (out.shape[1], 40), color, -1)
        cv2.putText(out, label, (10, 28), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 2)
        minutes, seconds = divmod(int(stats.total_seconds), 60)
        cv2.putText(
            out, f"{minutes}m {seconds}s  FOCUS {stats.focus_percentage:.0f}%  ABSENCES {stats.absences_count}",
            (10, out.shape[0] - 15), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2
        )
        return out

    def cleanup(self):
        self.sink.stop()
        self.detector.close()
        self.cap.release()
        cv2.destroyAllWindows()


# =============================================================================
# AIR WRITING
# =============================================================================

class AirWritingSession:
    """Draw in the air with one hand."""

    def __init__(self, config: FocusGuardConfig, output_dir: str = "."):
        self.config = config
        self.controller = AirWriterController(config.gestures, output_dir=output_dir)
        self.detector = MediaPipeHandDetector(min_detection_confidence=config.hand_confidence)
        self.cap = open_camera(config.camera_id)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, config.gestures.canvas_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, config.gestures.canvas_height)

    def run(self):
        print("Gestures: index=draw, peace=color, palm=erase, fist=pause, thumb=save, pinch=thickness")
        print("Keys: 'u' undo, 'r' redo, 'c' clear, 'q' quit")
        try:
            while True:
                ret, frame = self.cap.read()
                if not ret:
                    logger.error("Could not read frame")
                    break

                ts = now_ms()
                command = self.controller.on_frame(self.detector.detect(frame), ts)

                view = self.controller.render(cv2.flip(frame, 1))
                header = command.kind.value.upper()
                toast = self.controller.notification(ts)
                if toast:
                    header += f"  |  {toast}"
                cv2.putText(view, header, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)
                cv2.imshow("FocusGuard Air Writer", view)

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    break
                elif key == ord('u'):
                    self.controller.undo(ts)
                elif key == ord('r'):
                    self.controller.redo(ts)
                elif key == ord('c'):
                    self.controller.clear(ts)
        except KeyboardInterrupt:
            print("\nInterrupted by user")
        finally:
            self.cleanup()

    def cleanup(self):
        self.detector.close()
        self.cap.release()
        cv2.destroyAllWindows()


# =============================================================================
# HISTORY
# =============================================================================

def print_history(config: FocusGuardConfig, limit: int = 20) -> None:
    """Recent sessions from the same store `focus` saves to."""
    store = build_session_sink(config)
    try:
        summary = store.summary()
        print(f"Level {summary['xp_level']} ({summary['xp_progress']:.0f}% to next)  |  "
              f"{summary['total_focus_mins']} focus min  |  avg {summary['avg_focus']}%")
        print()
        for record in store.recent(limit):
            print(f"  #{record.id!s:<4} {record.start_time}  {record.subject:<12} "
                  f"{record.duration_mins:>4} min  {record.focus_percentage:5.1f}%  {record.grade.badge}")
    finally:
        store.close()


# =============================================================================
# MAIN
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="FocusGuard study presence monitor")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--camera", "-c", type=int, help="Camera device ID")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    focus = sub.add_parser("focus", help="Monitor a study session")
    focus.add_argument("--subject", "-s", default="Self Study",
                       help=f"One of {', '.join(SUBJECT_PRESETS)} (others use Self Study timings)")
    focus.add_argument("--headless", action="store_true", help="Run without video display")
    focus.add_argument("--no-voice", action="store_true", help="Log alerts instead of speaking")

    air = sub.add_parser("air", help="Air-writing canvas")
    air.add_argument("--output", "-o", default=".", help="Directory for saved drawings")

    history = sub.add_parser("history", help="Show past sessions")
    history.add_argument("--limit", "-n", type=int, default=20)

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> FocusGuardConfig:
    config = FocusGuardConfig.from_yaml(args.config) if args.config else FocusGuardConfig()
    if args.camera is not None:
        data = config.to_dict()
        data["camera_id"] = args.camera
        config = FocusGuardConfig.from_dict(data)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
        if args.command == "focus":
            session = FocusSession(config, args.subject, use_voice=not args.no_voice)
            session.run(show_video=not args.headless)
        elif args.command == "air":
            AirWritingSession(config, output_dir=args.output).run()
        elif args.command == "history":
            print_history(config, args.limit)
    except (RuntimeError, ValueError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
