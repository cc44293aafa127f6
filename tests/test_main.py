#!/usr/bin/env python3
"""
CLI Tests (no camera required)
"""

import io
import os
import sqlite3
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import Mock, patch
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from focusguard.core.config import FocusGuardConfig
from focusguard.main import FocusSession, build_session_sink, load_config, main, parse_args
from focusguard.storage.http_sink import HttpSessionSink
from focusguard.storage.session_db import SessionDB
from focusguard.tracking.session import SessionTracker


class TestArgs(unittest.TestCase):

    def test_focus_defaults(self):
        args = parse_args(["focus"])
        self.assertEqual(args.subject, "Self Study")
        self.assertFalse(args.headless)
        self.assertFalse(args.no_voice)

    def test_camera_override(self):
        config = load_config(parse_args(["--camera", "3", "air"]))
        self.assertEqual(config.camera_id, 3)

    def test_command_required(self):
        with redirect_stdout(io.StringIO()), self.assertRaises(SystemExit):
            parse_args([])


class TestSessionSinkChoice(unittest.TestCase):

    def test_http_when_api_url_set(self):
        sink = build_session_sink(FocusGuardConfig(api_url="http://localhost:3000"))
        self.assertIsInstance(sink, HttpSessionSink)
        sink.close()

    def test_sqlite_by_default(self):
        sink = build_session_sink(FocusGuardConfig(database_path=":memory:"))
        self.assertIsInstance(sink, SessionDB)
        sink.close()


class TestHistoryCommand(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmp.name, "history.db")
        self.config_path = os.path.join(self.tmp.name, "config.yaml")
        with open(self.config_path, "w") as f:
            f.write(f"database_path: {self.db_path}\n")

    def tearDown(self):
        self.tmp.cleanup()

    def test_history_lists_sessions(self):
        tracker = SessionTracker("Maths")
        tracker.start(0)
        tracker.ingest(True, 60000)
        db = SessionDB(self.db_path)
        db.save(tracker.finalize(60000))
        db.close()

        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["--config", self.config_path, "history"])

        self.assertEqual(code, 0)
        self.assertIn("Maths", out.getvalue())
        self.assertIn("EXCELLENT", out.getvalue())

    def test_history_reads_from_server_when_configured(self):
        """With api_url set, history comes from the same server sessions are posted to."""
        with open(self.config_path, "w") as f:
            f.write("api_url: http://localhost:3000\n")
        row = {
            "id": 12, "subject": "SQL", "start_time": "2025-01-10 09:00:00",
            "end_time": "2025-01-10 10:00:00", "duration_mins": 60, "present_mins": 54.0,
            "absent_mins": 6.0, "focus_percentage": 90.0, "absences_count": 1,
            "grade": "🏆 EXCELLENT",
        }

        out = io.StringIO()
        with patch("focusguard.storage.http_sink.requests.Session") as session_cls, redirect_stdout(out):
            http = session_cls.return_value
            http.get.return_value.json.return_value = [row]
            code = main(["--config", self.config_path, "history"])

        self.assertEqual(code, 0)
        http.get.assert_called_with("http://localhost:3000/api/sessions", timeout=5.0)
        self.assertIn("SQL", out.getvalue())
        self.assertIn("#12", out.getvalue())
        self.assertFalse(os.path.exists(self.db_path))
        http.close.assert_called_once()

    def test_bad_config_exits_nonzero(self):
        with open(self.config_path, "w") as f:
            f.write("face_confidence: 3\n")
        self.assertEqual(main(["--config", self.config_path, "history"]), 1)


class TestFocusSession(unittest.TestCase):
    """Camera, detector and display are mocked."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.config = FocusGuardConfig(database_path=os.path.join(self.tmp.name, "focus.db"))
        self.frame = np.zeros((48, 64, 3), dtype=np.uint8)

        patches = [
            patch("focusguard.main.MediaPipeFaceDetector"),
            patch("focusguard.main.open_camera"),
            patch("focusguard.main.cv2.destroyAllWindows"),
        ]
        detector_cls, open_camera, _ = [p.start() for p in patches]
        for p in patches:
            self.addCleanup(p.stop)

        self.detector = detector_cls.return_value
        self.cap = open_camera.return_value
        self.session = FocusSession(self.config, "Maths", use_voice=False)

    def tearDown(self):
        self.tmp.cleanup()

    def stored_sessions(self):
        db = SessionDB(self.config.database_path)
        try:
            return db.recent()
        finally:
            db.close()

    def test_headless_run_saves_record(self):
        self.cap.read.side_effect = [(True, self.frame), (True, self.frame), (False, None)]
        self.detector.detect.return_value = True

        with redirect_stdout(io.StringIO()):
            record = self.session.run(show_video=False)

        self.assertEqual(record.subject, "Maths")
        self.assertEqual(len(self.stored_sessions()), 1)
        self.cap.release.assert_called_once()
        self.detector.close.assert_called_once()

    def test_detector_failure_still_finalizes(self):
        """A crash inside the frame loop keeps the record and releases the camera."""
        self.cap.read.return_value = (True, self.frame)
        self.detector.detect.side_effect = RuntimeError("mediapipe graph error")

        with redirect_stdout(io.StringIO()), self.assertRaises(RuntimeError):
            self.session.run(show_video=False)

        self.assertTrue(self.session.tracker.is_finalized)
        self.assertEqual(len(self.stored_sessions()), 1)
        self.cap.release.assert_called_once()
        self.assertFalse(self.session.sink.alarm_active)

    def test_storage_failure_still_cleans_up(self):
        self.cap.read.return_value = (False, None)
        store = Mock()
        store.save.side_effect = OSError("read-only file system")

        with patch("focusguard.main.build_session_sink", return_value=store), \
                redirect_stdout(io.StringIO()), self.assertRaises(OSError):
            self.session.run(show_video=False)

        store.close.assert_called_once()
        self.cap.release.assert_called_once()

    def test_unopenable_database_is_reported(self):
        self.cap.read.return_value = (False, None)
        with patch("focusguard.main.build_session_sink", side_effect=sqlite3.OperationalError("unable to open")), \
                redirect_stdout(io.StringIO()) as out:
            record = self.session.run(show_video=False)

        self.assertIsNotNone(record)
        self.assertIn("could not be saved", out.getvalue())
        self.cap.release.assert_called_once()


if __name__ == "__main__":
    unittest.main(verbosity=2)
