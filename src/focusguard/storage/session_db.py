#!/usr/bin/env python3
"""
Session History - SQLite Storage
================================
Persistent storage for finished focus sessions, plus the aggregate
numbers the dashboard shows (total focus time, average focus, level).
"""

import sqlite3
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..core.models import SessionRecord

logger = logging.getLogger(__name__)


def summarize_sessions(history: List[SessionRecord]) -> Dict:
    """
    Dashboard aggregates over a list of sessions.

    Level goes up by one for every hour of present time.
    """
    total_focus = sum(r.present_mins for r in history)
    avg_focus = sum(r.focus_percentage for r in history) / len(history) if history else 0.0
    return {
        "sessions": len(history),
        "total_focus_mins": round(total_focus, 1),
        "avg_focus": round(avg_focus, 1),
        "xp_level": int(total_focus // 60) + 1,
        "xp_progress": (total_focus % 60) / 60 * 100,
    }


class SessionDB:
    """
    SQLite-based session history.

    Implements the SessionSink protocol: save() assigns a fresh id.
    """

    def __init__(self, db_path: str = "focusguard.db"):
        """
        Args:
            db_path: Path to SQLite database file (":memory:" for tests)
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()
        logger.info(f"SessionDB initialized: {self.count} sessions in {db_path}")

    def _init_db(self):
        """Create tables if not exist."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                subject TEXT,
                start_time TEXT,
                end_time TEXT,
                duration_mins INTEGER,
                present_mins REAL,
                absent_mins REAL,
                focus_percentage REAL,
                absences_count INTEGER,
                grade TEXT
            )
        """)
        self._conn.commit()

    @property
    def count(self) -> int:
        """Number of stored sessions."""
        return self._conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

    def save(self, record: SessionRecord) -> Optional[int]:
        """
        Store a record.

        Returns:
            New row id, or None if the write failed
        """
        data = record.to_dict()
        try:
            cursor = self._conn.execute("""
                INSERT INTO sessions (
                    subject, start_time, end_time, duration_mins,
                    present_mins, absent_mins, focus_percentage,
                    absences_count, grade
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                data["subject"], data["start_time"], data["end_time"], data["duration_mins"],
                data["present_mins"], data["absent_mins"], data["focus_percentage"],
                data["absences_count"], data["grade"],
            ))
            self._conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Could not save session for {record.subject}: {e}")
            return None

        session_id = cursor.lastrowid
        logger.info(f"Saved session {session_id}: {record.subject} {record.focus_percentage}%")
        return session_id

    def get(self, session_id: int) -> Optional[SessionRecord]:
        row = self._conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
        return SessionRecord.from_dict(dict(row)) if row else None

    def recent(self, limit: int = 50, subject: Optional[str] = None) -> List[SessionRecord]:
        """
        Get sessions, newest first.

        Args:
            limit: Max results
            subject: Filter by subject
        """
        query = "SELECT * FROM sessions WHERE 1=1"
        params: list = []

        if subject:
            query += " AND subject = ?"
            params.append(subject)

        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        return [SessionRecord.from_dict(dict(row)) for row in self._conn.execute(query, params)]

    def summary(self, limit: int = 50) -> Dict:
        """Aggregates over the most recent sessions."""
        return summarize_sessions(self.recent(limit))

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
