#!/usr/bin/env python3
"""
Core data models for presence tracking and gesture control.

Records and commands are immutable (frozen dataclasses). The session
accumulator is the one mutable model and is owned by a single tracker.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from enum import Enum, auto


# =============================================================================
# PRESENCE
# =============================================================================

class PresenceState(Enum):
    """Presence of the user in front of the camera."""
    UNKNOWN = "unknown"   # No sample yet
    PRESENT = "present"   # Face detected
    WARNING = "warning"   # Away past warning delay
    ABSENT = "absent"     # Away past alarm delay, alarm running


class Grade(Enum):
    """Session grade derived from focus percentage."""
    EXCELLENT = "EXCELLENT"
    GREAT = "GREAT"
    GOOD = "GOOD"
    NEEDS_WORK = "NEEDS WORK"

    @property
    def badge(self) -> str:
        return _GRADE_BADGES[self]

    @classmethod
    def parse(cls, label: str) -> Grade:
        """Parse a stored grade, with or without its badge prefix."""
        text = label.strip().upper()
        for grade in cls:
            if text == grade.value or text.endswith(" " + grade.value):
                return grade
        raise ValueError(f"unknown grade label: {label!r}")


_GRADE_BADGES = {
    Grade.EXCELLENT: "🏆 EXCELLENT",
    Grade.GREAT: "⭐ GREAT",
    Grade.GOOD: "👍 GOOD",
    Grade.NEEDS_WORK: "💪 NEEDS WORK",
}


@dataclass
class SessionAccumulator:
    """
    Running totals for one focus session.

    Mutable: only SessionTracker.ingest (and pause bookkeeping) touches it.
    Times are wall-clock milliseconds, totals are seconds.
    """
    session_start_ms: float
    last_sample_ms: float
    present_seconds: float = 0.0
    absent_seconds: float = 0.0
    absences_count: int = 0
    current_absence_started_at: Optional[float] = None
    warning_fired: bool = False
    alarm_active: bool = False
    state: PresenceState = PresenceState.UNKNOWN

    # Pause bookkeeping
    paused: bool = False
    paused_at_ms: Optional[float] = None

    @property
    def tracked_seconds(self) -> float:
        return self.present_seconds + self.absent_seconds

    @property
    def in_absence_run(self) -> bool:
        return self.current_absence_started_at is not None


@dataclass(frozen=True)
class SessionStats:
    """Live snapshot of a running session (for HUD display)."""
    total_seconds: float
    present_seconds: float
    absent_seconds: float
    focus_percentage: float
    absences_count: int
    session_start_ms: float
    state: PresenceState
    elapsed_absence_sec: float = 0.0
    target_progress: float = 0.0  # 0.0 to 1.0 of the subject's target duration


@dataclass(frozen=True)
class SessionRecord:
    """Final graded result of a session. Handed once to a persistence sink."""
    subject: str
    start_time: str            # "YYYY-MM-DD HH:MM:SS", local time
    end_time: str
    duration_mins: int
    present_mins: float        # 1 decimal
    absent_mins: float         # 1 decimal
    focus_percentage: float    # 1 decimal, 0-100
    absences_count: int
    grade: Grade
    id: Optional[int] = None   # Assigned by storage

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the snake_case wire shape used by storage and HTTP.

        grade is written with its badge ("🏆 EXCELLENT"), the form the
        sessions server stores and shows.
        """
        data = {
            "subject": self.subject,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_mins": self.duration_mins,
            "present_mins": self.present_mins,
            "absent_mins": self.absent_mins,
            "focus_percentage": self.focus_percentage,
            "absences_count": self.absences_count,
            "grade": self.grade.badge,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SessionRecord:
        """Create record from a stored row or decoded JSON."""
        return cls(
            subject=data["subject"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            duration_mins=int(data["duration_mins"]),
            present_mins=float(data["present_mins"]),
            absent_mins=float(data["absent_mins"]),
            focus_percentage=float(data["focus_percentage"]),
            absences_count=int(data["absences_count"]),
            grade=Grade.parse(data["grade"]),
            id=data.get("id"),
        )


# =============================================================================
# ALERTS
# =============================================================================

class AlertKind(Enum):
    """Side effects requested by the session tracker."""
    SPEAK = auto()        # Speak a fixed phrase
    ALARM_START = auto()  # Start looping alarm audio
    ALARM_STOP = auto()   # Stop alarm audio


@dataclass(frozen=True)
class Alert:
    """One side effect for the alert sink."""
    kind: AlertKind
    phrase_key: Optional[str] = None  # warning, alarm, recovered_from_*
    text: Optional[str] = None
    timestamp_ms: float = 0.0


# =============================================================================
# GESTURES
# =============================================================================

class GestureKind(Enum):
    """Discrete hand commands."""
    DRAW = "draw"
    ERASE = "erase"
    PAUSE = "pause"
    SELECT_COLOR = "color"
    SAVE = "save"
    NONE = "none"


@dataclass(frozen=True)
class GestureCommand:
    """Classifier output for one frame. Anchor is in normalized [0,1] space."""
    kind: GestureKind
    anchor: Optional[Tuple[float, float]] = None
    pinch: bool = False
    pinch_distance: Optional[float] = None

    @property
    def has_anchor(self) -> bool:
        return self.anchor is not None


NO_GESTURE = GestureCommand(kind=GestureKind.NONE)
