#!/usr/bin/env python3
"""
Session grading and record building.
"""

import math
from datetime import datetime
from typing import Tuple

from ..core.models import Grade, SessionAccumulator, SessionRecord


# Lower bound of each tier is inclusive
GRADE_THRESHOLDS: Tuple[Tuple[float, Grade], ...] = (
    (90.0, Grade.EXCELLENT),
    (75.0, Grade.GREAT),
    (60.0, Grade.GOOD),
)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def grade_for(focus_percentage: float) -> Grade:
    """Map a 0-100 focus percentage to its grade tier."""
    for threshold, grade in GRADE_THRESHOLDS:
        if focus_percentage >= threshold:
            return grade
    return Grade.NEEDS_WORK


def focus_percentage(present_seconds: float, absent_seconds: float, empty: float = 0.0) -> float:
    """Present share of tracked time, 0-100. Returns `empty` when nothing was tracked."""
    total = present_seconds + absent_seconds
    if total <= 0:
        return empty
    return present_seconds / total * 100


def format_timestamp(timestamp_ms: float) -> str:
    """Wall-clock milliseconds to local "YYYY-MM-DD HH:MM:SS"."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime(TIME_FORMAT)


def build_record(subject: str, acc: SessionAccumulator, end_ms: float) -> SessionRecord:
    """
    Turn a finished accumulator into a graded record.

    The grade is taken from the rounded percentage so a stored record
    always agrees with its own numbers.
    """
    duration_ms = max(0.0, acc.last_sample_ms - acc.session_start_ms)
    focus = round(focus_percentage(acc.present_seconds, acc.absent_seconds), 1)

    return SessionRecord(
        subject=subject,
        start_time=format_timestamp(acc.session_start_ms),
        end_time=format_timestamp(end_ms),
        duration_mins=int(math.floor(duration_ms / 60000 + 0.5)),  # half-up
        present_mins=round(acc.present_seconds / 60, 1),
        absent_mins=round(acc.absent_seconds / 60, 1),
        focus_percentage=focus,
        absences_count=acc.absences_count,
        grade=grade_for(focus),
    )
