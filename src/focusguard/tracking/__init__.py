#!/usr/bin/env python3
"""
Presence tracking for FocusGuard.

Provides the session state machine and session grading.
"""

from .session import SessionTracker
from .grading import grade_for, build_record, focus_percentage, GRADE_THRESHOLDS

__all__ = [
    "SessionTracker",
    "grade_for",
    "build_record",
    "focus_percentage",
    "GRADE_THRESHOLDS",
]
