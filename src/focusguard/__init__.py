#!/usr/bin/env python3
"""
FocusGuard - presence and gesture monitoring core.

    from focusguard import SessionTracker, GestureClassifier

    tracker = SessionTracker("Maths")
    tracker.start(0)
    tracker.ingest(True, 1000)
    record = tracker.finalize(60000)
"""

from .core.config import FocusGuardConfig, SubjectConfig, get_subject_config
from .core.models import PresenceState, Grade, SessionRecord, GestureKind, GestureCommand
from .core.exceptions import FocusGuardError, InvalidInputError, SessionStateError
from .tracking.session import SessionTracker
from .tracking.grading import grade_for
from .gestures.classifier import GestureClassifier, classify
from .gestures.debouncer import CommandDebouncer

__version__ = "2.0.0"

__all__ = [
    "FocusGuardConfig",
    "SubjectConfig",
    "get_subject_config",
    "PresenceState",
    "Grade",
    "SessionRecord",
    "GestureKind",
    "GestureCommand",
    "FocusGuardError",
    "InvalidInputError",
    "SessionStateError",
    "SessionTracker",
    "grade_for",
    "GestureClassifier",
    "classify",
    "CommandDebouncer",
]
