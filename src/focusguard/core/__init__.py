#!/usr/bin/env python3
"""
Core module for FocusGuard.

Contains data models, protocols, configuration, events and exceptions.
"""

from .models import (
    PresenceState,
    Grade,
    SessionAccumulator,
    SessionStats,
    SessionRecord,
    AlertKind,
    Alert,
    GestureKind,
    GestureCommand,
)

from .protocols import (
    FacePresenceDetector,
    HandLandmarkDetector,
    AlertSink,
    SessionSink,
)

from .config import (
    SubjectConfig,
    PhraseTable,
    VoiceConfig,
    GestureConfig,
    FocusGuardConfig,
    SUBJECT_PRESETS,
    PHRASE_PRESETS,
    DEFAULT_SUBJECT,
    get_subject_config,
)

from .events import (
    EventType,
    Event,
    EventBus,
)

from .exceptions import (
    FocusGuardError,
    InvalidInputError,
    SessionStateError,
)

__all__ = [
    # Models
    "PresenceState",
    "Grade",
    "SessionAccumulator",
    "SessionStats",
    "SessionRecord",
    "AlertKind",
    "Alert",
    "GestureKind",
    "GestureCommand",
    # Protocols
    "FacePresenceDetector",
    "HandLandmarkDetector",
    "AlertSink",
    "SessionSink",
    # Config
    "SubjectConfig",
    "PhraseTable",
    "VoiceConfig",
    "GestureConfig",
    "FocusGuardConfig",
    "SUBJECT_PRESETS",
    "PHRASE_PRESETS",
    "DEFAULT_SUBJECT",
    "get_subject_config",
    # Events
    "EventType",
    "Event",
    "EventBus",
    # Exceptions
    "FocusGuardError",
    "InvalidInputError",
    "SessionStateError",
]
