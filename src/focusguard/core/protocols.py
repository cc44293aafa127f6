#!/usr/bin/env python3
"""
Protocol definitions for the collaborators around the core.

Structural subtyping: anything with these methods can be plugged in,
which is how tests swap in mocks for speech, audio and storage.
"""

from typing import Protocol, runtime_checkable, Optional
import numpy as np

from .models import SessionRecord


# =============================================================================
# PERCEPTION
# =============================================================================

@runtime_checkable
class FacePresenceDetector(Protocol):
    """Black box answering "is a face in this frame"."""

    def detect(self, frame: np.ndarray) -> bool:
        """
        Args:
            frame: BGR image from camera

        Returns:
            True if at least one face was detected
        """
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class HandLandmarkDetector(Protocol):
    """Black box producing 21 normalized hand landmarks."""

    def detect(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """
        Args:
            frame: BGR image from camera

        Returns:
            (21, 2) array of normalized (x, y), or None if no hand
        """
        ...

    def close(self) -> None:
        ...


# =============================================================================
# SINKS
# =============================================================================

@runtime_checkable
class AlertSink(Protocol):
    """Speech and alarm output. Calls must not block the frame loop."""

    def speak(self, text: str) -> None:
        ...

    def play_alarm(self) -> None:
        ...

    def stop_alarm(self) -> None:
        ...


@runtime_checkable
class SessionSink(Protocol):
    """Persistence target for finished sessions."""

    def save(self, record: SessionRecord) -> Optional[int]:
        """
        Store a record.

        Returns:
            Fresh record id, or None if the record could not be stored
        """
        ...

    def close(self) -> None:
        ...
