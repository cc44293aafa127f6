#!/usr/bin/env python3
"""
Static hand gesture classifier.

One frame of landmarks in, one command out. No state is kept between
calls; cooldowns live in CommandDebouncer.

Decision order (first match wins):
    4+ fingers up          → ERASE         (anchor: palm centroid)
    index + middle         → SELECT_COLOR  (anchor: index tip)
    index only             → DRAW          (anchor: index tip)
    fist, thumb tucked     → PAUSE         (anchor: palm centroid)
    fist, thumb out        → SAVE          (anchor: thumb tip)
    thumb-index pinch      → NONE + pinch  (anchor: index tip)
    anything else          → NONE
"""

import logging
from typing import Any, Dict, Optional

from ..core.config import GestureConfig
from ..core.models import GestureCommand, GestureKind, NO_GESTURE
from . import geometry as geo

logger = logging.getLogger(__name__)


class GestureClassifier:
    """Pure geometric classifier over 21 normalized hand landmarks."""

    def __init__(self, config: Optional[GestureConfig] = None):
        self.config = config or GestureConfig()

    def classify(self, landmarks: Any) -> GestureCommand:
        """
        Classify one hand sample.

        Args:
            landmarks: 21 (x, y) points, or None when no hand is visible

        Returns:
            GestureCommand with normalized anchor

        Raises:
            InvalidInputError: wrong landmark count or shape
        """
        if landmarks is None:
            return NO_GESTURE

        lm = geo.as_landmark_array(landmarks)
        fingers = self.finger_states(lm)
        thumb_up = geo.is_thumb_up(lm)
        up_count = sum(fingers.values())

        if up_count >= 4:
            return GestureCommand(GestureKind.ERASE, anchor=geo.centroid(lm, geo.PALM_POINTS))

        index, middle = fingers["index"], fingers["middle"]
        ring, pinky = fingers["ring"], fingers["pinky"]

        if index and middle and not ring and not pinky:
            return GestureCommand(GestureKind.SELECT_COLOR, anchor=geo.point(lm, geo.INDEX_TIP))

        if index and not middle and not ring and not pinky:
            return GestureCommand(GestureKind.DRAW, anchor=geo.point(lm, geo.INDEX_TIP))

        if up_count == 0 and not thumb_up:
            return GestureCommand(GestureKind.PAUSE, anchor=geo.centroid(lm, geo.PALM_POINTS))

        if up_count == 0 and thumb_up:
            return GestureCommand(GestureKind.SAVE, anchor=geo.point(lm, geo.THUMB_TIP))

        pinch = geo.distance(lm, geo.THUMB_TIP, geo.INDEX_TIP)
        if pinch < self.config.pinch_threshold:
            return GestureCommand(
                GestureKind.NONE,
                anchor=geo.point(lm, geo.INDEX_TIP),
                pinch=True,
                pinch_distance=pinch,
            )

        return NO_GESTURE

    @staticmethod
    def finger_states(lm) -> Dict[str, bool]:
        """Extended/curled per finger (thumb excluded)."""
        return {name: geo.is_extended(lm, tip, pip) for name, (tip, pip) in geo.FINGERS.items()}


def classify(landmarks: Any, config: Optional[GestureConfig] = None) -> GestureCommand:
    """Classify with a throwaway classifier (default config)."""
    return GestureClassifier(config).classify(landmarks)
