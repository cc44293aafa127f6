#!/usr/bin/env python3
"""
Hand Landmarks - MediaPipe Version
==================================
MediaPipe Hands reduced to a (21, 2) normalized landmark array.
"""

import logging
from typing import Any, Optional

import cv2
import numpy as np

from ..gestures.geometry import as_landmark_array

logger = logging.getLogger(__name__)


def landmarks_to_array(hand_landmarks: Any) -> np.ndarray:
    """
    Convert one MediaPipe NormalizedLandmarkList to a (21, 2) array.

    Raises:
        InvalidInputError: if the hand does not have 21 landmarks
    """
    points = getattr(hand_landmarks, "landmark", hand_landmarks)
    return as_landmark_array(points)


class MediaPipeHandDetector:
    """HandLandmarkDetector tracking a single hand."""

    def __init__(
        self,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.5,
        model_complexity: int = 1,
        backend: Any = None
    ):
        if backend is None:
            import mediapipe as mp
            backend = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=1,
                model_complexity=model_complexity,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
        self._hands = backend
        logger.info(f"Hand tracking initialized: detection={min_detection_confidence:.2f}")

    def detect(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """Landmarks of the first hand in the BGR frame, or None."""
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self._hands.process(rgb)
        hands = getattr(results, "multi_hand_landmarks", None)
        if not hands:
            return None
        return landmarks_to_array(hands[0])

    def close(self) -> None:
        self._hands.close()
