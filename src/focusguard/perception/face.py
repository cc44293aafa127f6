#!/usr/bin/env python3
"""
Face Presence - MediaPipe Version
=================================
MediaPipe face detection reduced to one boolean per frame.
"""

import logging
from typing import Any

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class MediaPipeFaceDetector:
    """FacePresenceDetector using MediaPipe's short-range face model."""

    def __init__(self, min_confidence: float = 0.5, model_selection: int = 0, backend: Any = None):
        """
        Args:
            min_confidence: Detection threshold (0-1)
            model_selection: 0 = short range (~2m), 1 = full range (~5m)
            backend: Pre-built detector with a .process(rgb) method
        """
        if backend is None:
            import mediapipe as mp
            backend = mp.solutions.face_detection.FaceDetection(
                model_selection=model_selection,
                min_detection_confidence=min_confidence,
            )
        self._detector = backend
        logger.info(f"Face detection initialized: confidence={min_confidence:.2f}, model={model_selection}")

    def detect(self, frame: np.ndarray) -> bool:
        """True if at least one face is in the BGR frame."""
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self._detector.process(rgb)
        return bool(getattr(results, "detections", None))

    def close(self) -> None:
        self._detector.close()
