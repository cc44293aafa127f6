#!/usr/bin/env python3
"""
Hand landmark geometry.

Landmarks follow the 21-point hand convention used by MediaPipe Hands,
in normalized image coordinates (x right, y down, both 0-1).
"""

from typing import Any, Sequence, Tuple

import numpy as np

from ..core.exceptions import InvalidInputError


NUM_LANDMARKS = 21

# Landmark indices
WRIST = 0
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_TIP = 8
MIDDLE_PIP = 10
MIDDLE_TIP = 12
RING_PIP = 14
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_TIP = 20

# (tip, pip) per finger, thumb excluded
FINGERS = {
    "index": (INDEX_TIP, INDEX_PIP),
    "middle": (MIDDLE_TIP, MIDDLE_PIP),
    "ring": (RING_TIP, RING_PIP),
    "pinky": (PINKY_TIP, PINKY_PIP),
}

PALM_POINTS = (WRIST, INDEX_MCP, PINKY_MCP)

Point = Tuple[float, float]


def as_landmark_array(landmarks: Any) -> np.ndarray:
    """
    Normalize a hand sample to a (21, 2) float array.

    Accepts a numpy array of shape (21, 2) or (21, 3), a sequence of
    (x, y[, z]) tuples, or a sequence of objects with .x and .y.

    Raises:
        InvalidInputError: if the sample does not hold 21 2D points
    """
    if isinstance(landmarks, np.ndarray):
        arr = landmarks
    else:
        try:
            points = list(landmarks)
        except TypeError:
            raise InvalidInputError(f"landmarks must be a sequence, got {type(landmarks).__name__}")
        try:
            if points and hasattr(points[0], "x"):
                points = [(p.x, p.y) for p in points]
            arr = np.asarray(points, dtype=float)
        except (AttributeError, TypeError, ValueError) as e:
            raise InvalidInputError(f"landmarks are not numeric points: {e}")

    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] not in (2, 3):
        raise InvalidInputError(
            f"expected {NUM_LANDMARKS} landmarks of 2 or 3 coords, got shape {arr.shape}"
        )
    return arr[:, :2].astype(float)


def distance(lm: np.ndarray, a: int, b: int) -> float:
    """Euclidean distance between two landmarks."""
    return float(np.linalg.norm(lm[a] - lm[b]))


def is_above(lm: np.ndarray, a: int, b: int) -> bool:
    """True if landmark a is higher on screen than b (smaller y)."""
    return bool(lm[a, 1] < lm[b, 1])


def is_extended(lm: np.ndarray, tip: int, pip: int) -> bool:
    """A finger counts as extended when its tip is above its PIP joint."""
    return is_above(lm, tip, pip)


def is_thumb_up(lm: np.ndarray) -> bool:
    """
    Thumb tip left of its IP joint.

    Only an x comparison: it ignores handedness and camera mirroring, so
    a left hand reads opposite to a right hand.
    """
    return bool(lm[THUMB_TIP, 0] < lm[THUMB_IP, 0])


def centroid(lm: np.ndarray, indices: Sequence[int]) -> Point:
    """Mean position of the given landmarks."""
    x, y = lm[list(indices)].mean(axis=0)
    return (float(x), float(y))


def point(lm: np.ndarray, index: int) -> Point:
    """Landmark as a plain (x, y) tuple."""
    return (float(lm[index, 0]), float(lm[index, 1]))
