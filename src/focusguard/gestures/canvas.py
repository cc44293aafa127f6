#!/usr/bin/env python3
"""
Air-writing canvas.

A BGR numpy image that strokes are drawn onto with OpenCV, with bounded
undo/redo history and PNG export.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, List, Optional, Tuple

import cv2
import numpy as np

from ..core.config import GestureConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaletteColor:
    """Named stroke color. bgr is in OpenCV channel order."""
    name: str
    hex: str

    @property
    def bgr(self) -> Tuple[int, int, int]:
        value = self.hex.lstrip("#")
        r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
        return (b, g, r)


PALETTE: Tuple[PaletteColor, ...] = (
    PaletteColor("White", "#FFFFFF"),
    PaletteColor("Red", "#FF1313"),
    PaletteColor("Green", "#17DD62"),
    PaletteColor("Blue", "#345EC3"),
    PaletteColor("Yellow", "#FCDB05"),
    PaletteColor("Cyan", "#4AEDD9"),
    PaletteColor("Magenta", "#FF00FF"),
)

DEFAULT_COLOR_INDEX = 2  # Green


class AirCanvas:
    """
    Persistent drawing surface.

    History holds snapshots taken before each stroke (and after clears),
    capped at config.undo_history_limit.
    """

    def __init__(self, config: Optional[GestureConfig] = None):
        self.config = config or GestureConfig()
        self.width = self.config.canvas_width
        self.height = self.config.canvas_height
        self.image = np.zeros((self.height, self.width, 3), dtype=np.uint8)

        self.color_index = DEFAULT_COLOR_INDEX
        self.thickness = self.config.default_thickness

        self._history: Deque[np.ndarray] = deque(maxlen=self.config.undo_history_limit)
        self._redo: List[np.ndarray] = []

    # =========================================================================
    # STYLE
    # =========================================================================

    @property
    def color(self) -> PaletteColor:
        return PALETTE[self.color_index]

    def next_color(self) -> PaletteColor:
        """Cycle to the next palette color."""
        self.color_index = (self.color_index + 1) % len(PALETTE)
        return self.color

    def set_thickness(self, thickness: float) -> int:
        """Set stroke thickness, clamped to the configured range."""
        self.thickness = int(np.clip(round(thickness), self.config.min_thickness, self.config.max_thickness))
        return self.thickness

    # =========================================================================
    # DRAWING
    # =========================================================================

    def draw_segment(self, start: Tuple[int, int], end: Tuple[int, int]) -> None:
        cv2.line(self.image, start, end, self.color.bgr, self.thickness, cv2.LINE_AA)

    def erase_at(self, center: Tuple[int, int]) -> None:
        """Clear a square around center."""
        half = self.config.erase_half_size
        x, y = center
        x1, y1 = max(0, x - half), max(0, y - half)
        x2, y2 = min(self.width, x + half), min(self.height, y + half)
        if x1 < x2 and y1 < y2:
            self.image[y1:y2, x1:x2] = 0

    def clear(self) -> None:
        """Wipe everything (undoable)."""
        self.snapshot()
        self.image[:] = 0
        logger.info("Canvas cleared")

    # =========================================================================
    # HISTORY
    # =========================================================================

    def snapshot(self) -> None:
        """Remember the current image for undo. Drops the redo stack."""
        self._history.append(self.image.copy())
        self._redo.clear()

    def undo(self) -> bool:
        if not self._history:
            return False
        self._redo.append(self.image.copy())
        self.image = self._history.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._history.append(self.image.copy())
        self.image = self._redo.pop()
        return True

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    # =========================================================================
    # EXPORT
    # =========================================================================

    def save(self, directory: str = ".", timestamp_ms: Optional[float] = None) -> Path:
        """Write the canvas as air-writing-<ms>.png."""
        ts = int(time.time() * 1000 if timestamp_ms is None else timestamp_ms)
        path = Path(directory) / f"air-writing-{ts}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(path), self.image):
            raise IOError(f"Could not write {path}")
        logger.info(f"Canvas saved to {path}")
        return path

    def to_pixel(self, anchor: Tuple[float, float], mirror: bool = True) -> Tuple[int, int]:
        """
        Normalized detector point to canvas pixels.

        The camera preview is mirrored, so x is flipped by default.
        """
        x, y = anchor
        if mirror:
            x = 1.0 - x
        return (int(round(x * self.width)), int(round(y * self.height)))
