#!/usr/bin/env python3
"""
Hand gesture control for FocusGuard.

Classifier, cooldown gate and the air-writing canvas built on them.
"""

from .classifier import GestureClassifier, classify
from .debouncer import CommandDebouncer, default_cooldowns
from .canvas import AirCanvas, PALETTE
from .controller import AirWriterController

__all__ = [
    "GestureClassifier",
    "classify",
    "CommandDebouncer",
    "default_cooldowns",
    "AirCanvas",
    "PALETTE",
    "AirWriterController",
]
