#!/usr/bin/env python3
"""
Exceptions raised by the FocusGuard core.

Input anomalies (odd timestamps, unknown subjects) are never errors.
These are reserved for integration bugs upstream.
"""


class FocusGuardError(Exception):
    """Base class for all FocusGuard errors."""


class InvalidInputError(FocusGuardError, ValueError):
    """Malformed input shape, e.g. a hand sample without 21 landmarks."""


class SessionStateError(FocusGuardError, RuntimeError):
    """Session used outside its lifecycle (before start or after finalize)."""
