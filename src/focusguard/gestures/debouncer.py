#!/usr/bin/env python3
"""
Cooldown gate for repeat-triggering gesture commands.
"""

import logging
from typing import Dict, Optional

from ..core.config import GestureConfig
from ..core.models import GestureKind

logger = logging.getLogger(__name__)


def default_cooldowns(config: Optional[GestureConfig] = None) -> Dict[GestureKind, float]:
    """Cooldowns in ms. DRAW and ERASE are absent: they track every frame."""
    config = config or GestureConfig()
    return {
        GestureKind.SELECT_COLOR: config.color_cooldown_ms,
        GestureKind.SAVE: config.save_cooldown_ms,
    }


class CommandDebouncer:
    """
    Remembers when each command kind last fired.

    A kind fires when it has never fired, or when strictly more than its
    cooldown has elapsed since it last did. Kinds without a cooldown
    always fire.
    """

    def __init__(self, cooldowns: Optional[Dict[GestureKind, float]] = None):
        self.cooldowns = dict(cooldowns) if cooldowns is not None else default_cooldowns()
        self._last_fired: Dict[GestureKind, float] = {}

    def should_fire(
        self,
        kind: GestureKind,
        timestamp_ms: float,
        cooldown_ms: Optional[float] = None
    ) -> bool:
        """
        Check the cooldown and, if it has passed, record this firing.

        Args:
            kind: Command kind
            timestamp_ms: Current wall-clock time
            cooldown_ms: Override the configured cooldown for this call
        """
        if cooldown_ms is None:
            cooldown_ms = self.cooldowns.get(kind)
        if cooldown_ms is None:
            return True

        last = self._last_fired.get(kind)
        if last is not None and timestamp_ms - last <= cooldown_ms:
            return False

        self._last_fired[kind] = timestamp_ms
        logger.debug(f"{kind.name} fired at {timestamp_ms:.0f}")
        return True

    def last_fired(self, kind: GestureKind) -> Optional[float]:
        return self._last_fired.get(kind)

    def reset(self, kind: Optional[GestureKind] = None) -> None:
        """Forget one kind, or all of them."""
        if kind is None:
            self._last_fired.clear()
        else:
            self._last_fired.pop(kind, None)
