from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class StopReason(Enum):
    NO_TARGET = "no_target"
    LOW_HP = "low_hp"
    KILL = "kill"
    CANCELLED = "cancelled"
    RAID_OVER = "raid_over"


class AutoCombat:
    """Repeats a combat step until it reports a stop reason or is cancelled.

    The step callable performs one attack round and returns a StopReason to
    halt, or None to keep going. ``run`` blocks and sleeps ``delay`` seconds
    between rounds; ``step`` lets a caller (or a test) drive it by hand.
    """

    def __init__(self, step: Callable[[], Optional[StopReason]], delay: float = 0.5) -> None:
        self._step_fn = step
        self.delay = delay
        self._running = False
        self._rounds = 0
        self.stop_reason: Optional[StopReason] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def rounds(self) -> int:
        return self._rounds

    def start(self) -> None:
        """Arm the loop. Safe to call while running; it is a no-op then."""
        if self._running:
            logger.debug("AutoCombat.start() called while already running")
            return
        self._running = True
        self._rounds = 0
        self.stop_reason = None
        logger.debug("Auto-combat started (delay=%.2fs)", self.delay)

    def cancel(self) -> None:
        if not self._running:
            return
        self._halt(StopReason.CANCELLED)

    def step(self) -> Optional[StopReason]:
        """Run one round. Returns the stop reason once the loop has halted."""
        if not self._running:
            return self.stop_reason
        self._rounds += 1
        reason = self._step_fn()
        # The step itself may have cancelled us (e.g. game over)
        if reason is not None and self._running:
            self._halt(reason)
        return self.stop_reason

    def run(self, sleep: Callable[[float], None] = time.sleep, max_rounds: Optional[int] = None) -> Optional[StopReason]:
        """Blocking loop; returns why it stopped."""
        if not self._running:
            self.start()
        while self._running:
            self.step()
            if not self._running:
                break
            if max_rounds is not None and self._rounds >= max_rounds:
                self.cancel()
                break
            if self.delay > 0:
                sleep(self.delay)
        return self.stop_reason

    def _halt(self, reason: StopReason) -> None:
        self._running = False
        self.stop_reason = reason
        logger.debug("Auto-combat stopped after %d rounds: %s", self._rounds, reason.value)
