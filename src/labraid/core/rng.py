from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RNG:
    """
    Deterministic-friendly RNG wrapper around random.Random.

    One instance is owned by the engine and handed to every subsystem that
    rolls dice (generation, AI idling, loot), so a single seed reproduces a
    whole raid. ``seed=None`` keeps the non-deterministic default.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)
        if self.seed is None:
            logger.debug("Initialized RNG with non-deterministic seed")
        else:
            logger.debug("Initialized RNG with deterministic seed=%s", self.seed)

    def random(self) -> float:
        """Return the next random float in the range [0.0, 1.0)."""
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self._rng.random() < probability

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self._rng.randrange(len(seq))]

    def state(self):
        """Return the internal PRNG state for debugging."""
        return self._rng.getstate()

    def set_state(self, state) -> None:
        """Restore the internal PRNG state."""
        self._rng.setstate(state)
