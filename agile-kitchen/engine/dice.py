from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar


T = TypeVar("T")


class Dice:
    """
    The only source of randomness in a session.

    Every draw goes through `sample()`, so a subclass that overrides it can
    replay a fixed sequence in tests.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def sample(self) -> float:
        """Uniform draw in [0, 1)."""
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """
        One draw compared against `probability`.
        Probabilities at or below zero always fail; no floor is applied.
        """
        return self.sample() < probability

    def pick(self, options: Sequence[T]) -> T:
        if not options:
            raise ValueError("Cannot pick from an empty sequence")
        idx = int(self.sample() * len(options))
        return options[min(idx, len(options) - 1)]
