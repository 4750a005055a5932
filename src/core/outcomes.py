"""
Source of the random draws used by match generation and simulations.

Everything random in a simulation goes through a ``RandomOutcomes`` instance so
callers can seed it, and tests can replace it with a scripted sequence.
"""
import random
from typing import List, Optional, Tuple


class RandomOutcomes:
    """Uniform random outcomes backed by a private ``random.Random``."""

    def __init__(self, seed: Optional[int] = None, confidence_range: Tuple[int, int] = (80, 100)):
        low, high = confidence_range
        if low > high:
            raise ValueError(f"Invalid confidence range {low}-{high}")
        self.confidence_range = (low, high)
        self._rng = random.Random(seed)

    def shuffle(self, names: List[str]) -> List[str]:
        """Return a shuffled copy of ``names``."""
        shuffled = list(names)
        self._rng.shuffle(shuffled)
        return shuffled

    def pick_winner(self, home: str, away: str) -> str:
        return self._rng.choice([home, away])

    def confidence(self) -> int:
        """Confidence percentage, inclusive of both ends of the range."""
        return self._rng.randint(*self.confidence_range)

    def roll(self) -> float:
        """Uniform draw in [0, 1) used to decide a league result."""
        return self._rng.random()
