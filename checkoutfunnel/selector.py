"""Seedable random choices used by the funnel (targets and think-time)."""

import random
from typing import Sequence, TypeVar

from .errors import EmptyCandidateSet

T = TypeVar("T")


class RandomSelector:
    """Wraps a private ``random.Random`` so each virtual user can be seeded."""

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)

    def pick_one(self, candidates: Sequence[T]) -> T:
        if not candidates:
            raise EmptyCandidateSet("cannot pick from an empty candidate set")
        return self._random.choice(candidates)

    def pick_range(self, low: float, high: float) -> float:
        """Uniform value in ``[low, high]``."""
        if low > high:
            raise ValueError(f"invalid range: min {low} > max {high}")
        if low == high:
            return low
        value = self._random.uniform(low, high)
        # uniform() may round onto either side of the interval
        return min(max(value, low), high)

    def pick_int(self, low: int, high: int) -> int:
        return self._random.randint(low, high)
