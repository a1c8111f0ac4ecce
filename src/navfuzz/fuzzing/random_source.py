"""
Deterministic random source for reproducible fuzzing sessions.
"""

import secrets
from typing import Sequence, TypeVar

T = TypeVar("T")

MASK_64 = (1 << 64) - 1

# Knuth / PCG 64-bit LCG constants
MULTIPLIER = 6364136223846793005
INCREMENT = 1442695040888963407


def generate_seed() -> int:
    """Fresh 64-bit seed from the OS, for sessions started without one."""
    return secrets.randbits(64)


def derive_seed(seed: int, index: int) -> int:
    """
    Derive an independent 64-bit seed from (seed, index).

    SplitMix64 finalizer over the combined value, so neighbouring indices
    give unrelated streams.
    """
    z = (seed + (index + 1) * 0x9E3779B97F4A7C15) & MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & MASK_64
    return z ^ (z >> 31)


class RandomSource:
    """
    Seeded 64-bit linear congruential generator.

    Every random decision in a session (action choice, backtracking,
    simulated latency and crashes) is drawn from an instance of this class,
    so re-running with the recorded seed reproduces a session exactly.
    Instances are passed around explicitly; there is no shared global one.
    """

    def __init__(self, seed: int):
        self.seed = seed & MASK_64
        self._state = self.seed

    def next(self) -> int:
        """Advance the generator and return the new 64-bit state."""
        self._state = (self._state * MULTIPLIER + INCREMENT) & MASK_64
        return self._state

    def below(self, n: int) -> int:
        """Uniform integer in [0, n), taken from the high bits."""
        if n <= 0:
            raise ValueError(f"n must be positive, got {n}")
        return (self.next() * n) >> 64

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[self.below(len(items))]

    def coin(self, probability: float = 0.5) -> bool:
        """True with the given probability."""
        if probability <= 0.0:
            self.next()
            return False
        if probability >= 1.0:
            self.next()
            return True
        return self.next() < int(probability * (1 << 64))

    def uniform(self, low: float, high: float) -> float:
        """Float in [low, high) built from the top 53 bits."""
        fraction = (self.next() >> 11) / float(1 << 53)
        return low + (high - low) * fraction

    def fork(self, index: int) -> "RandomSource":
        """Independent source for sub-stream `index`, derived from the initial seed."""
        return RandomSource(derive_seed(self.seed, index))

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
