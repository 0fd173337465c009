"""Seedable xoshiro128** bit generator.

Every generator in the package owns one of these and threads it through its
pipeline, so two instances never share state.
"""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence
from typing import TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
DEFAULT_SEED = 12345

_GOLDEN_GAMMA = 0x9E3779B9


def _rotl(x: int, k: int) -> int:
    return ((x << k) | (x >> (32 - k))) & MASK32


class GenRng:
    """xoshiro128** with splitmix32 seeding and a few sampling helpers."""

    __slots__ = ("_s",)

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self._s = [0, 0, 0, 0]
        self.seed(seed)

    @property
    def state(self) -> tuple[int, int, int, int]:
        s0, s1, s2, s3 = self._s
        return (s0, s1, s2, s3)

    def seed(self, seed: int) -> None:
        """Reset all four state words from a single 32-bit seed."""
        s = int(seed) & MASK32
        for i in range(4):
            s = (s + _GOLDEN_GAMMA) & MASK32
            z = s
            z = ((z ^ (z >> 16)) * 0x85EBCA6B) & MASK32
            z = ((z ^ (z >> 13)) * 0xC2B2AE35) & MASK32
            z = z ^ (z >> 16)
            self._s[i] = z

    def next_u32(self) -> int:
        s = self._s
        result = (_rotl((s[1] * 5) & MASK32, 7) * 9) & MASK32
        t = (s[1] << 9) & MASK32
        s[2] ^= s[0]
        s[3] ^= s[1]
        s[1] ^= s[2]
        s[0] ^= s[3]
        s[2] ^= t
        s[3] = _rotl(s[3], 11)
        return result

    def rand_int(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi]; ``lo`` when the range is empty or inverted."""
        if lo >= hi:
            return lo
        span = hi - lo + 1
        return lo + self.next_u32() % span

    def rand_float(self) -> float:
        """Uniform float in [0.0, 1.0) with 24 bits of resolution."""
        return (self.next_u32() >> 8) / float(1 << 24)

    def weighted_pick(self, weights: Sequence[float]) -> int:
        total = 0.0
        for weight in weights:
            total += weight
        if total <= 0.0:
            return 0
        r = self.rand_float() * total
        accum = 0.0
        for index, weight in enumerate(weights):
            accum += weight
            if r < accum:
                return index
        return len(weights) - 1

    def pick(self, values: Sequence[T], default: T | int = 0) -> T | int:
        if not values:
            return default
        return values[self.rand_int(0, len(values) - 1)]

    def shuffle(self, values: MutableSequence[T]) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(values) - 1, 0, -1):
            j = self.rand_int(0, i)
            values[i], values[j] = values[j], values[i]
