"""
Seeded Random

A portable 64-bit linear congruential generator. Any implementation using the
same constants and seed produces the same sequence bit for bit.

    state_{n+1} = (A * state_n + C) mod 2**64
    draw        = (state_{n+1} >> 11) / 2**53
"""

from __future__ import annotations

import math

MULTIPLIER = 6364136223846793005
INCREMENT = 1442695040888963407
MASK_64 = (1 << 64) - 1


class SeededRandom:
    """Uniform doubles in [0, 1) from a fixed seed."""

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK_64

    def random(self) -> float:
        """Advance the generator once and return a double in [0, 1)."""
        self.state = (MULTIPLIER * self.state + INCREMENT) & MASK_64
        return (self.state >> 11) / float(1 << 53)

    def uniform(self, low: float, high: float) -> float:
        """Return ``r * (high - low) + low`` for one draw ``r``, kept below ``high``."""
        value = self.random() * (high - low) + low
        if value >= high:
            # rounding can land exactly on the upper bound
            value = math.nextafter(high, low)
        return value
