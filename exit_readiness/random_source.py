"""Deterministic random numbers for reproducible simulations."""

from __future__ import annotations

import math
from functools import lru_cache

import numpy as np

LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MASK = 0x7FFFFFFF
LCG_MODULUS = 2**31

# Substitute for a zero uniform draw so log() stays finite
ZERO_GUARD = 1e-4


class SeededRandom:
    """
    31-bit linear congruential generator with Box-Muller normals.

    State is an exact Python integer, so a given seed yields the same
    sequence on every platform.
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed) & LCG_MASK

    def next(self) -> float:
        """Uniform draw in [0, 1)."""
        self.seed = (self.seed * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK
        return self.seed / LCG_MODULUS

    def next_gaussian(self) -> float:
        """Standard normal draw from two uniforms."""
        u1 = self.next()
        u2 = self.next()
        return math.sqrt(-2 * math.log(u1 or ZERO_GUARD)) * math.cos(2 * math.pi * u2)


@lru_cache(maxsize=16)
def draw_standard_normals(base_seed: int, n_runs: int, n_steps: int) -> np.ndarray:
    """
    Standard normal draws for an ensemble, shape (n_runs, n_steps).

    Row i comes from SeededRandom(base_seed + i), so any two simulations
    sharing a base seed see the same shocks run for run (common random
    numbers). The returned array is cached and read-only.
    """
    draws = np.empty((n_runs, n_steps))
    for run in range(n_runs):
        rng = SeededRandom(base_seed + run)
        draws[run] = [rng.next_gaussian() for _ in range(n_steps)]
    draws.setflags(write=False)
    return draws
