"""Random number generation for world building and session variety.

Two generators live here:

* :class:`SeededRNG` is a mulberry32 stream over a 32-bit integer state.  Every
  layout, room graph and item placement is drawn from it, so the same root
  seed always reproduces the same buildings.  The step function
  :func:`next_float` is pure: it maps a state to ``(value, new_state)`` and
  never touches system entropy.
* :class:`GameRNG` wraps :func:`numpy.random.default_rng` and serves the
  choices that are allowed to differ between sessions (token shuffling,
  enemy spawn jitter, particle velocities).  Passing an explicit seed makes
  it reproducible for tests.
"""

from __future__ import annotations

import random
from typing import Any, List, MutableSequence, Optional, Sequence, Tuple

import numpy as np

UINT32_MASK = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    return (a * b) & UINT32_MASK


def next_float(state: int) -> Tuple[float, int]:
    """Advance a mulberry32 state by one step.

    Returns the drawn value in ``[0, 1)`` together with the new state.
    """
    state = (state + MULBERRY_INCREMENT) & UINT32_MASK
    t = state
    t = _imul(t ^ (t >> 15), t | 1)
    t ^= (t + _imul(t ^ (t >> 7), t | 61)) & UINT32_MASK
    t &= UINT32_MASK
    return ((t ^ (t >> 14)) & UINT32_MASK) / _TWO_POW_32, state


def int_in_range(draw: float, a: int, b: int) -> int:
    """Map a ``[0, 1)`` draw uniformly onto the inclusive range ``[a, b]``."""
    if a > b:
        raise ValueError("a <= b")
    return int(draw * (b - a + 1)) + a


class SeededRNG:
    """Deterministic stream built on :func:`next_float`."""

    def __init__(self, seed: int) -> None:
        self.initial_seed = int(seed)
        self.state = self.initial_seed & UINT32_MASK

    def get_float(self) -> float:
        value, self.state = next_float(self.state)
        return value

    def get_int(self, a: int, b: int) -> int:
        return int_in_range(self.get_float(), a, b)

    def chance(self, probability: float) -> bool:
        return self.get_float() < probability

    def choice(self, seq: Sequence[Any]) -> Any:
        if not seq:
            raise ValueError("choice from empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]

    def pop_random(self, seq: MutableSequence[Any]) -> Any:
        """Remove and return a uniformly chosen element of ``seq``."""
        if not seq:
            raise ValueError("pop from empty sequence")
        return seq.pop(self.get_int(0, len(seq) - 1))

    def threshold_choice(self, table: Sequence[Tuple[float, Any]]) -> Any:
        """Pick from ``(upper_bound, value)`` pairs using one draw.

        The pairs must be sorted by bound; the last value is used when the
        draw exceeds every bound.
        """
        draw = self.get_float()
        for bound, value in table:
            if draw < bound:
                return value
        return table[-1][1]


class GameRNG:
    """Non-seeded session randomness backed by numpy."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)

    def get_int(self, a: int, b: int) -> int:
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        if a > b:
            raise ValueError("a <= b")
        return a + (b - a) * float(self.rng.random())

    def choice(self, seq: Sequence[Any]) -> Any:
        if not seq:
            raise ValueError("choice from empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]

    def shuffle(self, seq: List[Any]) -> None:
        self.rng.shuffle(seq)


__all__ = ["GameRNG", "SeededRNG", "next_float", "int_in_range"]
