"""
Cookery — Shared Random Source
Process-wide RandomState used whenever an operation draws its own parameter.
Every operation also accepts an explicit rng, which bypasses this one.
"""

import numpy as np

_shared_rng = np.random.RandomState()


def shared_rng() -> np.random.RandomState:
    return _shared_rng


def seed(value: int | None = None):
    """Reseed the shared source (None = fresh OS entropy)."""
    _shared_rng.seed(value)


def resolve_rng(rng=None) -> np.random.RandomState:
    """Explicit rng if given, else the shared one. Ints are treated as seeds."""
    if rng is None:
        return _shared_rng
    if isinstance(rng, (int, np.integer)):
        return np.random.RandomState(int(rng))
    return rng


def randint(rng, low: int, high: int) -> int:
    """Uniform integer in [low, high], both ends inclusive."""
    return int(rng.randint(low, high + 1))
