"""
Conftest: shared fixtures for all Cookery test modules.

1. Shared random source reseed (per-test) — prevents draw-order leaks between tests
2. Synthetic buffers — gradient, random, flat gray
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.buffer import PixelBuffer


def _make_test_frame(width=64, height=48):
    """Generate a synthetic RGB test frame (gradient, not blank)."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)  # R gradient
    frame[:, :, 1] = 128  # constant G
    frame[:, :, 2] = np.linspace(255, 0, width, dtype=np.uint8)  # B inverse
    return frame


def _make_random_buffer(width=32, height=32, seed=555):
    rng = np.random.RandomState(seed)
    return PixelBuffer(rng.randint(0, 256, (height, width, 4), dtype=np.uint8))


@pytest.fixture
def gradient_buffer():
    return PixelBuffer.from_array(_make_test_frame())


@pytest.fixture
def random_buffer():
    return _make_random_buffer()


@pytest.fixture
def gray_buffer():
    """10x10 solid mid-gray, opaque."""
    return PixelBuffer.filled(10, 10, (128, 128, 128, 255))


@pytest.fixture(autouse=True)
def _reset_shared_rng():
    """Reseed the shared random source before each test."""
    from effects import seed

    seed(1234)
    yield
    seed(None)
