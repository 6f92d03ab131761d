"""
Cookery — Pixelate Operation
Nearest-neighbor downscale then upscale back for blocky pixelation.
"""

import numpy as np
from PIL import Image

from core.buffer import PixelBuffer
from effects.random_source import resolve_rng, randint

RESIZE_RANGE = (5, 95)


def generate_resize(rng=None, strength: float = 1.0) -> int:
    percent = randint(resolve_rng(rng), *RESIZE_RANGE)
    return max(1, int(np.floor((percent - 100) * strength + 100)))


def shrunk_size(width: int, height: int, percent: int) -> tuple:
    """Intermediate size for a percent of the width, aspect kept, at least 1x1."""
    small_w = max(1, int(width * percent / 100))
    small_h = max(1, int(round(small_w / width * height)))
    return small_w, small_h


def resize(buffer: PixelBuffer, percent: int | None = None, rng=None,
           strength: float = 1.0) -> str:
    """Shrink to percent% of the width, then blow back up without smoothing.

    Args:
        buffer: Target buffer (mutated in place, dimensions unchanged).
        percent: 1-100. Drawn from RESIZE_RANGE when None.

    Returns:
        Canonical token, e.g. "-resize 40".
    """
    if percent is None:
        percent = generate_resize(rng, strength)
    percent = max(1, min(100, int(percent)))

    w, h = buffer.width, buffer.height
    small_w, small_h = shrunk_size(w, h, percent)
    if (small_w, small_h) == (w, h):
        return f"-resize {percent}"

    img = Image.fromarray(buffer.pixels, mode="RGBA")
    small = img.resize((small_w, small_h), Image.Resampling.NEAREST)
    buffer.write(np.array(small.resize((w, h), Image.Resampling.NEAREST)))
    return f"-resize {percent}"
