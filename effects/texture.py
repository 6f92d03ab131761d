"""
Cookery — Texture Operations
Laplacian edge detection and uniform grain noise.
"""

import numpy as np
import cv2

from core.buffer import PixelBuffer, to_uint8
from effects.random_source import resolve_rng, randint

# Default draw for -noise. Kept as a range so it can be widened; the
# classic cook always used a fixed 60.
NOISE_AMOUNT_RANGE = (60, 60)
MAX_NOISE_AMOUNT = 255

EDGE_KERNEL = np.array([
    [-1, -1, -1],
    [-1, 8, -1],
    [-1, -1, -1],
], dtype=np.float32)


def generate_noise(rng=None, strength: float = 1.0) -> int:
    return int(round(randint(resolve_rng(rng), *NOISE_AMOUNT_RANGE) * strength))


def edge(buffer: PixelBuffer, parameter=None, rng=None, strength: float = 1.0) -> str:
    """3x3 Laplacian edge detector on interior pixels.

    The 1-pixel border and the alpha channel are left untouched. Any
    parameter is ignored; the kernel is fixed.

    Returns:
        "-edge"
    """
    h, w = buffer.height, buffer.width
    if h < 3 or w < 3:
        return "-edge"

    rgb = buffer.rgb.astype(np.float32)
    # Kernel is symmetric, so correlation == convolution
    conv = cv2.filter2D(rgb, -1, EDGE_KERNEL)
    buffer.rgb[1:-1, 1:-1] = to_uint8(conv[1:-1, 1:-1])
    return "-edge"


def noise(buffer: PixelBuffer, amount: int | None = None, rng=None,
          strength: float = 1.0) -> str:
    """Add uniform integer noise in [-amount, amount] to each pixel.

    The same offset is added to R, G and B of a pixel (luma grain); alpha
    is untouched.

    Args:
        buffer: Target buffer (mutated in place).
        amount: Noise magnitude (0-255). Drawn from NOISE_AMOUNT_RANGE when None.
        rng: Random source for the amount and the noise field.
        strength: 0.0-1.0 scale applied to a drawn amount.

    Returns:
        Canonical token, e.g. "-noise 60".
    """
    rng = resolve_rng(rng)
    if amount is None:
        amount = generate_noise(rng, strength)
    amount = max(0, min(MAX_NOISE_AMOUNT, int(amount)))
    if amount == 0:
        return "-noise 0"

    h, w = buffer.height, buffer.width
    grain = rng.randint(-amount, amount + 1, size=(h, w)).astype(np.int16)
    noisy = buffer.rgb.astype(np.int16) + grain[:, :, np.newaxis]
    buffer.rgb[...] = np.clip(noisy, 0, 255).astype(np.uint8)
    return f"-noise {amount}"
