"""
Cookery — Color Operations
Saturation/brightness modulation, linear contrast, luminance normalization.
"""

import numpy as np

from core.buffer import PixelBuffer, to_uint8
from effects.random_source import resolve_rng, randint

MODULATE_RANGE = (100, 500)
BRIGHTNESS_RANGE = (-50, 80)
CONTRAST_RANGE = (10, 200)

# Saturation gray uses Rec.601-style weights, normalize uses Rec.709.
SATURATION_WEIGHTS = np.array([0.2989, 0.5870, 0.1140], dtype=np.float32)
LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


def generate_modulate(rng=None, strength: float = 1.0) -> int:
    factor = randint(resolve_rng(rng), *MODULATE_RANGE)
    return int(round((factor - 100) * strength + 100))


def generate_brightness(rng=None, strength: float = 1.0) -> int:
    return int(round(randint(resolve_rng(rng), *BRIGHTNESS_RANGE) * strength))


def generate_contrast(rng=None, strength: float = 1.0) -> int:
    return int(round(randint(resolve_rng(rng), *CONTRAST_RANGE) * strength))


def modulate(buffer: PixelBuffer, factor: int | None = None, rng=None,
             strength: float = 1.0, brightness: int | None = None) -> str:
    """Rescale saturation around gray, then shift brightness.

    Args:
        buffer: Target buffer (mutated in place).
        factor: Saturation percent. 100 = unchanged, 500 = 5x saturation.
            Drawn from MODULATE_RANGE when None.
        rng: Random source for drawn values (shared source when None).
        strength: 0.0-1.0 scale applied to drawn values.
        brightness: Offset added to every RGB channel. When None it is
            drawn from BRIGHTNESS_RANGE along with a drawn factor, and is 0
            for an explicit factor.

    Returns:
        Canonical token, e.g. "-modulate 240".
    """
    rng = resolve_rng(rng)
    if factor is None:
        factor = generate_modulate(rng, strength)
        if brightness is None:
            brightness = generate_brightness(rng, strength)
    factor = int(factor)
    if brightness is None:
        brightness = 0

    rgb = buffer.rgb.astype(np.float32)
    gray = (rgb @ SATURATION_WEIGHTS)[:, :, np.newaxis]
    saturated = to_uint8(gray + (rgb - gray) * (factor / 100.0))

    if brightness:
        saturated = to_uint8(saturated.astype(np.float32) + float(brightness))

    buffer.rgb[...] = saturated
    return f"-modulate {factor}"


def contrast_factor(value: float) -> float:
    return (259.0 * (value + 255.0)) / (255.0 * (259.0 - value))


def contrast(buffer: PixelBuffer, value: int | None = None, rng=None,
             strength: float = 1.0) -> str:
    """Linear contrast stretch pivoting on 128.

    value is clamped to [-255, 255]; negative values flatten toward gray.
    """
    if value is None:
        value = generate_contrast(rng, strength)
    value = max(-255, min(255, int(value)))

    factor = contrast_factor(value)
    rgb = buffer.rgb.astype(np.float32)
    buffer.rgb[...] = to_uint8(factor * (rgb - 128.0) + 128.0)
    return f"-contrast {value}"


def normalize(buffer: PixelBuffer, parameter=None, rng=None,
              strength: float = 1.0) -> str:
    """Stretch the luminance range of the whole buffer to 0-255.

    Every RGB channel is remapped with the luminance min/max. A flat image
    (max == min) is left unchanged. Idempotent on gray buffers only: on color
    input the per-channel clamp shifts luminance, so a second pass drifts a little.
    """
    rgb = buffer.rgb.astype(np.float64)
    lum = rgb @ LUMINANCE_WEIGHTS
    lo = float(lum.min())
    hi = float(lum.max())
    span = hi - lo
    if span <= 0:
        return "-normalize"

    buffer.rgb[...] = to_uint8((rgb - lo) / span * 255.0)
    return "-normalize"
