"""
Cookery — Compression Operation
Generational JPEG damage through one lossy encode/decode round trip.
"""

from core.buffer import PixelBuffer
from core.image_io import jpeg_roundtrip
from effects.random_source import resolve_rng, randint

QUALITY_RANGE = (1, 100)


def generate_quality(rng=None, strength: float = 1.0) -> int:
    r = randint(resolve_rng(rng), 1, 100)
    return max(1, min(100, int(round(101 - r * strength))))


def quality_fraction(factor: int) -> float:
    """Map 1-100 quality (1 = worst) onto the encoder's 0-1 scale.

    Squared so low factors produce heavier artefacts.
    """
    return max(0.01, (factor / 100.0) ** 2)


def quality(buffer: PixelBuffer, factor: int | None = None, rng=None,
            strength: float = 1.0, roundtrip=jpeg_roundtrip) -> str:
    """Re-encode the buffer as JPEG at the given quality and decode it back.

    Args:
        buffer: Target buffer (mutated in place).
        factor: JPEG-style quality 1-100. Drawn when None.
        roundtrip: Lossy codec callable (rgba, fraction) -> rgba.

    Returns:
        Canonical token, e.g. "-quality 17".
    """
    if factor is None:
        factor = generate_quality(rng, strength)
    factor = max(QUALITY_RANGE[0], min(QUALITY_RANGE[1], int(factor)))

    buffer.write(roundtrip(buffer.pixels, quality_fraction(factor)))
    return f"-quality {factor}"
