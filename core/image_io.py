"""
Cookery — Image I/O
Handles image ingestion (file → PixelBuffer), the lossy JPEG round trip
used by -quality, and export of the cooked result.
"""

import io
from pathlib import Path

import numpy as np
from PIL import Image

from core.buffer import PixelBuffer

MAX_DIM = 800              # Max width after load (matches the cook canvas)
EXPORT_QUALITY = 92        # JPEG quality for exported artifacts

JPEG_SUFFIXES = {".jpg", ".jpeg"}


def fit_size(width: int, height: int, max_dim: int = MAX_DIM) -> tuple:
    """Scale (width, height) down so the width fits in max_dim, keeping aspect.

    Only the width is constrained, the way the cook canvas sized images.
    """
    if max_dim is None or width <= max_dim:
        return width, height
    ratio = width / height
    return max_dim, max(1, int(round(max_dim / ratio)))


def load_image(image_path, max_dim: int | None = MAX_DIM) -> PixelBuffer:
    """Load an image file as an RGBA buffer, downscaled to fit max_dim."""
    with Image.open(str(image_path)) as img:
        img = img.convert("RGBA")
        w, h = fit_size(img.width, img.height, max_dim)
        if (w, h) != img.size:
            img = img.resize((w, h), Image.Resampling.BILINEAR)
        return PixelBuffer(np.array(img, dtype=np.uint8))


def image_to_buffer(img: Image.Image) -> PixelBuffer:
    return PixelBuffer(np.array(img.convert("RGBA"), dtype=np.uint8))


def buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    return Image.fromarray(buffer.pixels, mode="RGBA")


def jpeg_roundtrip(rgba: np.ndarray, quality: float) -> np.ndarray:
    """Encode RGBA pixels as JPEG at quality in [0, 1] and decode them back.

    JPEG has no alpha, so the input alpha is reattached after decoding.
    Returns a new (H, W, 4) uint8 array of identical dimensions.
    """
    quality = max(0.0, min(1.0, float(quality)))
    jpeg_q = max(1, min(100, int(round(quality * 100))))

    img = Image.fromarray(np.ascontiguousarray(rgba[:, :, :3]), mode="RGB")
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=jpeg_q)
    buf.seek(0)
    with Image.open(buf) as decoded:
        rgb = np.array(decoded.convert("RGB"), dtype=np.uint8)

    return np.dstack([rgb, rgba[:, :, 3]])


def export_image(buffer: PixelBuffer, output_path, quality: int = EXPORT_QUALITY) -> Path:
    """Write the buffer to disk. JPEG for .jpg/.jpeg, otherwise by suffix.

    Returns:
        Path to the written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    img = buffer_to_image(buffer)

    if output_path.suffix.lower() in JPEG_SUFFIXES:
        quality = max(1, min(100, int(quality)))
        img.convert("RGB").save(str(output_path), format="JPEG", quality=quality)
    else:
        img.save(str(output_path))

    if not output_path.exists():
        raise RuntimeError(f"Failed to write output image: {output_path}")
    return output_path


def encode_jpeg(buffer: PixelBuffer, quality: int = EXPORT_QUALITY) -> bytes:
    """Encode the buffer as JPEG bytes (shareable artifact, no file)."""
    buf = io.BytesIO()
    buffer_to_image(buffer).convert("RGB").save(buf, format="JPEG", quality=max(1, min(100, int(quality))))
    return buf.getvalue()
