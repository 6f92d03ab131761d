"""
Cookery — Pixel Buffer
RGBA raster every operation reads and writes.
Backed by a (H, W, 4) uint8 numpy array.
"""

import numpy as np


class PixelBuffer:
    """Addressable RGBA raster.

    The array is owned by the buffer. Operations mutate it in place through
    `pixels` (bulk access) or `write` (shape-checked replacement).
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected (H, W, 4) array, got shape {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"Buffer must be at least 1x1, got {pixels.shape[1]}x{pixels.shape[0]}")
        if pixels.dtype != np.uint8:
            pixels = np.clip(pixels, 0, 255).astype(np.uint8)
        self._pixels = pixels

    @classmethod
    def allocate(cls, width: int, height: int) -> "PixelBuffer":
        """Zeroed (transparent black) buffer."""
        width, height = int(width), int(height)
        if width < 1 or height < 1:
            raise ValueError(f"Buffer must be at least 1x1, got {width}x{height}")
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from a gray, RGB or RGBA array (copied).

        Gray and RGB inputs get an opaque alpha channel.
        """
        array = np.asarray(array)
        if array.dtype != np.uint8:
            array = np.clip(np.rint(array), 0, 255).astype(np.uint8)
        if array.ndim == 2:
            array = np.stack([array, array, array], axis=2)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported array shape {array.shape}")
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            return cls(np.concatenate([array, alpha], axis=2))
        return cls(array.copy())

    @classmethod
    def filled(cls, width: int, height: int, rgba) -> "PixelBuffer":
        buf = cls.allocate(width, height)
        buf._pixels[:, :] = _clamp_rgba(rgba)
        return buf

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> tuple:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def rgb(self) -> np.ndarray:
        return self._pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[:, :, 3]

    def _check_bounds(self, x: int, y: int):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer")

    def get_pixel(self, x: int, y: int) -> tuple:
        self._check_bounds(x, y)
        return tuple(int(v) for v in self._pixels[y, x])

    def set_pixel(self, x: int, y: int, rgba):
        self._check_bounds(x, y)
        self._pixels[y, x] = _clamp_rgba(rgba)

    def write(self, array: np.ndarray):
        """Replace every channel value. Shape must match (H, W, 4)."""
        array = np.asarray(array)
        if array.shape != self._pixels.shape:
            raise ValueError(
                f"Shape mismatch: buffer is {self._pixels.shape}, got {array.shape}"
            )
        if array.dtype == np.uint8:
            self._pixels[...] = array
        else:
            self._pixels[...] = np.clip(np.rint(array), 0, 255).astype(np.uint8)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._pixels.copy())

    def tobytes(self) -> bytes:
        return self._pixels.tobytes()

    def same_pixels(self, other: "PixelBuffer") -> bool:
        return self._pixels.shape == other.pixels.shape and np.array_equal(self._pixels, other.pixels)

    def __repr__(self):
        return f"PixelBuffer({self.width}x{self.height})"


def _clamp_rgba(rgba) -> np.ndarray:
    values = list(rgba)
    if len(values) == 3:
        values.append(255)
    if len(values) != 4:
        raise ValueError(f"Expected RGB or RGBA value, got {rgba!r}")
    return np.clip(np.rint(np.asarray(values, dtype=np.float64)), 0, 255).astype(np.uint8)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round to nearest and clamp into [0, 255]."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)
