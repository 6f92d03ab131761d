"""
Cookery — Canvas
The "loaded image" workspace: keeps the original and a working buffer.
Every cook starts again from the original.
"""

from pathlib import Path

from core.buffer import PixelBuffer
from core.context import retarget, cook
from core.executor import cook_random
from core.image_io import load_image, export_image, MAX_DIM, EXPORT_QUALITY
from core.recipe import Recipe, DEFAULT_ITERATIONS
from core.safety import preflight


class Canvas:
    """Original image plus the buffer being cooked.

    Attributes:
        original: Untouched copy of the loaded image.
        buffer: Working buffer, result of the last cook.
        last_recipe: Effective recipe of the last cook (None before any cook).
        cooked: True once a cook has run (export makes sense).
    """

    def __init__(self, buffer: PixelBuffer, source_path: str | None = None):
        self.original = buffer.copy()
        self.buffer = buffer.copy()
        self.source_path = source_path
        self.last_recipe = None
        self.cooked = False

    @classmethod
    def open(cls, image_path, max_dim: int | None = MAX_DIM) -> "Canvas":
        """Validate and load an image file.

        Raises:
            SafetyError / FileNotFoundError from preflight.
        """
        info = preflight(image_path)
        return cls(load_image(info["path"], max_dim=max_dim), source_path=info["path"])

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def reset(self):
        """Throw away cooking and go back to the original."""
        self.buffer = self.original.copy()
        self.cooked = False

    def cook(self, recipe: Recipe, rng=None, strength: float = 1.0) -> Recipe:
        """Reset, then apply the recipe. Returns the effective recipe."""
        self.reset()
        with retarget(self.buffer):
            tokens = cook(recipe, rng=rng, strength=strength)
        self.last_recipe = Recipe.from_tokens(tokens)
        self.cooked = True
        return self.last_recipe

    def cook_random(self, iterations: int = DEFAULT_ITERATIONS, strength: float = 1.0,
                    rng=None) -> Recipe:
        """Reset, then cook with a fresh random recipe."""
        self.reset()
        with retarget(self.buffer) as target:
            self.last_recipe = cook_random(target, iterations, strength, rng=rng)
        self.cooked = True
        return self.last_recipe

    def export(self, output_path, quality: int = EXPORT_QUALITY) -> Path:
        return export_image(self.buffer, output_path, quality=quality)
