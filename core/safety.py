"""
Cookery — Safety & Resource Guards
Centralized preflight checks run before any file processing.
Prevents runaway memory use from huge inputs and runaway recipes.
"""

import os
from pathlib import Path

from PIL import Image

# --- Configurable Limits ---
MAX_FILE_MB = 50           # Maximum input file size
MAX_PIXELS = 40_000_000    # Maximum decoded image area (before fit-to-canvas)
MAX_RECIPE_STEPS = 200     # Maximum steps in one recipe
MAX_ITERATIONS = 200       # Maximum random steps per cook
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


def preflight(input_path) -> dict:
    """Run all safety checks before loading an image.

    Args:
        input_path: Path to the input image.

    Returns:
        dict with file metadata (path, size_mb, extension, width, height)

    Raises:
        SafetyError: If any check fails.
        FileNotFoundError: If input doesn't exist.
    """
    input_path = str(input_path)
    real_path = os.path.realpath(input_path)

    # 1. File exists
    if not os.path.isfile(real_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    # 2. File size check
    size_bytes = os.path.getsize(real_path)
    size_mb = size_bytes / (1024 * 1024)
    if size_mb > MAX_FILE_MB:
        raise SafetyError(
            f"Input file is {size_mb:.0f}MB, exceeds {MAX_FILE_MB}MB limit. "
            f"Use a smaller image."
        )

    # 3. File extension check
    ext = Path(real_path).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise SafetyError(
            f"File type '{ext}' not allowed. "
            f"Supported: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    # 4. Decodable and not absurdly large (reads the header only)
    try:
        with Image.open(real_path) as img:
            width, height = img.size
    except (OSError, Image.DecompressionBombError) as e:
        raise SafetyError(f"Not a readable image: {input_path} ({e})")

    if width * height > MAX_PIXELS:
        raise SafetyError(
            f"Image is {width}x{height}, exceeds {MAX_PIXELS} pixel limit."
        )

    return {
        "path": real_path,
        "size_mb": size_mb,
        "extension": ext,
        "width": width,
        "height": height,
    }


def validate_recipe_length(steps) -> None:
    """Check that a recipe isn't too long.

    Raises:
        SafetyError: If the recipe exceeds MAX_RECIPE_STEPS.
    """
    if len(steps) > MAX_RECIPE_STEPS:
        raise SafetyError(
            f"Recipe has {len(steps)} steps, max is {MAX_RECIPE_STEPS}. "
            f"Split into multiple cooks."
        )


def validate_iterations(iterations: int) -> int:
    """Validate a random-cook step count. Returns it as int."""
    try:
        iterations = int(iterations)
    except (TypeError, ValueError):
        raise SafetyError(f"Iterations must be an integer, got {iterations!r}")
    if iterations < 0 or iterations > MAX_ITERATIONS:
        raise SafetyError(f"Iterations must be 0-{MAX_ITERATIONS}, got {iterations}")
    return iterations


def validate_strength(strength: float) -> float:
    """Validate a strength multiplier. Returns it as float in [0, 1].

    Raises:
        SafetyError: On NaN/Inf or values outside [0, 1].
    """
    try:
        strength = float(strength)
    except (TypeError, ValueError):
        raise SafetyError(f"Strength must be a number, got {strength!r}")
    if strength != strength or strength in (float("inf"), float("-inf")):
        raise SafetyError("NaN/Inf not allowed for strength")
    if not 0.0 <= strength <= 1.0:
        raise SafetyError(f"Strength must be 0.0-1.0, got {strength}")
    return strength
