"""
Cookery — Operation Catalog
Registry of the seven cook operations and a uniform interface to them.
Every operation is a function: (buffer, parameter=None, rng=None, strength=1.0) -> token
"""

from core.buffer import PixelBuffer
from effects.random_source import shared_rng, seed, resolve_rng
from effects.color import (
    modulate, contrast, normalize,
    generate_modulate, generate_contrast,
    MODULATE_RANGE, CONTRAST_RANGE,
)
from effects.texture import edge, noise, generate_noise, NOISE_AMOUNT_RANGE
from effects.pixelate import resize, generate_resize, RESIZE_RANGE
from effects.compress import quality, generate_quality, QUALITY_RANGE

# Master registry: token -> (function, parameter generator, range, description)
# Order matters: random recipes pick uniformly from this order.
OPERATIONS = {
    "-modulate": {
        "fn": modulate,
        "generate": generate_modulate,
        "param_range": MODULATE_RANGE,
        "category": "color",
        "description": "Saturation boost around gray plus a random brightness swing",
    },
    "-quality": {
        "fn": quality,
        "generate": generate_quality,
        "param_range": QUALITY_RANGE,
        "category": "compression",
        "description": "JPEG re-encode at low quality (1 = worst)",
    },
    "-contrast": {
        "fn": contrast,
        "generate": generate_contrast,
        "param_range": CONTRAST_RANGE,
        "category": "color",
        "description": "Linear contrast stretch around mid-gray",
    },
    "-resize": {
        "fn": resize,
        "generate": generate_resize,
        "param_range": RESIZE_RANGE,
        "category": "geometry",
        "description": "Shrink to N% and scale back up for blocky pixelation",
    },
    "-edge": {
        "fn": edge,
        "generate": None,
        "param_range": None,
        "category": "texture",
        "description": "3x3 Laplacian edge detection (1px border untouched)",
    },
    "-noise": {
        "fn": noise,
        "generate": generate_noise,
        "param_range": NOISE_AMOUNT_RANGE,
        "category": "texture",
        "description": "Uniform grain added equally to R, G and B",
    },
    "-normalize": {
        "fn": normalize,
        "generate": None,
        "param_range": None,
        "category": "color",
        "description": "Stretch luminance range to full 0-255",
    },
}

CATEGORIES = {
    "color": "Saturation, brightness, contrast and levels",
    "compression": "Lossy codec damage",
    "geometry": "Resampling artefacts",
    "texture": "Edges and grain",
}


def is_known(token: str) -> bool:
    return token in OPERATIONS


def get_operation(token: str):
    """Get an operation function by token.

    Raises ValueError if the token isn't in the catalog.
    """
    if token not in OPERATIONS:
        available = ", ".join(OPERATIONS.keys())
        raise ValueError(f"Unknown operation: {token}. Available: {available}")
    return OPERATIONS[token]["fn"]


def takes_parameter(token: str) -> bool:
    return OPERATIONS[token]["generate"] is not None


def generate_parameter(token: str, rng=None, strength: float = 1.0) -> int | None:
    """Draw the parameter an operation would pick for itself, without touching pixels.

    Returns None for operations that take no parameter.
    """
    get_operation(token)
    generator = OPERATIONS[token]["generate"]
    if generator is None:
        return None
    return generator(resolve_rng(rng), strength)


def list_operations(category: str = None) -> list[dict]:
    """List all operations with descriptions.

    Args:
        category: Optional filter — only return operations in this category.
    """
    results = []
    for token, entry in OPERATIONS.items():
        if category and entry["category"] != category:
            continue
        results.append({
            "token": token,
            "description": entry["description"],
            "param_range": entry["param_range"],
            "category": entry["category"],
        })
    return results


def apply_operation(buffer: PixelBuffer, token: str, parameter: int | None = None,
                    rng=None, strength: float = 1.0) -> str:
    """Apply one operation to the buffer in place and return its canonical token."""
    fn = get_operation(token)
    if not takes_parameter(token):
        parameter = None
    return fn(buffer, parameter, rng=resolve_rng(rng), strength=strength)


__all__ = [
    "OPERATIONS", "CATEGORIES",
    "is_known", "get_operation", "takes_parameter", "generate_parameter",
    "list_operations", "apply_operation",
    "shared_rng", "seed",
]
