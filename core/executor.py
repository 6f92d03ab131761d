"""
Cookery — Recipe Executor
Runs a recipe against a buffer, one step at a time, in order.
Each step's output is the next step's input.
"""

import logging

from core.buffer import PixelBuffer
from core.recipe import Recipe, RecipeStep, generate_random, DEFAULT_ITERATIONS
from core.safety import validate_recipe_length, validate_iterations, validate_strength
from effects import OPERATIONS, apply_operation
from effects.random_source import resolve_rng


def apply_step(buffer: PixelBuffer, step: RecipeStep, rng=None,
               strength: float = 1.0) -> str | None:
    """Apply one step. Returns the emitted token, or None if it was skipped."""
    if step.operation not in OPERATIONS:
        logging.warning("Unknown recipe operation %r, skipping", step.operation)
        return None
    return apply_operation(buffer, step.operation, step.parameter, rng=rng, strength=strength)


def apply_recipe(buffer: PixelBuffer, recipe: Recipe, rng=None,
                 strength: float = 1.0) -> list[str]:
    """Apply every step of a recipe to the buffer in place.

    Unknown operations are skipped with a warning. Steps without a
    parameter draw one (scaled by strength).

    Returns:
        The tokens actually emitted, including any drawn parameters. Feed
        them to Recipe.from_tokens() to get a replayable recipe.
    """
    steps = list(recipe)
    validate_recipe_length(steps)
    rng = resolve_rng(rng)

    emitted = []
    for step in steps:
        token = apply_step(buffer, step, rng=rng, strength=strength)
        if token is not None:
            emitted.append(token)
    return emitted


def cook_random(buffer: PixelBuffer, iterations: int = DEFAULT_ITERATIONS,
                strength: float = 1.0, rng=None) -> Recipe:
    """Cook the buffer with a fresh random recipe.

    Returns:
        The effective recipe (every parameter filled in), for display or replay.
    """
    iterations = validate_iterations(iterations)
    strength = validate_strength(strength)
    rng = resolve_rng(rng)
    recipe = generate_random(iterations, rng, strength)
    return Recipe.from_tokens(apply_recipe(buffer, recipe, rng=rng, strength=strength))
