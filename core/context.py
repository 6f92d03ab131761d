"""
Cookery — Active Buffer Binding
Lets the same operations and recipes target whichever buffer is "current":
the loaded canvas, or a scratch buffer holding one live frame.

The binding is a ContextVar, so each thread and asyncio task has its own.
A foreground cook and a background live loop never see each other's buffer.
"""

import contextvars
from contextlib import contextmanager

from core.buffer import PixelBuffer
from core.executor import apply_recipe
from core.recipe import Recipe
from effects import apply_operation

_active_buffer = contextvars.ContextVar("cookery_active_buffer", default=None)


class NoActiveBufferError(RuntimeError):
    """Raised when an operation needs the active buffer and none is bound."""
    pass


def active_buffer() -> PixelBuffer:
    buf = _active_buffer.get()
    if buf is None:
        raise NoActiveBufferError("No active buffer bound. Use retarget(buffer) first.")
    return buf


def has_active_buffer() -> bool:
    return _active_buffer.get() is not None


@contextmanager
def retarget(buffer: PixelBuffer):
    """Bind `buffer` as the active buffer for the duration of the block.

    The previous binding is restored on every exit path, including
    exceptions. Nested retargets unwind in order.
    """
    if not isinstance(buffer, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(buffer).__name__}")
    token = _active_buffer.set(buffer)
    try:
        yield buffer
    finally:
        _active_buffer.reset(token)


def run_operation(op_token: str, parameter: int | None = None, rng=None,
                  strength: float = 1.0) -> str:
    """Apply one operation to the active buffer."""
    return apply_operation(active_buffer(), op_token, parameter, rng=rng, strength=strength)


def cook(recipe: Recipe, buffer: PixelBuffer | None = None, rng=None,
         strength: float = 1.0) -> list[str]:
    """Run a recipe against `buffer`, or the active buffer if none is given.

    An explicit buffer is bound as active for the duration of the call, so
    anything consulting active_buffer() during the cook sees it.
    """
    target = buffer if buffer is not None else active_buffer()
    with retarget(target):
        return apply_recipe(target, recipe, rng=rng, strength=strength)
