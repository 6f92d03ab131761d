"""
Cookery — Live Frame Pipeline
Cooks a stream of frames through a rotating recipe, one frame per tick.

State machine:
    IDLE -> ACTIVE -> (PAUSED <-> ACTIVE) -> IDLE

The caller owns scheduling: call tick() as often as the display refreshes.
A slow tick just delays the next one; nothing is queued or dropped.
"""

import logging
from enum import Enum

import numpy as np
import cv2

from core.buffer import PixelBuffer
from core.context import retarget
from core.executor import apply_recipe
from core.recipe import Recipe, parse, serialize, generate_light
from effects.color import contrast
from effects.random_source import resolve_rng

FALLBACK_CONTRAST = 50                 # Applied to a frame whose recipe blew up
LETTERBOX_BACKGROUND = (17, 17, 17, 255)
DEFAULT_VIEWPORT = (960, 540)


class LiveState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"


class FrameSourceError(RuntimeError):
    """Raised when the live frame source can't be opened."""
    pass


def letterbox(buffer: PixelBuffer, width: int, height: int,
              background=LETTERBOX_BACKGROUND) -> PixelBuffer:
    """Scale buffer to fit width x height keeping aspect, centered on a background.

    Returns:
        New buffer of exactly width x height.
    """
    width, height = int(width), int(height)
    out = PixelBuffer.filled(width, height, background)

    scale = min(width / buffer.width, height / buffer.height)
    fit_w = max(1, min(width, int(round(buffer.width * scale))))
    fit_h = max(1, min(height, int(round(buffer.height * scale))))

    if (fit_w, fit_h) == buffer.size:
        scaled = buffer.pixels
    else:
        scaled = cv2.resize(buffer.pixels, (fit_w, fit_h), interpolation=cv2.INTER_LINEAR)

    x0 = (width - fit_w) // 2
    y0 = (height - fit_h) // 2
    out.pixels[y0:y0 + fit_h, x0:x0 + fit_w] = scaled
    return out


def cook_frame(frame: np.ndarray, recipe: Recipe, rng=None) -> tuple:
    """Cook one frame in a scratch buffer of its own size.

    The caller's array is never touched. If the recipe fails, the raw frame
    gets a fixed contrast bump instead; this never raises for a bad recipe.

    Returns:
        (scratch buffer, fell_back)

    Raises:
        ValueError: The frame is not a usable gray, RGB or RGBA image.
    """
    source = PixelBuffer.from_array(frame)
    scratch = source.copy()
    try:
        with retarget(scratch):
            apply_recipe(scratch, recipe, rng=rng)
        return scratch, False
    except Exception:
        logging.exception("Live frame cook failed, applying fallback contrast")
        scratch = source.copy()
        contrast(scratch, FALLBACK_CONTRAST)
        return scratch, True


def process_frame(frame: np.ndarray, recipe: Recipe, viewport: tuple = DEFAULT_VIEWPORT,
                  background=LETTERBOX_BACKGROUND, rng=None) -> PixelBuffer:
    """Cook one frame and letterbox it into the viewport.

    Args:
        frame: (H, W, 3) or (H, W, 4) uint8 array.
        recipe: Recipe to run.
        viewport: (width, height) of the destination.

    Returns:
        Viewport-sized buffer.
    """
    scratch, _ = cook_frame(frame, recipe, rng=rng)
    return letterbox(scratch, viewport[0], viewport[1], background)


class FramePipeline:
    """Live cook loop state: frame source, recipe register, pause/stop.

    Args:
        source_factory: Zero-arg callable returning an object with
            read() -> ndarray | None and release(). Called on start().
            Raising (or returning None) means the source is unavailable.
        viewport: (width, height) of the destination surface.
        recipe_text: Initial recipe text. Blank = generate a light recipe on start.
        background: RGBA fill for letterbox bars.
        rng: Random source for generated recipes and drawn parameters.
    """

    def __init__(self, source_factory, viewport: tuple = DEFAULT_VIEWPORT,
                 recipe_text: str = "", background=LETTERBOX_BACKGROUND, rng=None):
        self.source_factory = source_factory
        self.viewport = (int(viewport[0]), int(viewport[1]))
        self.background = background
        self.rng = resolve_rng(rng)
        self.recipe_text = recipe_text or ""
        self.state = LiveState.IDLE
        self.frame_index = 0
        self.fallback_count = 0
        self.dropped_count = 0
        self._source = None

    @property
    def is_running(self) -> bool:
        return self.state is not LiveState.IDLE

    def start(self):
        """Open the frame source and go ACTIVE.

        Raises:
            FrameSourceError: Source unavailable. State stays IDLE.
        """
        if self.state is not LiveState.IDLE:
            return
        try:
            source = self.source_factory()
        except FrameSourceError:
            raise
        except Exception as e:
            raise FrameSourceError(f"Frame source unavailable: {e}") from e
        if source is None:
            raise FrameSourceError("Frame source unavailable")

        self._source = source
        if not self.recipe_text.strip():
            self.reroll()
        self.frame_index = 0
        self.state = LiveState.ACTIVE
        logging.info("Live cooking started with recipe:\n%s", self.recipe_text)

    def pause(self):
        if self.state is LiveState.ACTIVE:
            self.state = LiveState.PAUSED

    def resume(self):
        if self.state is LiveState.PAUSED:
            self.state = LiveState.ACTIVE

    def toggle_pause(self):
        if self.state is LiveState.ACTIVE:
            self.pause()
        else:
            self.resume()

    def stop(self):
        """Release the source and go IDLE. Safe to call repeatedly."""
        source, self._source = self._source, None
        self.state = LiveState.IDLE
        if source is not None:
            try:
                source.release()
            except Exception:
                logging.exception("Frame source release failed")

    def set_recipe_text(self, text: str):
        """Replace the recipe register. Takes effect on the next tick."""
        self.recipe_text = text or ""

    def reroll(self) -> str:
        """Fill the register with a fresh light recipe. Returns its text."""
        self.recipe_text = serialize(generate_light(self.rng))
        return self.recipe_text

    def current_recipe(self) -> Recipe:
        return parse(self.recipe_text)

    def tick(self) -> PixelBuffer | None:
        """Cook one frame. Returns the viewport buffer, or None if not ACTIVE.

        A source that returns no frame is treated as lost: the pipeline stops.
        A frame that isn't a usable image is dropped (None) and the loop goes on.
        """
        if self.state is not LiveState.ACTIVE:
            return None

        frame = self._source.read()
        if frame is None:
            logging.warning("Frame source returned no frame, stopping live cook")
            self.stop()
            return None

        # Re-read every tick: recipe edits apply live
        recipe = self.current_recipe()
        try:
            scratch, fell_back = cook_frame(frame, recipe, rng=self.rng)
        except (ValueError, TypeError) as e:
            logging.warning("Dropping unusable frame: %s", e)
            self.dropped_count += 1
            return None
        if fell_back:
            self.fallback_count += 1
        self.frame_index += 1
        return letterbox(scratch, self.viewport[0], self.viewport[1], self.background)
