"""
Cookery — Live Performance Engine

Real-time webcam cooking with a pygame display.

Hotkeys:
  Space      = pause/resume
  R          = new random recipe
  S          = save current frame
  Esc        = stop (also: closing the window)

The recipe can be edited live: point --recipe-file at a text file and
every save is picked up on the next frame.
"""

import logging
import time
from pathlib import Path

import numpy as np
import cv2

try:
    import pygame
except ImportError:
    pygame = None

from core.image_io import export_image
from core.live import FramePipeline, FrameSourceError, LiveState, DEFAULT_VIEWPORT


class CameraSource:
    """OpenCV webcam capture returning RGBA frames.

    Raises:
        FrameSourceError: If the device can't be opened.
    """

    def __init__(self, device: int = 0, width: int | None = None, height: int | None = None):
        self.device = device
        self._cap = cv2.VideoCapture(device)
        if not self._cap.isOpened():
            self._cap.release()
            raise FrameSourceError(f"Cannot open camera {device} (missing or permission denied)")
        if width:
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        if height:
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

    def read(self) -> np.ndarray | None:
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)

    def release(self):
        self._cap.release()


class RecipeFileWatcher:
    """Re-reads a recipe text file whenever its mtime changes."""

    def __init__(self, path):
        self.path = Path(path)
        self._mtime = None

    def poll(self) -> str | None:
        """New file contents if the file changed since the last poll, else None."""
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return None
        if mtime == self._mtime:
            return None
        self._mtime = mtime
        try:
            return self.path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logging.warning("Could not read recipe file %s: %s", self.path, e)
            return None

    def write(self, text: str):
        """Write the register back so the user's editor shows the live recipe."""
        self.path.write_text(text, encoding="utf-8")
        self._mtime = self.path.stat().st_mtime


class LivePerformer:
    """pygame display loop around a FramePipeline.

    Loop order:
      1. Handle events (stop/pause/reroll) — FIRST, before any rendering
      2. Pick up recipe file edits
      3. Tick the pipeline (capture + cook + letterbox)
      4. Blit + flip
    """

    def __init__(self, pipeline: FramePipeline, fps: int = 30,
                 recipe_watcher: RecipeFileWatcher | None = None,
                 snapshot_dir: str = "."):
        if pygame is None:
            raise RuntimeError("pygame required for live mode. Install: pip install pygame")
        self.pipeline = pipeline
        self.fps = fps
        self.recipe_watcher = recipe_watcher
        self.snapshot_dir = Path(snapshot_dir)
        self._screen = None
        self._clock = None
        self._last_frame = None

    def init_display(self):
        """Initialize pygame window at the pipeline viewport size."""
        pygame.init()
        self._screen = pygame.display.set_mode(self.pipeline.viewport)
        pygame.display.set_caption("Cookery Live")
        self._clock = pygame.time.Clock()

    def _sync_recipe_file(self):
        if self.recipe_watcher is None:
            return
        text = self.recipe_watcher.poll()
        if text is not None and text.strip():
            self.pipeline.set_recipe_text(text)
            logging.info("Recipe reloaded from %s", self.recipe_watcher.path)

    def _reroll(self):
        text = self.pipeline.reroll()
        if self.recipe_watcher is not None:
            self.recipe_watcher.write(text)
        print("  [NEW RECIPE]")
        for line in text.splitlines():
            print(f"    {line}")

    def _snapshot(self):
        if self._last_frame is None:
            return
        path = self.snapshot_dir / f"cooked_{time.strftime('%Y%m%d_%H%M%S')}.png"
        export_image(self._last_frame, path)
        print(f"  Saved: {path}")

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.pipeline.stop()

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.pipeline.stop()
                elif event.key == pygame.K_SPACE:
                    self.pipeline.toggle_pause()
                    state = "PAUSED" if self.pipeline.state is LiveState.PAUSED else "COOKING"
                    print(f"  [{state}]")
                elif event.key == pygame.K_r:
                    self._reroll()
                elif event.key == pygame.K_s:
                    self._snapshot()

    def _render(self, buffer):
        rgb = np.ascontiguousarray(buffer.rgb)
        surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
        self._screen.blit(surface, (0, 0))
        pygame.display.flip()

    def run(self):
        """Main loop. Returns when the pipeline goes IDLE.

        Raises:
            FrameSourceError: Camera unavailable.
            pygame.error: Window could not be opened.
            Either way the camera is released and the pipeline is IDLE.
        """
        try:
            self._sync_recipe_file()
            self.pipeline.start()
            self.init_display()

            print("\n  Cookery Live")
            print("  " + "─" * 40)
            print("  Space=Pause  R=New recipe  S=Snapshot  Esc=Exit")
            if self.recipe_watcher is not None:
                if not self.recipe_watcher.path.exists():
                    self.recipe_watcher.write(self.pipeline.recipe_text)
                print(f"  Editing: {self.recipe_watcher.path}")
            print()

            while self.pipeline.is_running:
                self._handle_events()
                if not self.pipeline.is_running:
                    break
                self._sync_recipe_file()

                frame = self.pipeline.tick()
                if frame is not None:
                    self._last_frame = frame
                    self._render(frame)

                self._clock.tick(self.fps)

        except KeyboardInterrupt:
            print("\n  [INTERRUPTED]")
        finally:
            self._cleanup()

    def _cleanup(self):
        self.pipeline.stop()
        if pygame and pygame.get_init():
            pygame.quit()


def open_camera_pipeline(device: int = 0, viewport: tuple = DEFAULT_VIEWPORT,
                         recipe_text: str = "", rng=None) -> FramePipeline:
    """FramePipeline wired to a webcam. The camera opens on start()."""
    return FramePipeline(
        lambda: CameraSource(device),
        viewport=viewport,
        recipe_text=recipe_text,
        rng=rng,
    )
