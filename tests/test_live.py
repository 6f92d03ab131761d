"""
Cookery — Live Frame Pipeline Tests
State machine, per-tick recipe re-read, fallback on failure, letterboxing.
Uses an in-memory frame source; no camera or display needed.

Run with: pytest tests/test_live.py -v
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.buffer import PixelBuffer
from core.live import (
    FramePipeline, FrameSourceError, LiveState,
    letterbox, process_frame, cook_frame,
    FALLBACK_CONTRAST, LETTERBOX_BACKGROUND,
)
from core.recipe import parse, LIGHT_RECIPE_RANGE
from core.safety import MAX_RECIPE_STEPS
from effects.color import contrast

from conftest import _make_test_frame


class FakeSource:
    """Yields copies of one frame `count` times, then None."""

    def __init__(self, frame, count=100):
        self.frame = frame
        self.remaining = count
        self.reads = 0
        self.released = False

    def read(self):
        if self.remaining <= 0:
            return None
        self.remaining -= 1
        self.reads += 1
        return self.frame.copy()

    def release(self):
        self.released = True


def _gray_frame(value=100, width=40, height=30):
    return np.full((height, width, 3), value, dtype=np.uint8)


def _pipeline(frame=None, recipe_text="-contrast 0\n", viewport=(40, 30), count=100):
    source = FakeSource(_gray_frame() if frame is None else frame, count=count)
    pipe = FramePipeline(lambda: source, viewport=viewport, recipe_text=recipe_text,
                         rng=np.random.RandomState(0))
    return pipe, source


# ---------------------------------------------------------------------------
# STATE MACHINE
# ---------------------------------------------------------------------------

class TestStateMachine:

    def test_starts_idle(self):
        pipe, source = _pipeline()
        assert pipe.state is LiveState.IDLE
        assert pipe.tick() is None
        assert source.reads == 0

    def test_start_goes_active(self):
        pipe, _ = _pipeline()
        pipe.start()
        assert pipe.state is LiveState.ACTIVE
        assert pipe.is_running

    def test_pause_resume(self):
        pipe, source = _pipeline()
        pipe.start()
        pipe.pause()
        assert pipe.state is LiveState.PAUSED
        assert pipe.tick() is None
        assert source.reads == 0
        pipe.resume()
        assert pipe.state is LiveState.ACTIVE
        assert pipe.tick() is not None

    def test_toggle_pause(self):
        pipe, _ = _pipeline()
        pipe.start()
        pipe.toggle_pause()
        assert pipe.state is LiveState.PAUSED
        pipe.toggle_pause()
        assert pipe.state is LiveState.ACTIVE

    def test_pause_when_idle_is_noop(self):
        pipe, _ = _pipeline()
        pipe.pause()
        pipe.resume()
        assert pipe.state is LiveState.IDLE

    def test_stop_releases_source(self):
        pipe, source = _pipeline()
        pipe.start()
        pipe.stop()
        assert pipe.state is LiveState.IDLE
        assert source.released
        assert pipe.tick() is None

    def test_stop_is_idempotent(self):
        pipe, _ = _pipeline()
        pipe.start()
        pipe.stop()
        pipe.stop()
        assert pipe.state is LiveState.IDLE

    def test_stop_from_paused(self):
        pipe, source = _pipeline()
        pipe.start()
        pipe.pause()
        pipe.stop()
        assert pipe.state is LiveState.IDLE
        assert source.released

    def test_source_failure_keeps_idle(self):
        def denied():
            raise PermissionError("camera denied")

        pipe = FramePipeline(denied)
        with pytest.raises(FrameSourceError, match="camera denied"):
            pipe.start()
        assert pipe.state is LiveState.IDLE

    def test_source_none_keeps_idle(self):
        pipe = FramePipeline(lambda: None)
        with pytest.raises(FrameSourceError):
            pipe.start()
        assert pipe.state is LiveState.IDLE

    def test_lost_source_stops(self):
        pipe, source = _pipeline(count=2)
        pipe.start()
        assert pipe.tick() is not None
        assert pipe.tick() is not None
        assert pipe.tick() is None
        assert pipe.state is LiveState.IDLE
        assert source.released

    def test_restart_after_stop(self):
        pipe, _ = _pipeline()
        pipe.start()
        pipe.tick()
        pipe.stop()
        pipe.start()
        assert pipe.state is LiveState.ACTIVE
        assert pipe.frame_index == 0


# ---------------------------------------------------------------------------
# RECIPE REGISTER
# ---------------------------------------------------------------------------

class TestRecipeRegister:

    def test_blank_recipe_generates_light(self):
        pipe, _ = _pipeline(recipe_text="")
        pipe.start()
        recipe = pipe.current_recipe()
        lo, hi = LIGHT_RECIPE_RANGE
        assert lo <= len(recipe) <= hi
        assert not recipe.unknown_steps()

    def test_existing_recipe_kept(self):
        pipe, _ = _pipeline(recipe_text="-edge\n")
        pipe.start()
        assert pipe.recipe_text == "-edge\n"

    def test_edit_applies_next_tick(self):
        pipe, _ = _pipeline(recipe_text="-contrast 0\n")
        pipe.start()
        first = pipe.tick()
        assert first.get_pixel(20, 15) == (100, 100, 100, 255)

        pipe.set_recipe_text("-contrast 200\n")
        second = pipe.tick()
        # (100 - 128) * 7.8 + 128 < 0
        assert second.get_pixel(20, 15) == (0, 0, 0, 255)

    def test_reroll_replaces_register(self):
        pipe, _ = _pipeline(recipe_text="-edge\n")
        text = pipe.reroll()
        assert pipe.recipe_text == text
        assert text != "-edge\n"

    def test_tick_counts_frames(self):
        pipe, _ = _pipeline()
        pipe.start()
        for _ in range(3):
            pipe.tick()
        assert pipe.frame_index == 3


# ---------------------------------------------------------------------------
# FAILURE FALLBACK
# ---------------------------------------------------------------------------

class TestFallback:

    def test_bad_recipe_never_kills_loop(self):
        pipe, _ = _pipeline(recipe_text="-edge\n" * (MAX_RECIPE_STEPS + 1))
        pipe.start()
        for _ in range(3):
            out = pipe.tick()
            assert out is not None
        assert pipe.state is LiveState.ACTIVE
        assert pipe.fallback_count == 3

    def test_fallback_applies_fixed_contrast(self):
        frame = _gray_frame(100)
        expected = PixelBuffer.from_array(frame)
        contrast(expected, FALLBACK_CONTRAST)

        pipe, _ = _pipeline(frame=frame, recipe_text="-edge\n" * (MAX_RECIPE_STEPS + 1))
        pipe.start()
        out = pipe.tick()
        assert out.get_pixel(20, 15) == expected.get_pixel(20, 15)

    def test_operation_exception_falls_back(self, monkeypatch):
        import core.live

        def explode(*args, **kwargs):
            raise RuntimeError("operation crashed")

        monkeypatch.setattr(core.live, "apply_recipe", explode)
        scratch, fell_back = cook_frame(_gray_frame(100), parse("-edge\n"))
        assert fell_back
        assert scratch.size == (40, 30)

    def test_unusable_frame_dropped_and_loop_continues(self):
        frames = [np.zeros((30, 40, 2), dtype=np.uint8), _gray_frame(100)]

        class MixedSource(FakeSource):
            def read(self):
                return frames.pop(0) if frames else None

        source = MixedSource(_gray_frame())
        pipe = FramePipeline(lambda: source, viewport=(40, 30), recipe_text="-contrast 0\n")
        pipe.start()
        assert pipe.tick() is None
        assert pipe.state is LiveState.ACTIVE
        assert pipe.dropped_count == 1
        out = pipe.tick()
        assert out.get_pixel(0, 0) == (100, 100, 100, 255)
        assert pipe.frame_index == 1

    def test_cook_frame_rejects_unusable_frame(self):
        with pytest.raises(ValueError):
            cook_frame(np.zeros((4, 4, 2), dtype=np.uint8), parse("-edge\n"))
        with pytest.raises(ValueError):
            cook_frame(np.zeros((0, 4, 3), dtype=np.uint8), parse("-edge\n"))

    def test_unknown_tokens_are_not_failures(self):
        pipe, _ = _pipeline(recipe_text="-wobble\n-contrast 0\n")
        pipe.start()
        out = pipe.tick()
        assert pipe.fallback_count == 0
        assert out.get_pixel(0, 0) == (100, 100, 100, 255)


# ---------------------------------------------------------------------------
# PROCESS ONE FRAME
# ---------------------------------------------------------------------------

class TestProcessFrame:

    def test_output_is_viewport_sized(self):
        out = process_frame(_make_test_frame(64, 48), parse("-edge\n"), viewport=(100, 50))
        assert out.size == (100, 50)

    def test_input_frame_untouched(self):
        frame = _make_test_frame(64, 48)
        before = frame.copy()
        process_frame(frame, parse("-contrast 150\n-noise 20\n"), viewport=(64, 48))
        np.testing.assert_array_equal(frame, before)

    def test_scratch_sized_to_frame(self):
        scratch, fell_back = cook_frame(_make_test_frame(33, 21), parse("-resize 50\n"))
        assert not fell_back
        assert scratch.size == (33, 21)


# ---------------------------------------------------------------------------
# LETTERBOX
# ---------------------------------------------------------------------------

class TestLetterbox:

    def test_wide_source_gets_bars_top_and_bottom(self):
        src = PixelBuffer.filled(200, 100, (255, 0, 0, 255))
        out = letterbox(src, 100, 100)
        assert out.size == (100, 100)
        assert out.get_pixel(50, 50) == (255, 0, 0, 255)
        assert out.get_pixel(50, 5) == tuple(LETTERBOX_BACKGROUND)
        assert out.get_pixel(50, 95) == tuple(LETTERBOX_BACKGROUND)
        # content band: rows 25..74
        assert out.get_pixel(0, 25) == (255, 0, 0, 255)
        assert out.get_pixel(0, 74) == (255, 0, 0, 255)

    def test_tall_source_gets_bars_left_and_right(self):
        src = PixelBuffer.filled(50, 100, (0, 255, 0, 255))
        out = letterbox(src, 200, 100)
        assert out.get_pixel(100, 50) == (0, 255, 0, 255)
        assert out.get_pixel(10, 50) == tuple(LETTERBOX_BACKGROUND)
        assert out.get_pixel(190, 50) == tuple(LETTERBOX_BACKGROUND)

    def test_same_aspect_fills(self):
        src = PixelBuffer.filled(40, 30, (1, 2, 3, 255))
        out = letterbox(src, 80, 60)
        assert (out.pixels == np.array([1, 2, 3, 255], dtype=np.uint8)).all()

    def test_same_size_is_copy(self, random_buffer):
        out = letterbox(random_buffer, random_buffer.width, random_buffer.height)
        assert out.same_pixels(random_buffer)
        assert out.pixels is not random_buffer.pixels

    def test_custom_background(self):
        src = PixelBuffer.filled(10, 10, (9, 9, 9, 255))
        out = letterbox(src, 30, 10, background=(200, 100, 50, 255))
        assert out.get_pixel(0, 0) == (200, 100, 50, 255)


# ---------------------------------------------------------------------------
# RECIPE FILE WATCHER
# ---------------------------------------------------------------------------

class TestRecipeFileWatcher:

    def test_missing_file_polls_none(self, tmp_path):
        from core.performer import RecipeFileWatcher
        assert RecipeFileWatcher(tmp_path / "live.txt").poll() is None

    def test_first_poll_reads_then_quiet(self, tmp_path):
        from core.performer import RecipeFileWatcher
        path = tmp_path / "live.txt"
        path.write_text("-edge\n")
        watcher = RecipeFileWatcher(path)
        assert watcher.poll() == "-edge\n"
        assert watcher.poll() is None

    def test_picks_up_edit(self, tmp_path):
        from core.performer import RecipeFileWatcher
        path = tmp_path / "live.txt"
        path.write_text("-edge\n")
        watcher = RecipeFileWatcher(path)
        watcher.poll()
        path.write_text("-normalize\n")
        os.utime(path, (1, 1))
        assert watcher.poll() == "-normalize\n"

    def test_own_write_not_reported(self, tmp_path):
        from core.performer import RecipeFileWatcher
        watcher = RecipeFileWatcher(tmp_path / "live.txt")
        watcher.write("-contrast 10\n")
        assert watcher.poll() is None
        assert (tmp_path / "live.txt").read_text() == "-contrast 10\n"
