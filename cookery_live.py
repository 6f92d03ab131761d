#!/usr/bin/env python3
"""
Cookery — Live Mode CLI

Streams a webcam through a rotating recipe and shows the cooked frames.

Usage:
    # Random light recipe, default camera
    python cookery_live.py

    # Edit the recipe while it runs (saved edits apply on the next frame)
    python cookery_live.py --recipe-file live.txt

    # Second camera, bigger window, fixed seed
    python cookery_live.py --camera 1 --width 1280 --height 720 --seed 3
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.live import FrameSourceError, DEFAULT_VIEWPORT
from core.safety import SafetyError


def cmd_live(args):
    """Run live cooking until Esc or the window closes."""
    from core.performer import LivePerformer, RecipeFileWatcher, open_camera_pipeline
    from effects import seed

    if args.seed is not None:
        seed(args.seed)

    pipeline = open_camera_pipeline(
        device=args.camera,
        viewport=(args.width, args.height),
    )
    watcher = RecipeFileWatcher(args.recipe_file) if args.recipe_file else None
    performer = LivePerformer(
        pipeline,
        fps=args.fps,
        recipe_watcher=watcher,
        snapshot_dir=args.snapshot_dir,
    )
    performer.run()
    print(f"  Cooked {pipeline.frame_index} frames "
          f"({pipeline.fallback_count} fell back to plain contrast).")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Cookery Live Mode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--camera", type=int, default=0,
                        help="Camera device index (default: 0)")
    parser.add_argument("--recipe-file", type=str, default=None,
                        help="Recipe text file, re-read whenever it changes")
    parser.add_argument("--width", type=int, default=DEFAULT_VIEWPORT[0],
                        help=f"Window width (default: {DEFAULT_VIEWPORT[0]})")
    parser.add_argument("--height", type=int, default=DEFAULT_VIEWPORT[1],
                        help=f"Window height (default: {DEFAULT_VIEWPORT[1]})")
    parser.add_argument("--fps", type=int, default=30,
                        help="Target framerate (default: 30)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed the random source")
    parser.add_argument("--snapshot-dir", type=str, default=".",
                        help="Where S saves snapshots (default: .)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show diagnostics")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.width < 1 or args.height < 1:
        print("Error: --width and --height must be positive", file=sys.stderr)
        sys.exit(1)

    try:
        cmd_live(args)
    except (FrameSourceError, SafetyError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
