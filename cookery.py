#!/usr/bin/env python3
"""
Cookery — Image Cooking Engine
CLI entry point. Also importable as a library.

Usage:
    python cookery.py cook photo.jpg -o cooked.jpg
    python cookery.py cook photo.jpg -o cooked.jpg --iterations 12 --strength 0.6
    python cookery.py cook photo.jpg -o cooked.jpg --recipe deepfry.txt
    python cookery.py cook photo.jpg -o cooked.jpg --save-recipe last.txt --seed 7
    python cookery.py recipe --count 8
    python cookery.py recipe --light
    python cookery.py list-ops
    python cookery.py info -resize
"""

import sys
import os
import logging
import argparse

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.canvas import Canvas
from core.image_io import MAX_DIM, EXPORT_QUALITY
from core.recipe import (
    load_recipe, save_recipe, serialize,
    generate_random, generate_light, DEFAULT_ITERATIONS,
)
from core.safety import validate_strength, validate_iterations
from effects import OPERATIONS, CATEGORIES, list_operations, seed

__version__ = "0.1.0"


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def cmd_cook(args):
    """Cook an image with a recipe file or a random recipe, then export."""
    strength = validate_strength(args.strength)
    if args.seed is not None:
        seed(args.seed)

    canvas = Canvas.open(args.input, max_dim=args.max_dim or None)
    print(f"Loaded: {args.input} ({canvas.width}x{canvas.height})")

    if args.recipe:
        recipe = load_recipe(args.recipe)
        unknown = recipe.unknown_steps()
        if unknown:
            names = ", ".join(s.operation for s in unknown)
            print(f"Note: skipping unknown operations: {names}", file=sys.stderr)
        effective = canvas.cook(recipe, strength=strength)
    else:
        iterations = validate_iterations(args.iterations)
        effective = canvas.cook_random(iterations, strength)

    out = canvas.export(args.output, quality=args.quality)
    print(f"Cooked with {len(effective)} steps:")
    for step in effective:
        print(f"  {step.to_line()}")
    print(f"Saved: {out}")

    if args.save_recipe:
        path = save_recipe(effective, args.save_recipe)
        print(f"Recipe: {path}")


def cmd_recipe(args):
    """Print a random recipe (pipe it to a file to edit and replay)."""
    strength = validate_strength(args.strength)
    if args.seed is not None:
        seed(args.seed)
    if args.light:
        recipe = generate_light(strength=strength)
    else:
        recipe = generate_random(validate_iterations(args.count), strength=strength)
    sys.stdout.write(serialize(recipe))


def cmd_list_ops(args):
    """List all operations by category."""
    ops = list_operations(category=args.category)
    current_cat = None
    for op in sorted(ops, key=lambda o: (o["category"], list(OPERATIONS).index(o["token"]))):
        if op["category"] != current_cat:
            current_cat = op["category"]
            print(f"\n  {current_cat.upper()} — {CATEGORIES[current_cat]}")
        rng = op["param_range"]
        rng_str = f"[{rng[0]}-{rng[1]}]" if rng else "(no parameter)"
        print(f"    {op['token']:12s} {rng_str:15s} {op['description']}")
    print()


def cmd_info(args):
    """Show detailed info about a single operation."""
    token = args.token
    if not token.startswith("-"):
        token = "-" + token
    if token not in OPERATIONS:
        matches = [t for t in OPERATIONS if args.token.lstrip("-") in t]
        if matches:
            raise ValueError(f"Unknown operation: {args.token}. Did you mean: {', '.join(matches)}?")
        raise ValueError(f"Unknown operation: {args.token}. Use 'cookery list-ops' to see all.")

    entry = OPERATIONS[token]
    print(f"\n  {token}")
    print(f"  {'—' * 40}")
    print(f"  Category:    {entry['category'].upper()}")
    print(f"  Description: {entry['description']}")
    if entry["param_range"]:
        lo, hi = entry["param_range"]
        print(f"  Random range: {lo}-{hi}")
        print(f"\n  Recipe lines:")
        print(f"    {token}          (random parameter)")
        print(f"    {token} {hi}")
    else:
        print(f"\n  Recipe line:")
        print(f"    {token}")
    print()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="cookery",
        description="Cookery — randomized image cooking (deep-fry, re-encode, pixelate)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show diagnostics")
    sub = parser.add_subparsers(dest="command")

    # cook
    p = sub.add_parser("cook", help="Cook an image and export the result")
    p.add_argument("input", help="Path to source image")
    p.add_argument("-o", "--output", required=True, help="Output image (.jpg/.png)")
    p.add_argument("--recipe", help="Recipe text file to replay (default: random)")
    p.add_argument("--iterations", type=int, default=DEFAULT_ITERATIONS,
                   help=f"Random steps when no recipe is given (default: {DEFAULT_ITERATIONS})")
    p.add_argument("--strength", type=float, default=1.0,
                   help="0.0-1.0 scale for randomly drawn parameters (default: 1.0)")
    p.add_argument("--seed", type=int, default=None, help="Seed the random source")
    p.add_argument("--max-dim", type=int, default=MAX_DIM,
                   help=f"Downscale wider images to this width (default: {MAX_DIM}, 0 = off)")
    p.add_argument("--quality", type=int, default=EXPORT_QUALITY,
                   help=f"Export JPEG quality (default: {EXPORT_QUALITY})")
    p.add_argument("--save-recipe", help="Write the effective recipe to this file")

    # recipe
    p = sub.add_parser("recipe", help="Print a random recipe")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--count", type=int, default=DEFAULT_ITERATIONS, help="Number of steps")
    group.add_argument("--light", action="store_true", help="Short 4-7 step live recipe")
    p.add_argument("--strength", type=float, default=1.0, help="0.0-1.0 parameter scale")
    p.add_argument("--seed", type=int, default=None, help="Seed the random source")

    # list-ops
    p = sub.add_parser("list-ops", help="List all operations")
    p.add_argument("--category", choices=list(CATEGORIES.keys()), help="Filter by category")

    # info
    p = sub.add_parser("info", help="Show detailed info about an operation")
    p.add_argument("token", help="Operation token, e.g. -resize")

    return parser


def main(argv=None):
    parser = build_parser()
    # Let "info -resize" through: tokens start with a dash
    argv = list(sys.argv[1:] if argv is None else argv)
    if len(argv) >= 2 and argv[-2] == "info" and argv[-1].startswith("-"):
        argv[-1] = argv[-1].lstrip("-")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    commands = {
        "cook": cmd_cook,
        "recipe": cmd_recipe,
        "list-ops": cmd_list_ops,
        "info": cmd_info,
    }

    if args.command in commands:
        try:
            commands[args.command](args)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
