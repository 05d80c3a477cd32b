"""
Level Preview
=============

Prints the puzzle generated for a level and seed, optionally solving it
through a LevelSession.

Usage:
    python -m tools.preview_level --level 3 --seed 12345 [--autoplay] [--physics]
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from latin_drop.latin_core.config_loader import load_config
from latin_drop.latin_core.level import LevelPuzzle, generate_level
from latin_drop.latin_core.layout import compute_layout
from latin_drop.latin_core.logger import configure_logging
from latin_drop.latin_core.session import LevelSession


def format_grid(grid: np.ndarray) -> str:
    """Render a grid as text, empty cells shown as dots."""
    width = len(str(grid.shape[0]))
    lines = []
    for row in grid:
        cells = [str(int(v)).rjust(width) if v else ".".rjust(width) for v in row]
        lines.append(" ".join(cells))
    return "\n".join(lines)


def print_puzzle(puzzle: LevelPuzzle) -> None:
    params = puzzle.params
    print(f"Level {puzzle.level_index}, seed {puzzle.seed}")
    print(f"  Grid: {params.grid_size}x{params.grid_size}")
    print(f"  Mask ratio: {puzzle.mask_ratio:.3f} "
          f"(band {params.min_ratio:.2f}-{params.max_ratio:.2f})")
    print(f"  Slots: {puzzle.slot_count}")
    print()
    print("Solved grid:")
    print(format_grid(puzzle.solved_grid))
    print()
    print("Puzzle grid:")
    print(format_grid(puzzle.puzzle_grid))
    print()
    print("Slots (index: row, col -> value):")
    for slot in puzzle.slots:
        print(f"  {slot.index:>4}: {slot.row}, {slot.col} -> {slot.value}")


def main():
    parser = argparse.ArgumentParser(description="Preview a generated Latin Drop level")
    parser.add_argument("--level", type=int, default=1, help="Level index (1-based)")
    parser.add_argument("--seed", type=int, default=42, help="Session seed")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--autoplay", action="store_true", help="Drop every token on its slot")
    parser.add_argument("--physics", action="store_true", help="Simulate the token pool while playing")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    config = load_config(args.config)

    puzzle = generate_level(args.level, args.seed, config)
    print_puzzle(puzzle)

    layout = compute_layout(puzzle.grid_size, config)
    print()
    print("Layout:")
    print(f"  Grid at ({layout.grid_x}, {layout.grid_y}), {layout.grid_pixels}px, "
          f"cell {layout.cell_size:.1f}px, gap {layout.cell_gap}px")
    print(f"  Pool at y={layout.pool_y}, height {layout.pool_height}px")
    print(f"  Token radius {layout.token_radius}px, snap threshold {layout.snap_threshold:.1f}px")

    if args.autoplay:
        level = LevelSession(args.level, args.seed, config, simulate=args.physics)
        for token, slot in zip(level.puzzle.tokens, level.puzzle.slots):
            level.drop(token.id, level.resolver.slot_center(slot.index))
            level.step()
        validation = level.resolver.last_validation
        print()
        print(f"Autoplay: {level.outcome.value}")
        if validation is not None and not validation.valid:
            print(f"  {validation.line}: {validation.reason}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
