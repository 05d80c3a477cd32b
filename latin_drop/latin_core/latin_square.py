"""
Latin Square Generator
======================

Builds fully solved N x N Latin squares from a seed.

The canonical cyclic square ``L[r][c] = ((r + c) mod N) + 1`` is permuted by
rows, by columns and by symbol relabeling. All three operations preserve the
Latin property, so the result never needs checking or backtracking.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from latin_drop.latin_core.config_loader import GameConfig, get_config
from latin_drop.latin_core.rng import SeededRandom

GRID_DTYPE = np.int16


def canonical_square(size: int) -> np.ndarray:
    """
    Cyclic Latin square of the given size.

    Args:
        size: Grid size N (>= 1).

    Returns:
        (N, N) array with rows ``[1..N]`` rotated left by the row index.
    """
    if size < 1:
        raise ValueError(f"Grid size must be positive, got {size}")
    index = np.arange(size)
    return ((index[:, None] + index[None, :]) % size + 1).astype(GRID_DTYPE)


def solved_grid_seed(seed: int, level_index: int, config: Optional[GameConfig] = None) -> int:
    """Seed used for the solved-grid stream of a level."""
    if config is None:
        config = get_config()
    return seed + level_index * config.levels.solved_seed_multiplier


def generate_solved_grid(
    size: int,
    seed: int,
    level_index: int,
    config: Optional[GameConfig] = None
) -> np.ndarray:
    """
    Generate a solved Latin square.

    One stream seeded with ``seed + level_index * 131`` drives three
    Fisher-Yates passes, consumed in order: row order, column order, then
    the symbol permutation.

    Args:
        size: Grid size N.
        seed: Session seed.
        level_index: 1-based level index.
        config: Game configuration. Uses default if None.

    Returns:
        Read-only (N, N) int16 array where every row and column is a
        permutation of ``1..N``.
    """
    rand = SeededRandom(solved_grid_seed(seed, level_index, config))
    base = canonical_square(size)

    row_order = rand.shuffled(range(size))
    col_order = rand.shuffled(range(size))
    symbols = rand.shuffled(range(1, size + 1))

    # lookup[k] is the output symbol for canonical symbol k (index 0 unused)
    lookup = np.array([0] + symbols, dtype=GRID_DTYPE)
    grid = lookup[base[np.ix_(row_order, col_order)]]
    grid.flags.writeable = False
    return grid
