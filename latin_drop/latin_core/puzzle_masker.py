"""
Puzzle Masker
=============

Blanks a level-appropriate fraction of a solved grid to produce the puzzle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from latin_drop.latin_core.config_loader import GameConfig, get_config
from latin_drop.latin_core.rng import SeededRandom
from latin_drop.latin_core.logger import get_logger

LOGGER = get_logger(__name__)

EMPTY = 0


@dataclass(frozen=True)
class Slot:
    """An empty cell awaiting a token."""
    row: int
    col: int
    index: int                   # Linear index row * N + col, used as slot id
    value: int                   # Expected value from the solved grid

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)


@dataclass(frozen=True)
class MaskResult:
    """Output of the masking pass."""
    puzzle_grid: np.ndarray
    slots: Tuple[Slot, ...]
    ratio: float
    missing_count: int


def mask_seed(seed: int, level_index: int, config: Optional[GameConfig] = None) -> int:
    """Seed used for the masking stream of a level."""
    if config is None:
        config = get_config()
    return seed + level_index * config.levels.mask_seed_multiplier


def missing_count_for(size: int, ratio: float) -> int:
    """
    Number of cells to blank for a ratio.

    Always at least one and at most every cell, so a degenerate ratio can
    never produce a puzzle without slots.
    """
    cells = size * size
    return max(1, min(cells, math.floor(cells * ratio)))


def mask_grid(
    solved_grid: np.ndarray,
    ratio_range: Tuple[float, float],
    rand: SeededRandom
) -> MaskResult:
    """
    Blank cells of a solved grid.

    The first draw of ``rand`` samples the ratio inside ``ratio_range``;
    the remaining draws Fisher-Yates shuffle the linear cell positions, and
    the first ``missing_count`` of them become slots.

    Args:
        solved_grid: (N, N) solved Latin square.
        ratio_range: (min_ratio, max_ratio) fraction of cells to blank.
        rand: Stream dedicated to masking.

    Returns:
        MaskResult with a read-only puzzle grid and row-major slots.
    """
    size = solved_grid.shape[0]
    min_ratio, max_ratio = ratio_range
    ratio = min_ratio + rand.next_float() * (max_ratio - min_ratio)
    missing = missing_count_for(size, ratio)

    positions = rand.shuffled(range(size * size))
    blanked = positions[:missing]

    puzzle = np.array(solved_grid, copy=True)
    rows, cols = np.divmod(np.asarray(blanked, dtype=np.int64), size)
    puzzle[rows, cols] = EMPTY
    puzzle.flags.writeable = False

    slots: List[Slot] = []
    for r, c in zip(*np.nonzero(puzzle == EMPTY)):
        r, c = int(r), int(c)
        slots.append(Slot(row=r, col=c, index=r * size + c, value=int(solved_grid[r, c])))

    LOGGER.debug(
        "Masked %d/%d cells (ratio %.3f in [%.2f, %.2f])",
        missing, size * size, ratio, min_ratio, max_ratio
    )
    return MaskResult(
        puzzle_grid=puzzle,
        slots=tuple(slots),
        ratio=ratio,
        missing_count=missing
    )
