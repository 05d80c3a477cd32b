"""
Level Generation
================

Combines the level policy, the Latin square generator and the masker into a
single ``LevelPuzzle``, produced once per level attempt.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from latin_drop.latin_core.config_loader import GameConfig, get_config
from latin_drop.latin_core.latin_square import generate_solved_grid
from latin_drop.latin_core.level_policy import LevelParameters, level_parameters
from latin_drop.latin_core.logger import get_logger
from latin_drop.latin_core.puzzle_masker import Slot, mask_grid, mask_seed
from latin_drop.latin_core.rng import SeededRandom

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Token:
    """A pool piece bearing one fixed value."""
    id: int
    value: int


@dataclass(frozen=True, eq=False)
class LevelPuzzle:
    """
    Everything generated for one level attempt.

    Identical ``(level_index, seed)`` pairs always produce identical puzzles.
    The grids are read-only numpy arrays; the solved grid is the answer key
    and is never shown to the player.
    """
    level_index: int
    seed: int
    params: LevelParameters
    solved_grid: np.ndarray
    puzzle_grid: np.ndarray
    slots: Tuple[Slot, ...]
    tokens: Tuple[Token, ...]
    mask_ratio: float

    @property
    def grid_size(self) -> int:
        return self.params.grid_size

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    def slot_by_index(self) -> Dict[int, Slot]:
        return {slot.index: slot for slot in self.slots}

    def token_by_id(self) -> Dict[int, Token]:
        return {token.id: token for token in self.tokens}

    def token_value_counts(self) -> Counter:
        return Counter(token.value for token in self.tokens)

    def slot_value_counts(self) -> Counter:
        return Counter(slot.value for slot in self.slots)


def generate_level(
    level_index: int,
    seed: int,
    config: Optional[GameConfig] = None
) -> LevelPuzzle:
    """
    Generate the puzzle for a level.

    The solved grid and the mask draw from separate streams
    (``seed + level * 131`` and ``seed + level * 97``) so the masking
    decisions are independent of the grid shape. Tokens are created one per
    slot, in slot order, carrying the slot's expected value: the token set
    always solves the puzzle exactly.

    Args:
        level_index: 1-based level index (clamped below at 1).
        seed: Session seed.
        config: Game configuration. Uses default if None.

    Returns:
        The LevelPuzzle for ``(level_index, seed)``.
    """
    if config is None:
        config = get_config()

    params = level_parameters(level_index, config)
    index = params.level_index

    solved = generate_solved_grid(params.grid_size, seed, index, config)
    masked = mask_grid(
        solved,
        params.ratio_range,
        SeededRandom(mask_seed(seed, index, config))
    )
    tokens = tuple(Token(id=i, value=slot.value) for i, slot in enumerate(masked.slots))

    LOGGER.debug(
        "Generated level %d (seed %d): %dx%d grid, %d slots",
        index, seed, params.grid_size, params.grid_size, len(masked.slots)
    )
    return LevelPuzzle(
        level_index=index,
        seed=seed,
        params=params,
        solved_grid=solved,
        puzzle_grid=masked.puzzle_grid,
        slots=masked.slots,
        tokens=tokens,
        mask_ratio=masked.ratio
    )
