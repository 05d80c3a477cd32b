"""
Level Parameter Policy
======================

Maps a level index to grid size and the fraction of cells to blank.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from latin_drop.latin_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class LevelParameters:
    """Derived generation parameters for one level."""
    level_index: int             # Clamped, 1-based
    grid_size: int
    min_ratio: float
    max_ratio: float

    @property
    def ratio_range(self) -> Tuple[float, float]:
        return (self.min_ratio, self.max_ratio)

    @property
    def cell_count(self) -> int:
        return self.grid_size * self.grid_size


def clamp_level(level_index: int, config: Optional[GameConfig] = None) -> int:
    """Clamp a level index to the playable range [1, levels.count]."""
    if config is None:
        config = get_config()
    return max(1, min(config.levels.count, int(level_index)))


def grid_size_for_level(level_index: int, config: Optional[GameConfig] = None) -> int:
    """
    Grid size for a level: one row and column more per level.

    ``clamp(MIN + level - 1, MIN, MAX)``, so levels below 1 still get the
    minimum size.
    """
    if config is None:
        config = get_config()
    levels = config.levels
    size = levels.min_grid_size + int(level_index) - 1
    return max(levels.min_grid_size, min(levels.max_grid_size, size))


def level_parameters(level_index: int, config: Optional[GameConfig] = None) -> LevelParameters:
    """
    Compute generation parameters for a level.

    Out-of-range indices are clamped rather than rejected: the lower bound is
    level 1 and sizes saturate at ``max_grid_size``. The masking ratio comes
    from the first difficulty band whose ``max_level`` covers the index.

    Args:
        level_index: 1-based level index.
        config: Game configuration. Uses default if None.

    Returns:
        LevelParameters for the level.
    """
    if config is None:
        config = get_config()

    index = max(1, int(level_index))
    band = config.band_for_level(index)
    return LevelParameters(
        level_index=index,
        grid_size=grid_size_for_level(index, config),
        min_ratio=band.min_ratio,
        max_ratio=band.max_ratio
    )
