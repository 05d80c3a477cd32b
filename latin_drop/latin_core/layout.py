"""
Board Layout
============

Places the grid and the token pool on the board and derives slot snap points.

All coordinates are world pixels with y growing downward. The same space is
used by drop events, slot centers and the physics adapter.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from latin_drop.latin_core.config_loader import GameConfig, get_config
from latin_drop.latin_core.puzzle_masker import Slot

Point = Tuple[float, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class BoardLayout:
    """
    Pixel geometry for one level.

    Attributes:
        width, height: Board size.
        grid_size: Number of cells per side.
        grid_x, grid_y: Top-left corner of the grid.
        grid_pixels: Side length of the grid square.
        cell_gap: Gap between adjacent cells.
        cell_size: Side length of a single cell.
        pool_x, pool_y, pool_width, pool_height: Token pool rectangle.
        token_radius: Radius of every token body.
        snap_threshold: Maximum drop distance from a slot center.
    """
    width: int
    height: int
    grid_size: int
    grid_x: int
    grid_y: int
    grid_pixels: int
    cell_gap: int
    cell_size: float
    pool_x: int
    pool_y: int
    pool_width: int
    pool_height: int
    token_radius: int
    snap_threshold: float
    column_width: float
    pitch: float
    rest_band: float
    eviction_offset: float

    def cell_center(self, row: int, col: int) -> Point:
        """Center of a grid cell, rounded to whole pixels."""
        step = self.cell_size + self.cell_gap
        x = round_half_up(self.grid_x + col * step + self.cell_size / 2)
        y = round_half_up(self.grid_y + row * step + self.cell_size / 2)
        return (float(x), float(y))

    def slot_centers(self, slots: Iterable[Slot]) -> Dict[int, Point]:
        """Snap point for each slot, keyed by slot index."""
        return {slot.index: self.cell_center(slot.row, slot.col) for slot in slots}

    @property
    def pool_columns(self) -> int:
        return max(3, int(self.pool_width // (self.token_radius * self.column_width)))

    def initial_pool_positions(self, count: int) -> List[Point]:
        """
        Starting positions for ``count`` tokens, filled row by row.

        Positions that would overflow the pool are clamped to its inner
        edge; the physics simulation separates any overlap.
        """
        r = self.token_radius
        columns = self.pool_columns
        max_x = self.pool_x + self.pool_width - r
        max_y = self.pool_y + self.pool_height - r
        positions: List[Point] = []
        for i in range(count):
            col = i % columns
            row = i // columns
            x = self.pool_x + r + col * r * self.pitch
            y = self.pool_y + r + row * r * self.pitch
            positions.append((float(min(max_x, x)), float(min(max_y, y))))
        return positions

    def resting_position(self, rng: random.Random) -> Point:
        """Random spot in the top band of the pool for a returned token."""
        x = self.pool_x + rng.random() * self.pool_width
        y = self.pool_y + rng.random() * self.pool_height * self.rest_band
        return (x, y)

    def eviction_position(self) -> Point:
        """Fixed re-entry point for a token displaced from its slot."""
        return (self.pool_x + self.pool_width / 2, self.pool_y + self.eviction_offset)

    def contains_pool(self, point: Point) -> bool:
        x, y = point
        return (self.pool_x <= x <= self.pool_x + self.pool_width
                and self.pool_y <= y <= self.pool_y + self.pool_height)


def compute_layout(grid_size: int, config: Optional[GameConfig] = None) -> BoardLayout:
    """
    Compute the board layout for a grid size.

    Larger grids get a taller grid area and a narrower gutter; the pool takes
    the remaining height below the grid, never less than
    ``layout.min_pool_height``.

    Args:
        grid_size: Number of cells per side.
        config: Game configuration. Uses default if None.

    Returns:
        BoardLayout for the level.
    """
    if config is None:
        config = get_config()

    lc = config.layout
    levels = config.levels
    width = config.board.width
    height = config.board.height

    span = levels.max_grid_size - levels.min_grid_size
    density = (grid_size - levels.min_grid_size) / span if span > 0 else 0.0
    density = min(1.0, max(0.0, density))

    grid_y = max(lc.min_top_margin, round_half_up(height * lc.top_margin_ratio))
    gutter = max(
        lc.min_gutter,
        round_half_up(height * (lc.gutter_ratio - density * lc.gutter_density_ratio))
    )
    max_grid_height = height - grid_y - gutter - lc.min_pool_height
    grid_height_scale = lc.grid_height_scale + density * lc.grid_height_density_scale
    grid_pixels = max(
        lc.min_grid_pixels,
        min(
            round_half_up(width * lc.grid_width_scale),
            round_half_up(height * grid_height_scale),
            round_half_up(max_grid_height),
        )
    )
    grid_x = round_half_up((width - grid_pixels) / 2)
    pool_y = grid_y + grid_pixels + gutter
    pool_height = max(lc.min_pool_height, height - pool_y - gutter)

    cell_gap = max(lc.min_cell_gap, int(math.floor(grid_pixels * lc.cell_gap_ratio)))
    cell_size = (grid_pixels - cell_gap * (grid_size - 1)) / grid_size
    token_radius = max(
        config.tokens.min_radius,
        int(math.floor(cell_size * config.tokens.radius_ratio))
    )

    return BoardLayout(
        width=width,
        height=height,
        grid_size=grid_size,
        grid_x=grid_x,
        grid_y=grid_y,
        grid_pixels=grid_pixels,
        cell_gap=cell_gap,
        cell_size=cell_size,
        pool_x=0,
        pool_y=pool_y,
        pool_width=width,
        pool_height=pool_height,
        token_radius=token_radius,
        snap_threshold=cell_size * config.binding.snap_ratio,
        column_width=config.tokens.column_width,
        pitch=config.tokens.pitch,
        rest_band=config.binding.rest_band,
        eviction_offset=config.binding.eviction_offset
    )
