"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml


RETRY_POLICIES = ("fresh", "reuse")


@dataclass(frozen=True)
class DifficultyBand:
    """Masking ratio range applied up to (and including) max_level."""
    max_level: Optional[int]     # None marks the open-ended final band
    min_ratio: float
    max_ratio: float

    @property
    def ratio_range(self) -> Tuple[float, float]:
        return (self.min_ratio, self.max_ratio)

    def covers(self, level_index: int) -> bool:
        return self.max_level is None or level_index <= self.max_level


@dataclass(frozen=True)
class LevelsConfig:
    """Level progression and puzzle generation parameters."""
    count: int                   # Number of levels in a full game
    min_grid_size: int
    max_grid_size: int
    solved_seed_multiplier: int
    mask_seed_multiplier: int
    difficulty_bands: Tuple[DifficultyBand, ...]


@dataclass(frozen=True)
class BoardConfig:
    """World dimensions in pixels (y grows downward)."""
    width: int
    height: int


@dataclass(frozen=True)
class LayoutConfig:
    """Constants used to place the grid and the token pool on the board."""
    top_margin_ratio: float
    min_top_margin: int
    gutter_ratio: float
    gutter_density_ratio: float
    min_gutter: int
    min_pool_height: int
    grid_width_scale: float
    grid_height_scale: float
    grid_height_density_scale: float
    min_grid_pixels: int
    cell_gap_ratio: float
    min_cell_gap: int


@dataclass(frozen=True)
class TokenConfig:
    """Token body geometry and material."""
    radius_ratio: float          # Radius as a fraction of cell size
    min_radius: int
    column_width: float          # Pool column width in radii (sets column count)
    pitch: float                 # Spacing between pool tokens in radii
    friction: float
    elasticity: float
    density: float


@dataclass(frozen=True)
class BindingConfig:
    """Snap and return-to-pool parameters for the slot binding resolver."""
    snap_ratio: float            # Snap threshold as a fraction of cell size
    rest_band: float             # Top fraction of the pool used for resting spots
    eviction_offset: float       # Drop height below pool top for evicted tokens


@dataclass(frozen=True)
class PhysicsConfig:
    """Physics simulation parameters for the token pool."""
    gravity_y: float
    damping: float
    dt: float
    substeps: int
    wall_thickness: float
    pool_wall_min_thickness: float
    calm_gravity_y: float
    calm_duration: float

    @property
    def gravity(self) -> Tuple[float, float]:
        return (0.0, self.gravity_y)


@dataclass(frozen=True)
class SessionConfig:
    """Session flow parameters."""
    retry_policy: str            # "fresh" or "reuse"
    seed_mask: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    levels: LevelsConfig
    board: BoardConfig
    layout: LayoutConfig
    tokens: TokenConfig
    binding: BindingConfig
    physics: PhysicsConfig
    session: SessionConfig

    def band_for_level(self, level_index: int) -> DifficultyBand:
        """Get the difficulty band that covers a (clamped) level index."""
        for band in self.levels.difficulty_bands:
            if band.covers(level_index):
                return band
        return self.levels.difficulty_bands[-1]


def _parse_band(band_data: dict) -> DifficultyBand:
    """Parse a single difficulty band from YAML."""
    max_level = band_data.get("max_level")
    return DifficultyBand(
        max_level=None if max_level is None else int(max_level),
        min_ratio=float(band_data["min_ratio"]),
        max_ratio=float(band_data["max_ratio"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    levels = config.levels
    if levels.count < 1:
        raise ValueError(f"levels.count must be positive, got {levels.count}")
    if levels.min_grid_size < 1:
        raise ValueError(f"levels.min_grid_size must be positive, got {levels.min_grid_size}")
    if levels.min_grid_size > levels.max_grid_size:
        raise ValueError(
            f"levels.min_grid_size ({levels.min_grid_size}) exceeds "
            f"levels.max_grid_size ({levels.max_grid_size})"
        )

    bands = levels.difficulty_bands
    if not bands:
        raise ValueError("levels.difficulty_bands must not be empty")
    if bands[-1].max_level is not None:
        raise ValueError("The last difficulty band must be open-ended (max_level: null)")

    previous = 0
    for i, band in enumerate(bands):
        if band.max_level is None and i != len(bands) - 1:
            raise ValueError("Only the last difficulty band may be open-ended")
        if band.max_level is not None:
            if band.max_level <= previous:
                raise ValueError(
                    f"difficulty band max_level values must be strictly increasing, "
                    f"got {band.max_level} after {previous}"
                )
            previous = band.max_level
        if not (0.0 <= band.min_ratio <= band.max_ratio <= 1.0):
            raise ValueError(
                f"difficulty band ratios must satisfy 0 <= min <= max <= 1, "
                f"got [{band.min_ratio}, {band.max_ratio}]"
            )

    if not (0.0 < config.binding.snap_ratio):
        raise ValueError(f"binding.snap_ratio must be positive, got {config.binding.snap_ratio}")
    if not (0.0 <= config.binding.rest_band <= 1.0):
        raise ValueError(f"binding.rest_band must lie in [0, 1], got {config.binding.rest_band}")

    if config.physics.substeps < 1:
        raise ValueError(f"physics.substeps must be at least 1, got {config.physics.substeps}")

    if config.session.retry_policy not in RETRY_POLICIES:
        raise ValueError(
            f"session.retry_policy must be one of {RETRY_POLICIES}, "
            f"got '{config.session.retry_policy}'"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    levels_data = raw["levels"]
    bands: List[DifficultyBand] = [_parse_band(b) for b in levels_data["difficulty_bands"]]
    levels = LevelsConfig(
        count=int(levels_data["count"]),
        min_grid_size=int(levels_data.get("min_grid_size", 3)),
        max_grid_size=int(levels_data.get("max_grid_size", 14)),
        solved_seed_multiplier=int(levels_data.get("solved_seed_multiplier", 131)),
        mask_seed_multiplier=int(levels_data.get("mask_seed_multiplier", 97)),
        difficulty_bands=tuple(bands)
    )

    board_data = raw["board"]
    board = BoardConfig(
        width=int(board_data["width"]),
        height=int(board_data["height"])
    )

    layout_data = raw.get("layout", {})
    layout = LayoutConfig(
        top_margin_ratio=float(layout_data.get("top_margin_ratio", 0.03)),
        min_top_margin=int(layout_data.get("min_top_margin", 10)),
        gutter_ratio=float(layout_data.get("gutter_ratio", 0.05)),
        gutter_density_ratio=float(layout_data.get("gutter_density_ratio", 0.02)),
        min_gutter=int(layout_data.get("min_gutter", 8)),
        min_pool_height=int(layout_data.get("min_pool_height", 100)),
        grid_width_scale=float(layout_data.get("grid_width_scale", 0.78)),
        grid_height_scale=float(layout_data.get("grid_height_scale", 0.62)),
        grid_height_density_scale=float(layout_data.get("grid_height_density_scale", 0.16)),
        min_grid_pixels=int(layout_data.get("min_grid_pixels", 180)),
        cell_gap_ratio=float(layout_data.get("cell_gap_ratio", 0.02)),
        min_cell_gap=int(layout_data.get("min_cell_gap", 3))
    )

    tokens_data = raw.get("tokens", {})
    tokens = TokenConfig(
        radius_ratio=float(tokens_data.get("radius_ratio", 0.42)),
        min_radius=int(tokens_data.get("min_radius", 12)),
        column_width=float(tokens_data.get("column_width", 2.2)),
        pitch=float(tokens_data.get("pitch", 2.1)),
        friction=float(tokens_data.get("friction", 0.1)),
        elasticity=float(tokens_data.get("elasticity", 0.7)),
        density=float(tokens_data.get("density", 0.002))
    )

    binding_data = raw.get("binding", {})
    binding = BindingConfig(
        snap_ratio=float(binding_data.get("snap_ratio", 0.75)),
        rest_band=float(binding_data.get("rest_band", 0.4)),
        eviction_offset=float(binding_data.get("eviction_offset", 20))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity_y=float(physics_data["gravity_y"]),
        damping=float(physics_data.get("damping", 1.0)),
        dt=float(physics_data["dt"]),
        substeps=int(physics_data.get("substeps", 1)),
        wall_thickness=float(physics_data.get("wall_thickness", 40.0)),
        pool_wall_min_thickness=float(physics_data.get("pool_wall_min_thickness", 22.0)),
        calm_gravity_y=float(physics_data.get("calm_gravity_y", 200.0)),
        calm_duration=float(physics_data.get("calm_duration", 6.0))
    )

    session_data = raw.get("session", {})
    session = SessionConfig(
        retry_policy=str(session_data.get("retry_policy", "fresh")),
        seed_mask=int(session_data.get("seed_mask", 0x7FFFFFFF))
    )

    config = GameConfig(
        levels=levels,
        board=board,
        layout=layout,
        tokens=tokens,
        binding=binding,
        physics=physics,
        session=session
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
