"""
Latin Core - puzzle generation, binding and validation.

Main exports:
- generate_level: Build the LevelPuzzle for (level_index, seed)
- SlotBindingResolver: Live token <-> slot binding for one level
- GridValidator: Latin-square check of a filled grid
- TokenWorld: pymunk simulation of the token pool
- LevelSession / GameSession: per-level and per-game state owners
- GameConfig: Configuration loaded from game_config.yaml
"""

from latin_drop.latin_core.config_loader import GameConfig, load_config, get_config
from latin_drop.latin_core.errors import (
    LatinDropError,
    UnknownTokenError,
    UnknownSlotError,
    IncompleteGridError,
    SessionStateError,
)
from latin_drop.latin_core.rng import SeededRandom
from latin_drop.latin_core.level_policy import LevelParameters, level_parameters
from latin_drop.latin_core.latin_square import generate_solved_grid
from latin_drop.latin_core.puzzle_masker import Slot, mask_grid
from latin_drop.latin_core.level import LevelPuzzle, Token, generate_level
from latin_drop.latin_core.layout import BoardLayout, compute_layout
from latin_drop.latin_core.validator import GridValidator, ValidationResult
from latin_drop.latin_core.binding import DropResult, SlotBindingResolver
from latin_drop.latin_core.physics_world import TokenWorld
from latin_drop.latin_core.session import GameSession, GameState, LevelOutcome, LevelSession

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "LatinDropError",
    "UnknownTokenError",
    "UnknownSlotError",
    "IncompleteGridError",
    "SessionStateError",
    "SeededRandom",
    "LevelParameters",
    "level_parameters",
    "generate_solved_grid",
    "Slot",
    "mask_grid",
    "LevelPuzzle",
    "Token",
    "generate_level",
    "BoardLayout",
    "compute_layout",
    "GridValidator",
    "ValidationResult",
    "DropResult",
    "SlotBindingResolver",
    "TokenWorld",
    "GameSession",
    "GameState",
    "LevelOutcome",
    "LevelSession",
]
