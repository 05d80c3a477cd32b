"""
Sessions
========

Explicit owners for per-level and per-game state.

``LevelSession`` owns one generated puzzle together with its layout, binding
resolver and (optionally) its physics world. ``GameSession`` drives level
progression and replaces the ``LevelSession`` on every transition; puzzles
are never mutated in place.
"""

from __future__ import annotations

import random
import time
from enum import Enum
from typing import Callable, Dict, List, Optional

from latin_drop.latin_core.binding import DropResult, SlotBindingResolver
from latin_drop.latin_core.config_loader import GameConfig, get_config
from latin_drop.latin_core.errors import SessionStateError
from latin_drop.latin_core.layout import BoardLayout, Point, compute_layout
from latin_drop.latin_core.level import LevelPuzzle, generate_level
from latin_drop.latin_core.level_policy import clamp_level
from latin_drop.latin_core.logger import get_logger
from latin_drop.latin_core.physics_world import TokenWorld
from latin_drop.latin_core.validator import ValidationResult

LOGGER = get_logger(__name__)


class GameState(str, Enum):
    """Top-level game flow states."""

    MENU = "MENU"
    PLAYING = "PLAYING"
    GAME_OVER = "GAME_OVER"


class LevelOutcome(str, Enum):
    """Result of the latest completed attempt on a level."""

    NONE = "NONE"
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


def wall_clock_seed() -> int:
    """Default seed source: wall-clock milliseconds."""
    return int(time.time() * 1000)


class LevelSession:
    """
    One attempt at one level.

    All drag/drop events for the level go through this object. When a
    physics world is attached, the resolver's pin map is reasserted before
    every simulation step.
    """

    def __init__(
        self,
        level_index: int,
        seed: int,
        config: Optional[GameConfig] = None,
        simulate: bool = True
    ):
        """
        Initialize a level attempt.

        Args:
            level_index: 1-based level index.
            seed: Seed for this attempt.
            config: Game configuration. Uses default if None.
            simulate: Attach a pymunk TokenWorld for the token pool.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._puzzle = generate_level(level_index, seed, config)
        self._layout = compute_layout(self._puzzle.grid_size, config)
        self._resolver = SlotBindingResolver(self._puzzle, self._layout, rng_seed=seed)
        self._rng = random.Random(seed)

        self._world: Optional[TokenWorld] = None
        if simulate:
            self._world = TokenWorld(self._puzzle.tokens, self._layout, config)
            self._world.add_pre_step_callback(self.reassert_locked_positions)

        self._outcome = LevelOutcome.NONE
        self._dragging: Optional[int] = None

    @property
    def puzzle(self) -> LevelPuzzle:
        return self._puzzle

    @property
    def layout(self) -> BoardLayout:
        return self._layout

    @property
    def resolver(self) -> SlotBindingResolver:
        return self._resolver

    @property
    def world(self) -> Optional[TokenWorld]:
        return self._world

    @property
    def level_index(self) -> int:
        return self._puzzle.level_index

    @property
    def seed(self) -> int:
        return self._puzzle.seed

    @property
    def outcome(self) -> LevelOutcome:
        return self._outcome

    @property
    def dragging(self) -> Optional[int]:
        """Token currently held by the player, if any."""
        return self._dragging

    def is_complete(self) -> bool:
        return self._resolver.is_complete()

    def validate(self) -> ValidationResult:
        return self._resolver.validate()

    def begin_drag(self, token_id: int) -> Optional[int]:
        """
        Pick up a token.

        Returns:
            The slot the token was lifted from, or None.
        """
        released = self._resolver.begin_drag(token_id)
        if self._world is not None:
            self._world.grab(token_id)
        self._dragging = token_id
        if released is not None:
            self._outcome = LevelOutcome.NONE
        return released

    def drag_to(self, position: Point) -> None:
        """Move the held token."""
        if self._dragging is None:
            raise SessionStateError("No token is being dragged")
        if self._world is not None:
            self._world.drag_to(self._dragging, position)

    def drop(self, token_id: Optional[int] = None, position: Optional[Point] = None) -> DropResult:
        """
        Release a token over the board.

        Args:
            token_id: Token to drop. Defaults to the token being dragged.
            position: Drop point. Defaults to the token body's position.

        Returns:
            The resolver's DropResult, already applied to the physics world.
        """
        if token_id is None:
            token_id = self._dragging
        if token_id is None:
            raise SessionStateError("No token to drop")
        if position is None:
            if self._world is None:
                raise ValueError("A drop position is required without a physics world")
            position = self._world.token_position(token_id)

        result = self._resolver.attempt_drop(token_id, position)
        if token_id == self._dragging:
            self._dragging = None
        self._apply(result)
        return result

    def auto_fill(self) -> Optional[DropResult]:
        """Clear the board and place one correct token."""
        result = self._resolver.auto_fill_one()
        if result is not None:
            self._apply(result)
        return result

    def shuffle_pool(self) -> List[int]:
        """Scatter free tokens across the pool. No-op without physics."""
        if self._world is None:
            return []
        return self._world.shuffle_pool(self._rng)

    def calm(self, duration: Optional[float] = None) -> None:
        """Temporarily lower gravity. No-op without physics."""
        if self._world is not None:
            self._world.calm(duration)

    def reassert_locked_positions(self) -> Dict[int, Point]:
        """Pin every bound token to its slot center."""
        pins = self._resolver.reassert_locked_positions()
        if self._world is not None:
            self._world.pin(pins)
        return pins

    def step(self, dt: Optional[float] = None) -> None:
        """Advance the token simulation by one tick."""
        if self._world is not None:
            self._world.step(dt)

    def _apply(self, result: DropResult) -> None:
        if self._world is not None:
            for token_id, position in result.resting_positions.items():
                self._world.release(token_id, position)
            if result.accepted and result.slot_id is not None:
                self._world.pin({result.token_id: self._resolver.locked_slot_position(result.slot_id)})

        if result.valid is None:
            self._outcome = LevelOutcome.NONE
        else:
            self._outcome = LevelOutcome.SUCCESS if result.valid else LevelOutcome.FAIL
            LOGGER.info("Level %d attempt finished: %s", self.level_index, self._outcome.value)


class GameSession:
    """
    Game flow across levels.

    MENU -> PLAYING (start) -> PLAYING (next level / retry) -> GAME_OVER
    after the last level. Every transition builds a fresh LevelSession.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed_source: Optional[Callable[[], int]] = None,
        simulate: bool = True
    ):
        """
        Initialize game session.

        Args:
            config: Game configuration. Uses default if None.
            seed_source: Callable producing new seeds. Wall clock if None.
            simulate: Attach physics worlds to level sessions.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed_source = seed_source if seed_source is not None else wall_clock_seed
        self._simulate = simulate

        self._state = GameState.MENU
        self._level: Optional[LevelSession] = None
        self._current_level: int = 1

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def current_level(self) -> int:
        return self._current_level

    @property
    def level_count(self) -> int:
        return self._config.levels.count

    @property
    def level(self) -> LevelSession:
        """The active level session."""
        return self._require_playing()

    def _require_playing(self) -> LevelSession:
        if self._level is None or self._state != GameState.PLAYING:
            raise SessionStateError(f"No active level in state {self._state.value}")
        return self._level

    def _next_seed(self) -> int:
        return int(self._seed_source()) & self._config.session.seed_mask

    def _enter_level(self, level_index: int, seed: int) -> LevelSession:
        self._current_level = clamp_level(level_index, self._config)
        self._level = LevelSession(self._current_level, seed, self._config, simulate=self._simulate)
        self._state = GameState.PLAYING
        LOGGER.info("Entering level %d (seed %d)", self._current_level, seed)
        return self._level

    def start_game(self, level: int = 1) -> LevelSession:
        """Start playing from ``level`` with a fresh seed."""
        return self._enter_level(level, self._next_seed())

    def restart_game(self) -> LevelSession:
        """Start over from level 1 with a fresh seed."""
        return self.start_game(1)

    def next_level(self) -> Optional[LevelSession]:
        """
        Advance to the next level.

        Returns:
            The new LevelSession, or None once the last level is done
            (the session moves to GAME_OVER).
        """
        self._require_playing()
        if self._current_level >= self.level_count:
            self._level = None
            self._state = GameState.GAME_OVER
            LOGGER.info("All %d levels played", self.level_count)
            return None
        return self._enter_level(self._current_level + 1, self._next_seed())

    def retry_level(self) -> LevelSession:
        """
        Replay the current level.

        With ``session.retry_policy: reuse`` the same puzzle comes back;
        with ``fresh`` a new seed is drawn.
        """
        current = self._require_playing()
        if self._config.session.retry_policy == "reuse":
            seed = current.seed
        else:
            seed = self._next_seed()
        return self._enter_level(self._current_level, seed)

    def exit_to_menu(self) -> None:
        """Drop the active level and return to the menu."""
        self._level = None
        self._state = GameState.MENU
