"""
Slot Binding Resolver
=====================

Maintains the live token <-> slot binding while the player drags tokens,
decides snap/reject for each drop, and triggers validation once every slot
holds a token.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from latin_drop.latin_core.errors import IncompleteGridError, UnknownSlotError, UnknownTokenError
from latin_drop.latin_core.layout import BoardLayout, Point
from latin_drop.latin_core.level import LevelPuzzle, Token
from latin_drop.latin_core.logger import get_logger
from latin_drop.latin_core.puzzle_masker import Slot
from latin_drop.latin_core.validator import GridValidator, ValidationResult

LOGGER = get_logger(__name__)


@dataclass
class DropResult:
    """Outcome of a single drop (or auto-fill) event."""
    accepted: bool
    token_id: int
    slot_id: Optional[int] = None
    evicted_token_id: Optional[int] = None
    distance: float = math.inf
    # Tokens sent back to the pool by this event, with their new positions
    resting_positions: Dict[int, Point] = field(default_factory=dict)
    # None unless this event completed the grid
    valid: Optional[bool] = None

    @property
    def completed(self) -> bool:
        """True if this event bound the last open slot."""
        return self.valid is not None


class SlotBindingResolver:
    """
    Owns the binding relation for one level.

    Both directions (slot -> token, token -> slot) are updated together, so
    a token is bound to at most one slot and a slot holds at most one token.
    Events are processed one at a time, to completion; a drop that fills the
    last slot runs exactly one validation before returning.
    """

    def __init__(
        self,
        puzzle: LevelPuzzle,
        layout: BoardLayout,
        rng_seed: Optional[int] = None,
        validator: Optional[GridValidator] = None
    ):
        """
        Initialize resolver.

        Args:
            puzzle: The level's puzzle.
            layout: Board layout for the puzzle's grid size.
            rng_seed: Seed for resting positions of returned tokens.
            validator: Grid validator. A default one is created if None.
        """
        self._puzzle = puzzle
        self._layout = layout
        self._slots: Dict[int, Slot] = puzzle.slot_by_index()
        self._tokens: Dict[int, Token] = puzzle.token_by_id()
        self._centers: Dict[int, Point] = layout.slot_centers(puzzle.slots)
        self._rng = random.Random(rng_seed)
        self._validator = validator if validator is not None else GridValidator()

        self._slot_to_token: Dict[int, int] = {}
        self._token_to_slot: Dict[int, int] = {}

        self._validations: int = 0
        self._last_validation: Optional[ValidationResult] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def puzzle(self) -> LevelPuzzle:
        return self._puzzle

    @property
    def layout(self) -> BoardLayout:
        return self._layout

    @property
    def snap_threshold(self) -> float:
        """Maximum accepted distance between a drop and a slot center."""
        return self._layout.snap_threshold

    @property
    def slot_count(self) -> int:
        return len(self._slots)

    @property
    def bound_count(self) -> int:
        return len(self._slot_to_token)

    @property
    def validations(self) -> int:
        """Number of validations run so far."""
        return self._validations

    @property
    def last_validation(self) -> Optional[ValidationResult]:
        return self._last_validation

    def bindings(self) -> Dict[int, int]:
        """Copy of the slot -> token relation."""
        return dict(self._slot_to_token)

    def bound_token(self, slot_id: int) -> Optional[int]:
        self._require_slot(slot_id)
        return self._slot_to_token.get(slot_id)

    def slot_of(self, token_id: int) -> Optional[int]:
        self._require_token(token_id)
        return self._token_to_slot.get(token_id)

    def open_slots(self) -> List[Slot]:
        """Slots without a token, in slot order."""
        return [s for s in self._puzzle.slots if s.index not in self._slot_to_token]

    def is_complete(self) -> bool:
        """True when every slot holds a token."""
        return len(self._slot_to_token) == len(self._slots)

    def slot_center(self, slot_id: int) -> Point:
        self._require_slot(slot_id)
        return self._centers[slot_id]

    def nearest_slot(self, position: Point) -> Tuple[Optional[int], float]:
        """
        Slot whose center is closest to ``position``.

        Ties keep the earliest slot in slot order.

        Returns:
            (slot_id, distance), or (None, inf) if the puzzle has no slots.
        """
        x, y = position
        best_id: Optional[int] = None
        best_distance = math.inf
        for slot in self._puzzle.slots:
            cx, cy = self._centers[slot.index]
            distance = math.hypot(x - cx, y - cy)
            if distance < best_distance:
                best_distance = distance
                best_id = slot.index
        return best_id, best_distance

    def filled_grid(self) -> np.ndarray:
        """Puzzle grid with the values of bound tokens written into slots."""
        grid = np.array(self._puzzle.puzzle_grid, copy=True)
        for slot_id, token_id in self._slot_to_token.items():
            slot = self._slots[slot_id]
            grid[slot.row, slot.col] = self._tokens[token_id].value
        return grid

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def begin_drag(self, token_id: int) -> Optional[int]:
        """
        Pick up a token.

        A bound token is unbound and its slot becomes open again.

        Args:
            token_id: Token being dragged.

        Returns:
            The slot the token was released from, or None if it was free.

        Raises:
            UnknownTokenError: If the token does not belong to this level.
        """
        self._require_token(token_id)
        released = self._unbind_token(token_id)
        if released is not None:
            LOGGER.debug("Token %d lifted from slot %d", token_id, released)
        return released

    def attempt_drop(self, token_id: int, position: Point) -> DropResult:
        """
        Drop a token at a world position.

        The nearest slot wins if it lies within the snap threshold; a token
        already sitting there is evicted back to the pool. Otherwise the drop
        is rejected and the token gets a random resting position in the pool.
        A token that is still bound (no ``begin_drag``) is lifted first.

        Args:
            token_id: Token being dropped.
            position: Drop point in world coordinates.

        Returns:
            DropResult describing the binding change. ``valid`` is set when
            the drop filled the last open slot.

        Raises:
            UnknownTokenError: If the token does not belong to this level.
        """
        self._require_token(token_id)
        self._unbind_token(token_id)

        slot_id, distance = self.nearest_slot(position)
        if slot_id is None or distance > self.snap_threshold:
            rest = self._layout.resting_position(self._rng)
            LOGGER.debug(
                "Drop of token %d rejected (nearest distance %.1f > %.1f)",
                token_id, distance, self.snap_threshold
            )
            return DropResult(
                accepted=False,
                token_id=token_id,
                distance=distance,
                resting_positions={token_id: rest}
            )

        result = DropResult(accepted=True, token_id=token_id, slot_id=slot_id, distance=distance)

        existing = self._slot_to_token.get(slot_id)
        if existing is not None:
            self._unbind_token(existing)
            result.evicted_token_id = existing
            result.resting_positions[existing] = self._layout.eviction_position()
            LOGGER.debug("Token %d evicted from slot %d by token %d", existing, slot_id, token_id)

        self._bind(token_id, slot_id)

        if self.is_complete():
            result.valid = self.validate().valid
        return result

    def validate(self) -> ValidationResult:
        """
        Validate the filled grid.

        Raises:
            IncompleteGridError: If any slot is still open.
        """
        if not self.is_complete():
            raise IncompleteGridError(
                f"Cannot validate: {len(self._slots) - len(self._slot_to_token)} "
                f"of {len(self._slots)} slots are open"
            )
        result = self._validator.validate(self.filled_grid())
        self._validations += 1
        self._last_validation = result
        LOGGER.info(
            "Level %d grid %s", self._puzzle.level_index,
            "valid" if result.valid else f"invalid ({result.line}: {result.reason})"
        )
        return result

    def release_all(self) -> Dict[int, Point]:
        """
        Unbind every token.

        Returns:
            Resting position for each token that was bound.
        """
        released: Dict[int, Point] = {}
        for token_id in sorted(self._token_to_slot):
            released[token_id] = self._layout.resting_position(self._rng)
        self._slot_to_token.clear()
        self._token_to_slot.clear()
        return released

    def auto_fill_one(self) -> Optional[DropResult]:
        """
        Hint: clear the board and place one correct token.

        All bound tokens go back to the pool, then the first open slot
        receives a token carrying its expected value.

        Returns:
            DropResult for the placed token (its ``resting_positions`` hold
            the released tokens), or None if nothing could be placed.
        """
        released = self.release_all()
        for slot in self.open_slots():
            for token in self._puzzle.tokens:
                if token.value == slot.value and token.id not in self._token_to_slot:
                    self._bind(token.id, slot.index)
                    LOGGER.debug("Auto-filled slot %d with token %d", slot.index, token.id)
                    result = DropResult(
                        accepted=True,
                        token_id=token.id,
                        slot_id=slot.index,
                        distance=0.0,
                        resting_positions={
                            t: p for t, p in released.items() if t != token.id
                        }
                    )
                    if self.is_complete():
                        result.valid = self.validate().valid
                    return result
        return None

    # ------------------------------------------------------------------
    # Pinning
    # ------------------------------------------------------------------

    def locked_slot_position(self, slot_id: int) -> Point:
        """
        Fixed snap coordinates of a slot.

        A token bound to the slot must be held exactly here for as long as
        the binding lasts.
        """
        return self.slot_center(slot_id)

    def reassert_locked_positions(self) -> Dict[int, Point]:
        """
        Pin targets for every bound token.

        Idempotent; meant to be called once per simulation step so stray
        forces never move a bound token off its slot.

        Returns:
            Mapping token_id -> slot center.
        """
        return {
            token_id: self._centers[slot_id]
            for slot_id, token_id in self._slot_to_token.items()
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_token(self, token_id: int) -> Token:
        try:
            return self._tokens[token_id]
        except KeyError:
            raise UnknownTokenError(f"Unknown token id: {token_id!r}") from None

    def _require_slot(self, slot_id: int) -> Slot:
        try:
            return self._slots[slot_id]
        except KeyError:
            raise UnknownSlotError(f"Unknown slot id: {slot_id!r}") from None

    def _bind(self, token_id: int, slot_id: int) -> None:
        self._slot_to_token[slot_id] = token_id
        self._token_to_slot[token_id] = slot_id

    def _unbind_token(self, token_id: int) -> Optional[int]:
        slot_id = self._token_to_slot.pop(token_id, None)
        if slot_id is not None:
            del self._slot_to_token[slot_id]
        return slot_id
