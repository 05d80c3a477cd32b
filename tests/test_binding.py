"""
Tests for the slot binding resolver.
"""

import math

import numpy as np
import pytest

from latin_drop.latin_core.binding import SlotBindingResolver
from latin_drop.latin_core.config_loader import load_config
from latin_drop.latin_core.errors import (
    IncompleteGridError,
    UnknownSlotError,
    UnknownTokenError,
)
from latin_drop.latin_core.layout import compute_layout
from latin_drop.latin_core.level import generate_level


FAR_AWAY = (-1000.0, -1000.0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def puzzle(config):
    # 6x6 grid at 35-50% masking: always plenty of slots
    return generate_level(4, 20240101, config)


@pytest.fixture
def resolver(puzzle, config):
    layout = compute_layout(puzzle.grid_size, config)
    return SlotBindingResolver(puzzle, layout, rng_seed=7)


def fill_correctly(resolver, puzzle, skip=0):
    """Drop token i on slot i (token values follow slot order)."""
    results = []
    for token, slot in list(zip(puzzle.tokens, puzzle.slots))[skip:]:
        results.append(resolver.attempt_drop(token.id, resolver.slot_center(slot.index)))
    return results


def distinct_value_pair(puzzle):
    """Two slots with different expected values."""
    first = puzzle.slots[0]
    for other in puzzle.slots[1:]:
        if other.value != first.value:
            return 0, puzzle.slots.index(other)
    raise AssertionError("puzzle has a single slot value")


class TestDrop:
    """Test snap and reject decisions."""

    def test_drop_on_center_binds(self, resolver, puzzle):
        slot = puzzle.slots[0]
        result = resolver.attempt_drop(0, resolver.slot_center(slot.index))
        assert result.accepted
        assert result.slot_id == slot.index
        assert result.distance == pytest.approx(0.0)
        assert resolver.bound_token(slot.index) == 0
        assert resolver.slot_of(0) == slot.index

    def test_drop_within_threshold_binds(self, resolver, puzzle):
        slot = puzzle.slots[0]
        cx, cy = resolver.slot_center(slot.index)
        offset = resolver.snap_threshold * 0.5
        result = resolver.attempt_drop(0, (cx + offset, cy))
        assert result.accepted
        assert result.slot_id == slot.index

    def test_far_drop_rejected(self, resolver):
        result = resolver.attempt_drop(0, FAR_AWAY)
        assert not result.accepted
        assert result.slot_id is None
        assert 0 in result.resting_positions
        assert resolver.layout.contains_pool(result.resting_positions[0])
        assert resolver.bindings() == {}

    def test_far_drop_unbinds_bound_token(self, resolver, puzzle):
        """Dragging a bound token off the grid frees its slot."""
        slot = puzzle.slots[0]
        resolver.attempt_drop(0, resolver.slot_center(slot.index))
        result = resolver.attempt_drop(0, FAR_AWAY)
        assert not result.accepted
        assert resolver.bound_token(slot.index) is None
        assert resolver.slot_of(0) is None

    def test_begin_drag_releases_slot(self, resolver, puzzle):
        slot = puzzle.slots[1]
        resolver.attempt_drop(1, resolver.slot_center(slot.index))
        assert resolver.begin_drag(1) == slot.index
        assert resolver.bound_token(slot.index) is None
        assert resolver.begin_drag(1) is None

    def test_move_between_slots(self, resolver, puzzle):
        """Re-dropping a bound token on another slot moves it."""
        a, b = puzzle.slots[0], puzzle.slots[1]
        resolver.attempt_drop(0, resolver.slot_center(a.index))
        resolver.attempt_drop(0, resolver.slot_center(b.index))
        assert resolver.bound_token(a.index) is None
        assert resolver.bound_token(b.index) == 0
        assert resolver.bound_count == 1

    def test_eviction(self, resolver, puzzle):
        """A drop on an occupied slot sends the occupant back to the pool."""
        slot = puzzle.slots[0]
        center = resolver.slot_center(slot.index)
        resolver.attempt_drop(0, center)
        result = resolver.attempt_drop(1, center)
        assert result.accepted
        assert result.evicted_token_id == 0
        assert result.resting_positions[0] == resolver.layout.eviction_position()
        assert resolver.bound_token(slot.index) == 1
        assert resolver.slot_of(0) is None

    def test_bindings_stay_bijective(self, resolver, puzzle):
        """Random drops never bind a token or slot twice."""
        rng = np.random.default_rng(5)
        layout = resolver.layout
        for _ in range(300):
            token_id = int(rng.integers(len(puzzle.tokens)))
            x = float(rng.uniform(layout.grid_x, layout.grid_x + layout.grid_pixels))
            y = float(rng.uniform(layout.grid_y, layout.grid_y + layout.grid_pixels))
            resolver.attempt_drop(token_id, (x, y))
            bindings = resolver.bindings()
            assert len(set(bindings.values())) == len(bindings)
            for slot_id, bound in bindings.items():
                assert resolver.slot_of(bound) == slot_id

    def test_nearest_slot_tie_keeps_first(self, resolver, puzzle):
        """Equidistant slots resolve to the earlier one in slot order."""
        by_index = puzzle.slot_by_index()
        size = puzzle.grid_size
        for slot in puzzle.slots:
            right = by_index.get(slot.index + 1)
            if right is not None and slot.col + 1 < size:
                ax, ay = resolver.slot_center(slot.index)
                bx, by = resolver.slot_center(right.index)
                slot_id, _ = resolver.nearest_slot(((ax + bx) / 2, (ay + by) / 2))
                assert slot_id == slot.index
                return
        pytest.skip("no horizontally adjacent slots in this puzzle")

    def test_unknown_token(self, resolver):
        with pytest.raises(UnknownTokenError):
            resolver.attempt_drop(999, (0.0, 0.0))
        with pytest.raises(KeyError):
            resolver.begin_drag(-1)

    def test_unknown_slot(self, resolver):
        with pytest.raises(UnknownSlotError):
            resolver.slot_center(10_000)


class TestCompletion:
    """Test validation once the last slot is filled."""

    def test_correct_fill_is_valid(self, resolver, puzzle):
        results = fill_correctly(resolver, puzzle)
        assert all(r.accepted for r in results)
        assert all(r.valid is None for r in results[:-1])
        assert results[-1].valid is True
        assert results[-1].completed
        assert resolver.validations == 1
        assert np.array_equal(resolver.filled_grid(), puzzle.solved_grid)

    def test_swapped_values_invalid(self, resolver, puzzle):
        """Swapping two tokens of different values breaks the square."""
        i, j = distinct_value_pair(puzzle)
        slot_i, slot_j = puzzle.slots[i], puzzle.slots[j]
        resolver.attempt_drop(puzzle.tokens[i].id, resolver.slot_center(slot_j.index))
        resolver.attempt_drop(puzzle.tokens[j].id, resolver.slot_center(slot_i.index))
        last = None
        for k, (token, slot) in enumerate(zip(puzzle.tokens, puzzle.slots)):
            if k not in (i, j):
                last = resolver.attempt_drop(token.id, resolver.slot_center(slot.index))
        assert last is not None
        assert last.valid is False
        assert resolver.validations == 1
        assert not resolver.last_validation.valid

    def test_validate_incomplete_raises(self, resolver, puzzle):
        fill_correctly(resolver, puzzle, skip=1)
        assert not resolver.is_complete()
        with pytest.raises(IncompleteGridError):
            resolver.validate()
        assert resolver.validations == 0

    def test_refill_validates_again(self, resolver, puzzle):
        """Completing the grid a second time runs a second validation."""
        fill_correctly(resolver, puzzle)
        last = puzzle.slots[-1]
        token_id = resolver.bound_token(last.index)
        resolver.begin_drag(token_id)
        result = resolver.attempt_drop(token_id, resolver.slot_center(last.index))
        assert result.valid is True
        assert resolver.validations == 2


class TestHelpers:
    """Test auto-fill, release and pinning."""

    def test_auto_fill_places_correct_value(self, resolver, puzzle):
        result = resolver.auto_fill_one()
        assert result is not None and result.accepted
        slot = puzzle.slot_by_index()[result.slot_id]
        token = puzzle.token_by_id()[result.token_id]
        assert token.value == slot.value
        assert slot == puzzle.slots[0]
        assert resolver.bound_count == 1

    def test_auto_fill_clears_board_first(self, resolver, puzzle):
        fill_correctly(resolver, puzzle, skip=2)
        bound_before = set(resolver.bindings().values())
        result = resolver.auto_fill_one()
        assert resolver.bound_count == 1
        released = set(result.resting_positions)
        assert released == bound_before - {result.token_id}

    def test_release_all(self, resolver, puzzle):
        fill_correctly(resolver, puzzle, skip=3)
        count = resolver.bound_count
        released = resolver.release_all()
        assert len(released) == count
        assert resolver.bindings() == {}
        assert len(resolver.open_slots()) == puzzle.slot_count

    def test_locked_positions(self, resolver, puzzle):
        slot = puzzle.slots[2]
        resolver.attempt_drop(5, resolver.slot_center(slot.index))
        pins = resolver.reassert_locked_positions()
        assert pins == {5: resolver.locked_slot_position(slot.index)}
        assert resolver.reassert_locked_positions() == pins

    def test_filled_grid_partial(self, resolver, puzzle):
        slot = puzzle.slots[0]
        resolver.attempt_drop(0, resolver.slot_center(slot.index))
        grid = resolver.filled_grid()
        assert grid[slot.row, slot.col] == puzzle.tokens[0].value
        assert int((grid == 0).sum()) == puzzle.slot_count - 1

    def test_reject_distance_reported(self, resolver):
        result = resolver.attempt_drop(0, FAR_AWAY)
        assert result.distance > resolver.snap_threshold
        assert not math.isinf(result.distance)
