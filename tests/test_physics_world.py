"""
Tests for the token pool simulation.
"""

import random

import pytest

from latin_drop.latin_core.config_loader import load_config
from latin_drop.latin_core.layout import compute_layout
from latin_drop.latin_core.level import generate_level
from latin_drop.latin_core.physics_world import TokenWorld
from latin_drop.latin_core.session import LevelSession


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def world(config):
    puzzle = generate_level(4, 31337, config)
    layout = compute_layout(puzzle.grid_size, config)
    return TokenWorld(puzzle.tokens, layout, config)


@pytest.fixture
def session(config):
    return LevelSession(4, 31337, config, simulate=True)


class TestTokenWorld:
    """Test token bodies and stepping."""

    def test_one_body_per_token(self, world, config):
        puzzle = generate_level(4, 31337, config)
        assert set(world.tokens) == {t.id for t in puzzle.tokens}
        for token_body in world.tokens.values():
            assert not token_body.is_held

    def test_tokens_start_in_pool(self, world):
        layout = world.layout
        for token_body in world.tokens.values():
            assert layout.contains_pool(token_body.position)

    def test_free_token_falls(self, world):
        world.release(0, (300.0, 100.0))
        for _ in range(20):
            world.step()
        assert world.token_position(0)[1] > 100.0

    def test_sim_time_advances(self, world, config):
        for _ in range(10):
            world.step()
        assert world.sim_time == pytest.approx(10 * config.physics.dt)

    def test_pinned_token_ignores_gravity(self, world):
        world.pin({0: (300.0, 100.0)})
        for _ in range(60):
            world.step()
        assert world.token_position(0) == pytest.approx((300.0, 100.0))
        assert world.get_token(0).is_held

    def test_release_returns_control(self, world):
        world.pin({0: (300.0, 100.0)})
        world.release(0, (300.0, 100.0))
        assert not world.get_token(0).is_held
        for _ in range(20):
            world.step()
        assert world.token_position(0)[1] > 100.0

    def test_tokens_stay_on_board(self, world):
        for _ in range(600):
            world.step()
        layout = world.layout
        for token_body in world.tokens.values():
            x, y = token_body.position
            assert 0 <= x <= layout.width
            assert y <= layout.height

    def test_shuffle_moves_only_free_tokens(self, world):
        world.pin({0: (300.0, 100.0)})
        moved = world.shuffle_pool(random.Random(1))
        assert 0 not in moved
        assert set(moved) == set(world.tokens) - {0}
        for token_id in moved:
            assert world.layout.contains_pool(world.token_position(token_id))

    def test_calm_lowers_then_restores_gravity(self, world, config):
        world.calm(0.5)
        assert world.is_calm
        assert world.gravity == (0.0, config.physics.calm_gravity_y)
        for _ in range(40):
            world.step()
        assert not world.is_calm
        assert world.gravity == config.physics.gravity


class TestPinning:
    """Test that bound tokens stay exactly on their slot."""

    def test_bound_token_stays_on_slot(self, session):
        slot = session.puzzle.slots[0]
        center = session.resolver.slot_center(slot.index)
        result = session.drop(0, center)
        assert result.accepted
        for _ in range(120):
            session.step()
        assert session.world.token_position(0) == pytest.approx(center)

    def test_pins_survive_calm_and_shuffle(self, session):
        slot = session.puzzle.slots[1]
        center = session.resolver.slot_center(slot.index)
        session.drop(1, center)
        session.calm()
        session.shuffle_pool()
        for _ in range(60):
            session.step()
        assert session.world.token_position(1) == pytest.approx(center)

    def test_evicted_token_released(self, session):
        slot = session.puzzle.slots[0]
        center = session.resolver.slot_center(slot.index)
        session.drop(0, center)
        result = session.drop(1, center)
        assert result.evicted_token_id == 0
        assert not session.world.get_token(0).is_held
        assert session.world.get_token(1).is_held
