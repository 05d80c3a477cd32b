"""
Physics World
=============

Manages the pymunk Space holding the token pool: static walls, one circle
body per token, pinning of bound tokens, and the pool power-ups.

This is the adapter to the external simulation. It performs no game logic:
binding decisions come from the resolver and are applied here as pins,
releases and teleports.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pymunk

from latin_drop.latin_core.config_loader import GameConfig, get_config
from latin_drop.latin_core.layout import BoardLayout, Point
from latin_drop.latin_core.level import Token

# Collision types for pymunk
COLLISION_TYPE_TOKEN = 1
COLLISION_TYPE_WALL = 2

# Angle of the funnel guides above the pool (radians)
FUNNEL_ANGLE = 0.55


@dataclass
class TokenBody:
    """
    Represents a token instance in the physics world.

    Wraps the pymunk Body and shape with the token it carries.
    """
    token: Token
    body: pymunk.Body
    shape: pymunk.Circle

    @property
    def id(self) -> int:
        return self.token.id

    @property
    def value(self) -> int:
        return self.token.value

    @property
    def position(self) -> Point:
        return self.body.position.x, self.body.position.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.body.velocity.x, self.body.velocity.y

    @property
    def is_held(self) -> bool:
        """True while pinned to a slot or grabbed by the player."""
        return self.body.body_type == pymunk.Body.KINEMATIC

    @property
    def speed(self) -> float:
        vx, vy = self.velocity
        return math.sqrt(vx * vx + vy * vy)


class TokenWorld:
    """
    Manages the pymunk simulation of the token pool.

    Handles:
    - Space creation and configuration
    - Board walls, pool walls and funnel guides
    - Token body creation at their initial pool positions
    - Pre-step callbacks (used to re-pin bound tokens every tick)
    - Pin / grab / release of individual tokens
    - Pool shuffle and temporary low gravity
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        layout: BoardLayout,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize physics world.

        Args:
            tokens: Tokens to create bodies for.
            layout: Board layout of the level.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._layout = layout

        self._space = pymunk.Space()
        self._space.gravity = config.physics.gravity
        self._space.damping = config.physics.damping

        self._wall_shapes: List[pymunk.Shape] = []
        self._create_walls()
        self._create_pool_walls()

        self._tokens: Dict[int, TokenBody] = {}
        token_list = list(tokens)
        for token, position in zip(token_list, layout.initial_pool_positions(len(token_list))):
            self._spawn_token(token, position)

        self._pre_step_callbacks: List[Callable[[], None]] = []
        self._calm_remaining: float = 0.0
        self._sim_time: float = 0.0

    def _create_walls(self) -> None:
        """Create static board walls (floor, left, right)."""
        width = self._layout.width
        height = self._layout.height
        radius = self._config.physics.wall_thickness / 2
        static_body = self._space.static_body

        segments = [
            ((0, height), (width, height)),  # floor
            ((0, -height), (0, height)),     # left
            ((width, -height), (width, height)),  # right
        ]
        for a, b in segments:
            wall = pymunk.Segment(static_body, a, b, radius)
            wall.friction = self._config.tokens.friction
            wall.elasticity = self._config.tokens.elasticity
            wall.collision_type = COLLISION_TYPE_WALL
            self._wall_shapes.append(wall)
            self._space.add(wall)

    def _create_pool_walls(self) -> None:
        """Create the pool floor, its side walls and the two funnel guides."""
        lay = self._layout
        r = lay.token_radius
        thickness = max(self._config.physics.pool_wall_min_thickness, round(r * 1.4))
        wall_height = lay.pool_height + r * 2
        funnel_height = max(120, round(r * 6))
        funnel_width = max(14, round(r * 1.1))
        funnel_inset = round(r * 0.6)
        side_y = lay.pool_y + lay.pool_height / 2 - r

        boxes = [
            # (center, size, angle)
            ((lay.pool_x + lay.pool_width / 2, lay.pool_y + lay.pool_height + 14),
             (lay.pool_width + thickness * 0.6, 28), 0.0),
            ((lay.pool_x - thickness / 2, side_y), (thickness, wall_height), 0.0),
            ((lay.pool_x + lay.pool_width + thickness / 2, side_y), (thickness, wall_height), 0.0),
            ((lay.pool_x - funnel_inset, lay.pool_y - funnel_height * 0.35),
             (funnel_width, funnel_height), -FUNNEL_ANGLE),
            ((lay.pool_x + lay.pool_width + funnel_inset, lay.pool_y - funnel_height * 0.35),
             (funnel_width, funnel_height), FUNNEL_ANGLE),
        ]
        for center, size, angle in boxes:
            body = pymunk.Body(body_type=pymunk.Body.STATIC)
            body.position = center
            body.angle = angle
            shape = pymunk.Poly.create_box(body, size)
            shape.friction = self._config.tokens.friction
            shape.elasticity = self._config.tokens.elasticity
            shape.collision_type = COLLISION_TYPE_WALL
            self._wall_shapes.append(shape)
            self._space.add(body, shape)

    def _spawn_token(self, token: Token, position: Point) -> TokenBody:
        """Create a dynamic circle body for a token."""
        body = pymunk.Body()
        body.position = position
        shape = pymunk.Circle(body, self._layout.token_radius)
        shape.density = self._config.tokens.density
        shape.friction = self._config.tokens.friction
        shape.elasticity = self._config.tokens.elasticity
        shape.collision_type = COLLISION_TYPE_TOKEN

        token_body = TokenBody(token=token, body=body, shape=shape)
        self._space.add(body, shape)
        self._tokens[token.id] = token_body
        return token_body

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def layout(self) -> BoardLayout:
        return self._layout

    @property
    def tokens(self) -> Dict[int, TokenBody]:
        """All token bodies by token id."""
        return self._tokens

    @property
    def gravity(self) -> Tuple[float, float]:
        gx, gy = self._space.gravity
        return (gx, gy)

    @property
    def is_calm(self) -> bool:
        return self._calm_remaining > 0.0

    @property
    def sim_time(self) -> float:
        """Simulated seconds since creation."""
        return self._sim_time

    def get_token(self, token_id: int) -> TokenBody:
        """Get a token body by id (KeyError if unknown)."""
        return self._tokens[token_id]

    def token_position(self, token_id: int) -> Point:
        return self._tokens[token_id].position

    def add_pre_step_callback(self, callback: Callable[[], None]) -> None:
        """Register a callback run before every physics step."""
        self._pre_step_callbacks.append(callback)

    def step(self, dt: Optional[float] = None) -> None:
        """
        Advance physics simulation by one timestep.

        Pre-step callbacks run first, so pins are reasserted before any
        force can act on a bound token.

        Args:
            dt: Timestep duration. Uses config default if None.
        """
        if dt is None:
            dt = self._config.physics.dt

        for callback in self._pre_step_callbacks:
            callback()

        substeps = self._config.physics.substeps
        for _ in range(substeps):
            self._space.step(dt / substeps)
        self._sim_time += dt

        if self._calm_remaining > 0.0:
            self._calm_remaining -= dt
            if self._calm_remaining <= 0.0:
                self._calm_remaining = 0.0
                self._space.gravity = self._config.physics.gravity

    def pin(self, positions: Dict[int, Point]) -> None:
        """
        Hold tokens at fixed positions.

        Pinned tokens become kinematic and ignore gravity and contacts.
        Calling this again with the same positions is a no-op in effect.
        """
        for token_id, position in positions.items():
            self._hold(self._tokens[token_id], position)

    def grab(self, token_id: int) -> None:
        """Take a token out of the simulation's control for dragging."""
        token_body = self._tokens[token_id]
        self._hold(token_body, token_body.position)

    def drag_to(self, token_id: int, position: Point) -> None:
        """Move a held token to the pointer position."""
        self._hold(self._tokens[token_id], position)

    def release(self, token_id: int, position: Optional[Point] = None) -> None:
        """
        Hand a token back to the simulation.

        Args:
            token_id: Token to release.
            position: Optional teleport target (e.g. a pool resting spot).
        """
        body = self._tokens[token_id].body
        if body.body_type != pymunk.Body.DYNAMIC:
            body.body_type = pymunk.Body.DYNAMIC
        if position is not None:
            body.position = position
        body.velocity = (0, 0)
        body.angular_velocity = 0
        self._space.reindex_shapes_for_body(body)

    def shuffle_pool(self, rng: random.Random, band: float = 0.6) -> List[int]:
        """
        Scatter every free token to a random spot in the pool.

        Held tokens (pinned or grabbed) are left alone.

        Returns:
            Ids of the tokens that were moved.
        """
        lay = self._layout
        moved: List[int] = []
        for token_id, token_body in self._tokens.items():
            if token_body.is_held:
                continue
            position = (
                lay.pool_x + rng.random() * lay.pool_width,
                lay.pool_y + rng.random() * lay.pool_height * band,
            )
            self.release(token_id, position)
            moved.append(token_id)
        return moved

    def calm(self, duration: Optional[float] = None) -> None:
        """
        Lower gravity for a while (simulated seconds).

        Args:
            duration: Seconds of low gravity. Uses config default if None.
        """
        if duration is None:
            duration = self._config.physics.calm_duration
        self._space.gravity = (0.0, self._config.physics.calm_gravity_y)
        self._calm_remaining = max(self._calm_remaining, duration)

    def _hold(self, token_body: TokenBody, position: Point) -> None:
        body = token_body.body
        if body.body_type != pymunk.Body.KINEMATIC:
            body.body_type = pymunk.Body.KINEMATIC
        if tuple(body.position) != tuple(position):
            body.position = position
            self._space.reindex_shapes_for_body(body)
        body.velocity = (0, 0)
        body.angular_velocity = 0
