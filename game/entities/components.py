from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from game.constants import (
    ENEMY_SIZE,
    PLAYER_SIZE,
    PROJECTILE_SIZE,
    EnemyState,
    ItemKind,
)


@dataclass
class PlayerState:
    """Everything the simulation tracks about the player.

    ``x``/``y`` are the top-left corner in room pixels.  ``mp`` is the
    secondary pool spent by the special attack.
    """

    x: float = 0.0
    y: float = 0.0
    hp: int = 3
    max_hp: int = 3
    mp: int = 3
    max_mp: int = 3
    speed: float = 5.0
    damage: int = 1
    fire_rate_ms: float = 400.0
    cooldown: int = 0
    special_cooldown: int = 0
    facing: Tuple[float, float] = (1.0, 0.0)
    score: int = 0
    keys: int = 0
    files: int = 0
    size: int = PLAYER_SIZE

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.size / 2, self.y + self.size / 2

    @property
    def alive(self) -> bool:
        return self.hp > 0


@dataclass
class Enemy:
    x: float
    y: float
    hp: int
    max_hp: int
    speed: float
    state: EnemyState = EnemyState.CHASE
    timer: int = 0
    size: int = ENEMY_SIZE
    # Presentation bookkeeping
    frame_index: int = 0
    frame_timer: int = 0

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.size / 2, self.y + self.size / 2

    @property
    def alive(self) -> bool:
        return self.hp > 0


@dataclass
class Projectile:
    """A shot; ``x``/``y`` is its centre."""

    x: float
    y: float
    vx: float
    vy: float
    life: int
    size: int = PROJECTILE_SIZE


@dataclass(frozen=True)
class Item:
    id: int
    kind: ItemKind
    x: float
    y: float
    w: int = 24
    h: int = 24


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    life: int
    color: str


@dataclass
class Shockwave:
    x: float
    y: float
    radius: float = 10.0
    max_radius: float = 500.0
    alpha: float = 1.0
    growth: float = 15.0
    fade: float = 0.03

    @property
    def expired(self) -> bool:
        return self.alpha <= 0 or self.radius >= self.max_radius


@dataclass
class InputIntent:
    """Latest input forwarded by the presentation layer."""

    move_x: float = 0.0
    move_y: float = 0.0
    fire: bool = False
    special: bool = False
    # Edge latches: set on press, consumed by the next tick
    fire_pressed: bool = field(default=False, repr=False)
    special_pressed: bool = field(default=False, repr=False)
