"""Per-tick enemy update.

Enemies are advanced one after another; each reads the player's position as
it stands when its turn comes up and there is no enemy-to-enemy interaction.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import structlog

from game.ai import get_handler

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from game.game_state import GameState
    from game.world.procgen import Room

log = structlog.get_logger()

ANIMATION_FRAMES = 4
ANIMATION_PERIOD = 10


def dispatch_ai(gs: "GameState", room: "Room") -> None:
    """Advance every living enemy's state machine by one tick."""
    for enemy in gs.enemies:
        if not gs.modes.is_playing:
            break
        if not enemy.alive:
            continue
        enemy.frame_timer += 1
        if enemy.frame_timer > ANIMATION_PERIOD:
            enemy.frame_index = (enemy.frame_index + 1) % ANIMATION_FRAMES
            enemy.frame_timer = 0
        dist = math.hypot(gs.player.x - enemy.x, gs.player.y - enemy.y)
        get_handler(enemy.state)(enemy, gs, room, dist)
