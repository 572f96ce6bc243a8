"""Chase-and-swipe behaviour shared by all enemies.

STUNNED counts down and returns to CHASE.  CHASE walks straight at the
player at half speed until within close range, then winds up (PREPARE).
When the wind-up ends the enemy swings (ATTACK), hurting the player only if
they are still within attack range, and rests for a fixed cooldown before
chasing again.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from game.constants import EnemyState
from game.systems import movement_system
from game.systems.combat_system import damage_player

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from game.entities.components import Enemy
    from game.game_state import GameState
    from game.world.procgen import Room


def handle_stunned(enemy: Enemy, gs: GameState, room: Room, dist: float) -> None:
    enemy.timer -= 1
    if enemy.timer <= 0:
        enemy.state = EnemyState.CHASE


def handle_chase(enemy: Enemy, gs: GameState, room: Room, dist: float) -> None:
    cfg = gs.settings.enemies
    if dist < cfg.close_range:
        enemy.state = EnemyState.PREPARE
        enemy.timer = cfg.prepare_ticks + gs.difficulty * cfg.prepare_ticks_per_level
        return
    angle = math.atan2(gs.player.y - enemy.y, gs.player.x - enemy.x)
    step = enemy.speed * cfg.chase_speed_factor
    movement_system.try_move(enemy, math.cos(angle) * step, math.sin(angle) * step, room)


def handle_prepare(enemy: Enemy, gs: GameState, room: Room, dist: float) -> None:
    enemy.timer -= 1
    if enemy.timer > 0:
        return
    cfg = gs.settings.enemies
    enemy.state = EnemyState.ATTACK
    enemy.timer = cfg.attack_cooldown_ticks
    if dist < cfg.attack_range:
        damage_player(gs, 1)


def handle_attack(enemy: Enemy, gs: GameState, room: Room, dist: float) -> None:
    enemy.timer -= 1
    if enemy.timer <= 0:
        enemy.state = EnemyState.CHASE
