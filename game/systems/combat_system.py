# game/systems/combat_system.py
"""
Handles shooting, the room-wide special attack, projectile resolution and
damage to the player.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional, Tuple

import structlog

from game.constants import FRAME_MS, TILE_SIZE, EnemyState, GameMode
from game.entities.components import Enemy, Projectile, Shockwave
from game.systems.movement_system import Mover, blocks_point, try_move
from utils.helpers import distance, normalize, rects_overlap

if TYPE_CHECKING:
    from game.game_state import GameState
    from game.world.procgen import Room

log = structlog.get_logger(__name__)

ENEMY_HIT_COLOR = "#c0392b"
SHOCKWAVE_COLOR = "#8e44ad"
PLAYER_HIT_COLOR = "#ff0000"


def nearest_enemy(gs: GameState, radius: float) -> Optional[Enemy]:
    """Closest living enemy whose centre lies within ``radius`` of the player."""
    px, py = gs.player.center
    best: Optional[Enemy] = None
    best_dist = radius
    for enemy in gs.enemies:
        if not enemy.alive:
            continue
        ex, ey = enemy.center
        d = distance(px, py, ex, ey)
        if d <= best_dist:
            best, best_dist = enemy, d
    return best


def aim_direction(gs: GameState) -> Tuple[float, float]:
    """Unit vector for the next shot: auto-aim, else facing, else right."""
    target = nearest_enemy(gs, gs.settings.combat.auto_aim_radius)
    if target is not None:
        px, py = gs.player.center
        ex, ey = target.center
        dx, dy = normalize(ex - px, ey - py)
        if dx or dy:
            return dx, dy
    fx, fy = normalize(*gs.player.facing)
    if fx == 0 and fy == 0:
        return 1.0, 0.0
    return fx, fy


def fire_projectile(gs: GameState) -> bool:
    """Spawn a projectile if the fire cooldown has run out.

    The cooldown is a whole number of ticks, ``round(fire_rate_ms / FRAME_MS)``,
    so a held trigger fires every 24 ticks for the runner and every 36 for
    the tank.  Counting down a fractional millisecond budget instead would
    give 25 and 37.
    """
    player = gs.player
    if player.cooldown > 0:
        return False
    cfg = gs.settings.combat
    dx, dy = aim_direction(gs)
    cx, cy = player.center
    gs.projectiles.append(
        Projectile(
            x=cx,
            y=cy,
            vx=dx * cfg.projectile_speed,
            vy=dy * cfg.projectile_speed,
            life=cfg.projectile_life,
        )
    )
    player.cooldown = round(player.fire_rate_ms / FRAME_MS)
    log.debug("Projectile fired", direction=(round(dx, 3), round(dy, 3)), cooldown=player.cooldown)
    return True


def trigger_special(gs: GameState) -> bool:
    """Spend the special resource to damage and stun every enemy in the room.

    Nothing happens (and nothing is spent) while on cooldown or when the pool
    holds less than the cost.
    """
    player = gs.player
    cfg = gs.settings.combat
    if player.special_cooldown > 0 or player.mp < cfg.special_cost:
        return False
    player.mp = max(0, player.mp - cfg.special_cost)
    player.special_cooldown = cfg.special_cooldown_ticks
    cx, cy = player.center
    gs.shockwaves.append(Shockwave(x=cx, y=cy))
    hit = 0
    for enemy in gs.enemies:
        if not enemy.alive:
            continue
        enemy.hp = max(0, enemy.hp - cfg.special_damage)
        enemy.state = EnemyState.STUNNED
        enemy.timer = cfg.special_stun_ticks
        gs.create_particles(enemy.x, enemy.y, SHOCKWAVE_COLOR)
        hit += 1
    log.info("Special attack triggered", enemies_hit=hit, mp_left=player.mp)
    return True


def tick_cooldowns(gs: GameState) -> None:
    player = gs.player
    if player.cooldown > 0:
        player.cooldown -= 1
    if player.special_cooldown > 0:
        player.special_cooldown -= 1


def hit_enemy(gs: GameState, enemy: Enemy, damage: int) -> None:
    enemy.hp = max(0, enemy.hp - damage)
    enemy.state = EnemyState.STUNNED
    enemy.timer = gs.settings.combat.projectile_stun_ticks
    gs.create_particles(enemy.x, enemy.y, ENEMY_HIT_COLOR)


def update_projectiles(gs: GameState, room: Room) -> None:
    """Advance projectiles; each one expires on a wall or its first hit."""
    damage = gs.player.damage
    for proj in gs.projectiles:
        proj.x += proj.vx
        proj.y += proj.vy
        proj.life -= 1
        if blocks_point(room, proj.x, proj.y):
            proj.life = 0
            continue
        half = proj.size / 2
        for enemy in gs.enemies:
            if not enemy.alive:
                continue
            if rects_overlap(
                proj.x - half, proj.y - half, proj.size, proj.size,
                enemy.x, enemy.y, enemy.size, enemy.size,
            ):
                hit_enemy(gs, enemy, damage)
                proj.life = 0
                break
    gs.projectiles = [p for p in gs.projectiles if p.life > 0]


def knock_back(entity: Mover, dx: float, dy: float, room: Room) -> None:
    """Push ``entity`` by ``(dx, dy)`` in steps of at most half a tile.

    Collision is only tested at each step's destination, so a step must stay
    shorter than a tile or the push could skip over a blocking tile.  An axis
    stops for good at its first blocked step.
    """
    steps = max(1, math.ceil(max(abs(dx), abs(dy)) / (TILE_SIZE // 2)))
    step_x, step_y = dx / steps, dy / steps
    for _ in range(steps):
        moved_x, moved_y = try_move(entity, step_x, step_y, room)
        if not moved_x:
            step_x = 0.0
        if not moved_y:
            step_y = 0.0
        if not step_x and not step_y:
            break


def damage_player(gs: GameState, amount: int = 1) -> None:
    """Apply a hit to the player: hp loss, knockback, and game over at zero."""
    player = gs.player
    if not player.alive:
        return
    player.hp = max(0, player.hp - amount)
    gs.create_particles(player.x, player.y, PLAYER_HIT_COLOR)
    room = gs.current_room
    if room is not None:
        knockback = gs.settings.combat.knockback
        fx, fy = player.facing
        knock_back(player, -fx * knockback, -fy * knockback, room)
    log.info("Player damaged", hp=player.hp, max_hp=player.max_hp)
    if player.hp == 0:
        gs.high_scores.submit(player.score)
        gs.modes.transition(GameMode.GAME_OVER, reason="hp depleted")
        gs.add_message("You were overwhelmed.")
