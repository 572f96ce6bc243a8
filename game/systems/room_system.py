# game/systems/room_system.py
"""Room setup and door transitions."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, NamedTuple, Optional

import structlog

from game.constants import ENEMY_SIZE, PLAYER_SIZE, TILE_SIZE, Direction
from game.entities.components import Enemy
from game.systems.movement_system import blocks_entity
from game.world.procgen import ensure_layout
from utils.helpers import distance

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from game.game_state import GameState
    from game.world.procgen import Room

log = structlog.get_logger(__name__)

ARRIVAL_OFFSET_TILES = 1.5


class DoorHit(NamedTuple):
    direction: Direction
    boss: bool = False


def check_door_collision(room: Room, px: float, py: float) -> Optional[DoorHit]:
    """Door the player centre ``(px, py)`` is standing in, if any."""
    last_x = (room.width - 1) * TILE_SIZE
    last_y = (room.height - 1) * TILE_SIZE
    near = {
        Direction.TOP: py < TILE_SIZE,
        Direction.BOTTOM: py > last_y,
        Direction.LEFT: px < TILE_SIZE,
        Direction.RIGHT: px > last_x,
    }
    for direction in (Direction.TOP, Direction.BOTTOM, Direction.LEFT, Direction.RIGHT):
        if room.doors[direction] is not None and near[direction]:
            return DoorHit(direction)

    if room.boss_exit is not None and near[room.boss_exit]:
        mid_x = room.width * TILE_SIZE / 2
        mid_y = room.height * TILE_SIZE / 2
        if room.boss_exit in (Direction.TOP, Direction.BOTTOM):
            aligned = abs(px - mid_x) < TILE_SIZE
        else:
            aligned = abs(py - mid_y) < TILE_SIZE
        if aligned:
            return DoorHit(room.boss_exit, boss=True)
    return None


def arrival_position(room: Room, entered_through: Direction) -> tuple[float, float]:
    """Where the player lands after walking through ``entered_through``.

    The player is placed 1.5 tiles in from the opposite wall so the reverse
    door does not trigger on the next tick.
    """
    offset = (TILE_SIZE - PLAYER_SIZE) / 2
    mid_x = (room.width // 2) * TILE_SIZE + offset
    mid_y = (room.height // 2) * TILE_SIZE + offset
    if entered_through is Direction.TOP:
        return mid_x, (room.height - 2) * TILE_SIZE + offset
    if entered_through is Direction.BOTTOM:
        return mid_x, ARRIVAL_OFFSET_TILES * TILE_SIZE
    if entered_through is Direction.LEFT:
        return (room.width - 2) * TILE_SIZE + offset, mid_y
    return ARRIVAL_OFFSET_TILES * TILE_SIZE, mid_y


def is_enemy_exempt(gs: GameState, room: Room) -> bool:
    """Start room of a difficulty-0 building and boss rooms never spawn."""
    building = gs.building
    if room.is_boss:
        return True
    return building is not None and room.id == building.start_room_id and gs.difficulty == 0


def _spawn_point(gs: GameState, room: Room) -> tuple[float, float]:
    cfg = gs.settings.enemies
    rng = gs.rng_instance
    px, py = gs.player.x, gs.player.y
    for _ in range(cfg.spawn_attempts):
        ex = rng.get_int(2, room.width - 2) * TILE_SIZE
        ey = rng.get_int(2, room.height - 2) * TILE_SIZE
        if blocks_entity(room, ex, ey, ENEMY_SIZE):
            continue
        if distance(ex, ey, px, py) > cfg.spawn_min_distance:
            return float(ex), float(ey)

    # Jitter failed; pick from reachable tiles far enough away
    layout = ensure_layout(room)
    tiles = [(tx * TILE_SIZE, ty * TILE_SIZE) for tx, ty in layout.reachable]
    far = [t for t in tiles if distance(t[0], t[1], px, py) > cfg.spawn_min_distance]
    if far:
        ex, ey = rng.choice(far)
    else:
        ex, ey = max(tiles, key=lambda t: distance(t[0], t[1], px, py))
    log.debug("Enemy spawn fell back to reachable tiles", room_id=room.id, pos=(ex, ey))
    return float(ex), float(ey)


def spawn_enemies(gs: GameState, room: Room) -> None:
    cfg = gs.settings.enemies
    scale = gs.settings.difficulty
    difficulty = gs.difficulty
    count = math.floor(cfg.base_count + difficulty * scale.enemy_count_multiplier)
    hp = cfg.base_hp + difficulty
    speed = (cfg.base_speed + difficulty * cfg.speed_per_level) * scale.enemy_speed_base
    for _ in range(count):
        ex, ey = _spawn_point(gs, room)
        gs.enemies.append(Enemy(x=ex, y=ey, hp=hp, max_hp=hp, speed=speed))
    log.debug("Enemies spawned", room_id=room.id, count=count, hp=hp, speed=speed)


def setup_room(gs: GameState, room_id: int) -> None:
    """Load ``room_id`` as the active room.

    The layout is generated once and cached on the room; the explored,
    cleared and item state live on the room too and are reused on re-entry.
    """
    building = gs.building
    if building is None:
        raise ValueError("setup_room called without an active building")
    room = building.room(room_id)
    gs.active_room_id = room_id
    ensure_layout(room, gs.settings.generation)
    room.explored = True
    room.items = gs.ledger.filter_items(room.items)
    gs.items = list(room.items)
    gs.enemies = []
    if not room.cleared and not is_enemy_exempt(gs, room):
        spawn_enemies(gs, room)
    log.info(
        "Room set up",
        building_id=building.id,
        room_id=room_id,
        enemies=len(gs.enemies),
        items=len(gs.items),
        cleared=room.cleared,
    )


def transition_room(gs: GameState, direction: Direction) -> bool:
    """Walk through the ``direction`` door of the active room.

    A door with no linked room is ignored and ``False`` is returned.
    """
    room = gs.current_room
    if room is None:
        return False
    next_room_id = room.doors[direction]
    if next_room_id is None:
        log.debug("Ignoring transition through missing door", direction=direction.value)
        return False
    next_room = gs.building.room(next_room_id)
    gs.player.x, gs.player.y = arrival_position(next_room, direction)
    gs.clear_transients()
    setup_room(gs, next_room_id)
    return True
