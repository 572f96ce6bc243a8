"""Movement helper utilities.

Positions are pixel coordinates of an entity's top-left corner; collision is
tested at the entity's centre point against the active room's tile grid.
Each axis is resolved on its own so movers slide along walls instead of
sticking to them.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Protocol, Tuple

from game.constants import TILE_SIZE
from game.world.procgen import ensure_layout

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from game.game_state import GameState
    from game.world.procgen import Room


class Mover(Protocol):
    x: float
    y: float
    size: int


def is_passable_door(room: Room, gx: int, gy: int) -> bool:
    """Whether wall tile ``(gx, gy)`` is an open door of ``room``."""
    layout = ensure_layout(room)
    for direction in room.active_doors:
        if layout.door_tile(direction) == (gx, gy):
            return True
    if room.boss_exit is not None and layout.door_tile(room.boss_exit) == (gx, gy):
        return True
    return False


def blocks_point(room: Room, px: float, py: float) -> bool:
    """True if the pixel ``(px, py)`` lies on a blocking tile of ``room``."""
    gx = math.floor(px / TILE_SIZE)
    gy = math.floor(py / TILE_SIZE)
    layout = ensure_layout(room)
    if not layout.in_bounds(gx, gy):
        return True
    if not layout.is_blocking(gx, gy):
        return False
    return not is_passable_door(room, gx, gy)


def blocks_entity(room: Room, x: float, y: float, size: int) -> bool:
    return blocks_point(room, x + size / 2, y + size / 2)


def try_move(entity: Mover, dx: float, dy: float, room: Room) -> Tuple[bool, bool]:
    """Attempt to move ``entity`` by ``(dx, dy)``.

    Returns
    -------
    tuple of bool
        Whether the x and the y component were applied.
    """
    moved_x = moved_y = False
    if dx and not blocks_entity(room, entity.x + dx, entity.y, entity.size):
        entity.x += dx
        moved_x = True
    if dy and not blocks_entity(room, entity.x, entity.y + dy, entity.size):
        entity.y += dy
        moved_y = True
    return moved_x, moved_y


def move_player(gs: GameState, room: Room) -> None:
    """Apply the current input vector to the player."""
    player = gs.player
    ix, iy = gs.input.move_x, gs.input.move_y
    try_move(player, ix * player.speed, iy * player.speed, room)
    # Facing only changes on real input so a still player keeps aiming
    if ix != 0 or iy != 0:
        player.facing = (ix, iy)
