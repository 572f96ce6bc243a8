# game/world/room_map.py
"""Tile grid for a single room and the generator that fills it."""
from __future__ import annotations

from collections import deque
from typing import Collection, List, Optional, Tuple

import numpy as np
import structlog

from game.constants import BLOCKING_TILES, Direction, TileKind
from game_rng import SeededRNG

log = structlog.get_logger(__name__)

BOSS_CORRIDOR_START = 2  # tiles past the centre before the corridor widens
BOSS_CORRIDOR_HALF_WIDTH = 1


class RoomLayout:
    """A ``height x width`` grid of :class:`TileKind` ids plus the reachable set.

    ``reachable`` lists the floor tiles connected to the centre tile, in
    flood-fill order, as ``(x, y)`` pairs.  It is the only pool items may be
    placed on.
    """

    def __init__(self, width: int, height: int):
        if width < 3 or height < 3:
            log.error("Invalid room dimensions", width=width, height=height)
            raise ValueError("Room width and height must be at least 3 tiles.")
        self._width = width
        self._height = height
        self.tiles: np.ndarray = np.full(
            (height, width), fill_value=TileKind.FLOOR, dtype=np.uint8, order="C"
        )
        self.reachable: List[Tuple[int, int]] = []
        self.reachable_mask: np.ndarray = np.zeros((height, width), dtype=bool)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def center(self) -> Tuple[int, int]:
        return self._width // 2, self._height // 2

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def tile_at(self, x: int, y: int) -> TileKind:
        return TileKind(int(self.tiles[y, x]))

    def is_blocking(self, x: int, y: int) -> bool:
        """Out-of-bounds tiles block, as do walls and furniture."""
        if not self.in_bounds(x, y):
            return True
        return self.tile_at(x, y) in BLOCKING_TILES

    def door_tile(self, direction: Direction) -> Tuple[int, int]:
        """Wall tile that holds the door for ``direction``."""
        mid_x, mid_y = self.center
        if direction is Direction.TOP:
            return mid_x, 0
        if direction is Direction.BOTTOM:
            return mid_x, self._height - 1
        if direction is Direction.LEFT:
            return 0, mid_y
        return self._width - 1, mid_y

    def is_reachable(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and bool(self.reachable_mask[y, x])

    def count(self, kind: TileKind) -> int:
        return int(np.count_nonzero(self.tiles == kind))


def _on_door_axis(x: int, y: int, mid_x: int, mid_y: int, direction: Direction) -> bool:
    if direction is Direction.TOP:
        return x == mid_x and y <= mid_y
    if direction is Direction.BOTTOM:
        return x == mid_x and y >= mid_y
    if direction is Direction.LEFT:
        return y == mid_y and x <= mid_x
    return y == mid_y and x >= mid_x


def _in_boss_corridor(x: int, y: int, mid_x: int, mid_y: int, direction: Direction) -> bool:
    start = BOSS_CORRIDOR_START
    half = BOSS_CORRIDOR_HALF_WIDTH
    if direction is Direction.TOP:
        return abs(x - mid_x) <= half and y <= mid_y - start
    if direction is Direction.BOTTOM:
        return abs(x - mid_x) <= half and y >= mid_y + start
    if direction is Direction.LEFT:
        return abs(y - mid_y) <= half and x <= mid_x - start
    return abs(y - mid_y) <= half and x >= mid_x + start


def is_protected(
    x: int,
    y: int,
    layout: RoomLayout,
    doors: Collection[Direction],
    boss_exit: Optional[Direction],
    safe_radius: int,
) -> bool:
    """Tiles that must never hold furniture."""
    mid_x, mid_y = layout.center
    if abs(x - mid_x) <= safe_radius and abs(y - mid_y) <= safe_radius:
        return True
    for direction in doors:
        if _on_door_axis(x, y, mid_x, mid_y, direction):
            return True
    if boss_exit is not None:
        if _on_door_axis(x, y, mid_x, mid_y, boss_exit):
            return True
        if _in_boss_corridor(x, y, mid_x, mid_y, boss_exit):
            return True
    return False


def flood_fill_reachable(layout: RoomLayout) -> List[Tuple[int, int]]:
    """Breadth-first fill from the centre through floor tiles only."""
    start_x, start_y = layout.center
    layout.reachable_mask[:] = False
    if layout.tiles[start_y, start_x] != TileKind.FLOOR:
        log.warning("Room centre is not floor; nothing reachable", center=(start_x, start_y))
        layout.reachable = []
        return layout.reachable

    queue = deque([(start_x, start_y)])
    layout.reachable_mask[start_y, start_x] = True
    order: List[Tuple[int, int]] = []
    while queue:
        cx, cy = queue.popleft()
        order.append((cx, cy))
        for dx, dy in ((0, -1), (1, 0), (0, 1), (-1, 0)):
            nx, ny = cx + dx, cy + dy
            if (
                layout.in_bounds(nx, ny)
                and not layout.reachable_mask[ny, nx]
                and layout.tiles[ny, nx] == TileKind.FLOOR
            ):
                layout.reachable_mask[ny, nx] = True
                queue.append((nx, ny))
    layout.reachable = order
    return order


def generate_room_layout(
    width: int,
    height: int,
    seed: int,
    doors: Collection[Direction] = (),
    boss_exit: Optional[Direction] = None,
    furniture_chance: float = 0.15,
    safe_radius: int = 2,
) -> RoomLayout:
    """Build one room's tile grid and its reachable floor set.

    One draw is consumed per interior tile whether or not the tile is
    protected, so the furniture pattern for a seed does not shift when the
    door set changes.
    """
    rng = SeededRNG(seed)
    layout = RoomLayout(width, height)
    layout.tiles[0, :] = TileKind.WALL
    layout.tiles[height - 1, :] = TileKind.WALL
    layout.tiles[:, 0] = TileKind.WALL
    layout.tiles[:, width - 1] = TileKind.WALL

    for y in range(1, height - 1):
        for x in range(1, width - 1):
            roll = rng.get_float()
            if roll < furniture_chance and not is_protected(
                x, y, layout, doors, boss_exit, safe_radius
            ):
                layout.tiles[y, x] = TileKind.FURNITURE

    flood_fill_reachable(layout)
    log.debug(
        "Room layout generated",
        size=(width, height),
        seed=seed,
        furniture=layout.count(TileKind.FURNITURE),
        reachable=len(layout.reachable),
        boss_exit=boss_exit.value if boss_exit else None,
    )
    return layout
