# game/world/procgen.py
"""Building generation: a grid-embedded tree of rooms with seeded loot.

Every random decision here comes from :class:`game_rng.SeededRNG` streams
derived from the session root seed:

* building stream: ``root + building_id * 777`` (room seeds, sizes, door
  styles, tree placement, special-item rooms and tiles)
* room layout: ``room.seed``
* room consumables: ``room.seed + 999``
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence, Tuple

import structlog

from game.constants import (
    BUILDING_SEED_STRIDE,
    DIRECTIONS,
    DOOR_STYLE_COUNT,
    ITEM_SEED_OFFSET,
    ROOM_SEED_RANGE,
    ROOM_VARIANTS,
    TILE_SIZE,
    Direction,
    ItemKind,
    RoomType,
)
from game.entities.components import Item
from game.settings import DifficultyScale, GenerationSettings
from game.world.room_map import RoomLayout, generate_room_layout
from game_rng import SeededRNG

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from game.items.ledger import CollectionLedger

log = structlog.get_logger(__name__)

ITEM_SIZE = 24
# (upper bound, kind) thresholds for the single consumable draw
CONSUMABLE_TABLE: Tuple[Tuple[float, ItemKind], ...] = (
    (0.4, ItemKind.PIZZA),
    (0.8, ItemKind.SODA),
    (0.9, ItemKind.PIZZA_BOX),
    (1.0, ItemKind.SODA_CARRIER),
)


@dataclass
class Room:
    id: int
    grid_x: int
    grid_y: int
    width: int
    height: int
    seed: int
    doors: Dict[Direction, Optional[int]] = field(
        default_factory=lambda: {d: None for d in DIRECTIONS}
    )
    door_styles: Dict[Direction, int] = field(default_factory=dict)
    type: RoomType = RoomType.NORMAL
    boss_exit: Optional[Direction] = None
    cleared: bool = False
    explored: bool = False
    layout: Optional[RoomLayout] = field(default=None, compare=False, repr=False)
    items: List[Item] = field(default_factory=list)

    @property
    def is_boss(self) -> bool:
        return self.type is RoomType.BOSS

    @property
    def active_doors(self) -> List[Direction]:
        return [d for d in DIRECTIONS if self.doors[d] is not None]

    def center_tile(self) -> Tuple[int, int]:
        return self.width // 2, self.height // 2


@dataclass
class Building:
    id: int
    theme: str
    difficulty: int
    seed: int
    rooms: List[Room]
    start_room_id: int = 0

    def room(self, room_id: int) -> Room:
        return self.rooms[room_id]

    @property
    def boss_room(self) -> Room:
        return next(r for r in self.rooms if r.is_boss)

    def neighbors(self, room_id: int) -> Iterator[int]:
        for neighbor in self.rooms[room_id].doors.values():
            if neighbor is not None:
                yield neighbor

    def signature(self) -> tuple:
        """Plain-data view of the room graph and loot, for equality checks."""
        return tuple(
            (
                r.id,
                (r.grid_x, r.grid_y),
                (r.width, r.height),
                r.seed,
                tuple((d.value, r.doors[d]) for d in DIRECTIONS),
                r.type.value,
                r.boss_exit.value if r.boss_exit else None,
                tuple((i.id, i.kind.value, i.x, i.y) for i in r.items),
            )
            for r in self.rooms
        )


def building_seed(root_seed: int, building_id: int) -> int:
    return root_seed + building_id * BUILDING_SEED_STRIDE


def room_count(difficulty: int, scale: DifficultyScale | None = None) -> int:
    scale = scale or DifficultyScale()
    return max(2, int(4 + difficulty * scale.rooms_multiplier))


def boss_exit_direction(doors: Dict[Direction, Optional[int]]) -> Optional[Direction]:
    """First of top/right/bottom/left not taken by a normal door."""
    for direction in DIRECTIONS:
        if doors[direction] is None:
            return direction
    return None


def ensure_layout(room: Room, generation: GenerationSettings | None = None) -> RoomLayout:
    """Return the room's layout, generating and caching it on first use."""
    if room.layout is None:
        generation = generation or GenerationSettings()
        room.layout = generate_room_layout(
            room.width,
            room.height,
            room.seed,
            doors=room.active_doors,
            boss_exit=room.boss_exit,
            furniture_chance=generation.furniture_chance,
            safe_radius=generation.center_safe_radius,
        )
    return room.layout


def item_id_for(building_id: int, room_id: int, slot: int) -> int:
    return (building_id + 1) * 100_000 + room_id * 100 + slot


def _tile_to_item_pos(tx: int, ty: int) -> Tuple[float, float]:
    offset = (TILE_SIZE - ITEM_SIZE) / 2
    return tx * TILE_SIZE + offset, ty * TILE_SIZE + offset


class _PlacementPool:
    """Free reachable tiles per room; a tile is handed out at most once."""

    def __init__(self, generation: GenerationSettings):
        self._generation = generation
        self._free: Dict[int, List[Tuple[int, int]]] = {}
        self._slots: Dict[int, int] = {}

    def take(self, room: Room, rng: SeededRNG) -> Tuple[int, int]:
        free = self._free.get(room.id)
        if free is None:
            layout = ensure_layout(room, self._generation)
            center = room.center_tile()
            # The centre is the spawn tile; keep it clear while others remain.
            free = [t for t in layout.reachable if t != center]
            self._free[room.id] = free
        if not free:
            log.warning("No free reachable tile; using room centre", room_id=room.id)
            return room.center_tile()
        return rng.pop_random(free)

    def next_slot(self, room_id: int) -> int:
        slot = self._slots.get(room_id, 0)
        self._slots[room_id] = slot + 1
        return slot


def _create_rooms(rng: SeededRNG, count: int) -> List[Room]:
    rooms: List[Room] = []
    for i in range(count):
        seed = int(rng.get_float() * ROOM_SEED_RANGE)
        width, height = ROOM_VARIANTS[rng.get_int(0, len(ROOM_VARIANTS) - 1)]
        styles = {
            d: rng.get_int(1, DOOR_STYLE_COUNT)
            for d in (Direction.TOP, Direction.BOTTOM, Direction.LEFT, Direction.RIGHT)
        }
        rooms.append(Room(id=i, grid_x=0, grid_y=0, width=width, height=height, seed=seed, door_styles=styles))
    return rooms


def _link(parent: Room, child: Room, direction: Direction, occupied: Dict[Tuple[int, int], int]) -> None:
    dx, dy = direction.offset
    child.grid_x = parent.grid_x + dx
    child.grid_y = parent.grid_y + dy
    parent.doors[direction] = child.id
    child.doors[direction.opposite] = parent.id
    occupied[(child.grid_x, child.grid_y)] = child.id


def _free_directions(room: Room, occupied: Dict[Tuple[int, int], int]) -> List[Direction]:
    return [
        d
        for d in DIRECTIONS
        if (room.grid_x + d.offset[0], room.grid_y + d.offset[1]) not in occupied
    ]


def _place_rooms(rooms: List[Room], rng: SeededRNG, attempts: int) -> None:
    occupied: Dict[Tuple[int, int], int] = {(0, 0): 0}
    for i in range(1, len(rooms)):
        child = rooms[i]
        placed = False
        for _ in range(attempts):
            parent = rooms[rng.get_int(0, i - 1)]
            valid = _free_directions(parent, occupied)
            if valid:
                _link(parent, child, valid[rng.get_int(0, len(valid) - 1)], occupied)
                placed = True
                break
        if placed:
            continue
        log.warning("Random room placement exhausted; scanning", room_id=i)
        for parent in rooms[:i]:
            valid = _free_directions(parent, occupied)
            if valid:
                _link(parent, child, valid[0], occupied)
                break


def _place_special_items(
    building_id: int,
    rooms: List[Room],
    tokens: Sequence[ItemKind],
    rng: SeededRNG,
    pool: _PlacementPool,
) -> None:
    eligible = [r for r in rooms if r.id != 0 and not r.is_boss]
    if not eligible:
        eligible = [r for r in rooms if not r.is_boss]
    for kind in tokens:
        room = rng.choice(eligible)
        tx, ty = pool.take(room, rng)
        x, y = _tile_to_item_pos(tx, ty)
        room.items.append(
            Item(item_id_for(building_id, room.id, pool.next_slot(room.id)), kind, x, y, ITEM_SIZE, ITEM_SIZE)
        )


def _place_consumables(
    building_id: int,
    rooms: List[Room],
    pool: _PlacementPool,
    chance: float,
) -> None:
    for room in rooms:
        if room.is_boss:
            continue
        rng = SeededRNG(room.seed + ITEM_SEED_OFFSET)
        if not rng.chance(chance):
            continue
        kind = rng.threshold_choice(CONSUMABLE_TABLE)
        tx, ty = pool.take(room, rng)
        x, y = _tile_to_item_pos(tx, ty)
        room.items.append(
            Item(item_id_for(building_id, room.id, pool.next_slot(room.id)), kind, x, y, ITEM_SIZE, ITEM_SIZE)
        )


def generate_building(
    building_id: int,
    difficulty: int,
    theme: str,
    root_seed: int,
    special_items: Sequence[ItemKind] = (),
    ledger: "CollectionLedger | None" = None,
    scale: DifficultyScale | None = None,
    generation: GenerationSettings | None = None,
) -> Building:
    """Generate the room graph and loot for one building.

    The result depends only on the arguments.  When a ``ledger`` is given,
    items it already records are left out so regeneration can never bring
    a consumed pickup back.
    """
    generation = generation or GenerationSettings()
    seed = building_seed(root_seed, building_id)
    rng = SeededRNG(seed)
    num_rooms = room_count(difficulty, scale)
    log.info(
        "Generating building",
        building_id=building_id,
        difficulty=difficulty,
        theme=theme,
        seed=seed,
        rooms=num_rooms,
    )

    rooms = _create_rooms(rng, num_rooms)
    _place_rooms(rooms, rng, generation.placement_attempts)

    boss = rooms[-1]
    boss.type = RoomType.BOSS
    boss.boss_exit = boss_exit_direction(boss.doors)

    pool = _PlacementPool(generation)
    _place_special_items(building_id, rooms, special_items, rng, pool)
    _place_consumables(building_id, rooms, pool, generation.consumable_chance)

    if ledger is not None:
        for room in rooms:
            room.items = ledger.filter_items(room.items)

    building = Building(id=building_id, theme=theme, difficulty=difficulty, seed=seed, rooms=rooms)
    log.info(
        "Building generated",
        building_id=building_id,
        boss_room=boss.id,
        boss_exit=boss.boss_exit.value if boss.boss_exit else None,
        items=sum(len(r.items) for r in rooms),
    )
    return building
