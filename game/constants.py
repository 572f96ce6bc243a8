from enum import Enum, IntEnum


class TileKind(IntEnum):
    """Tile identifiers stored in a room layout grid."""

    FLOOR = 0
    WALL = 1
    FURNITURE = 2  # Blocks like a wall, drawn as an obstacle


BLOCKING_TILES = frozenset({TileKind.WALL, TileKind.FURNITURE})


class Direction(str, Enum):
    """Cardinal door directions, in boss-exit priority order."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def offset(self) -> tuple[int, int]:
        return _OFFSETS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OFFSETS = {
    Direction.TOP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.BOTTOM: (0, 1),
    Direction.LEFT: (-1, 0),
}
_OPPOSITES = {
    Direction.TOP: Direction.BOTTOM,
    Direction.RIGHT: Direction.LEFT,
    Direction.BOTTOM: Direction.TOP,
    Direction.LEFT: Direction.RIGHT,
}
DIRECTIONS: tuple[Direction, ...] = tuple(Direction)


class RoomType(str, Enum):
    NORMAL = "normal"
    BOSS = "boss"


class ItemKind(str, Enum):
    """Pickup types. Values double as special-token names on world nodes."""

    PIZZA = "pizza"  # +1 hp, capped
    SODA = "soda"  # +1 mp, capped
    PIZZA_BOX = "pizza_box"  # +1 max hp, refill 1
    SODA_CARRIER = "soda_carrier"  # +1 max mp, refill 1
    SNEAKERS = "sneakers"  # permanent speed bonus
    HOT_SAUCE = "hot_sauce"  # permanent damage bonus
    KEY = "key"
    FILE = "file"

    @property
    def is_special(self) -> bool:
        return self in SPECIAL_ITEMS


SPECIAL_ITEMS = frozenset(
    {ItemKind.SNEAKERS, ItemKind.HOT_SAUCE, ItemKind.KEY, ItemKind.FILE}
)


class EnemyState(str, Enum):
    CHASE = "CHASE"
    PREPARE = "PREPARE"
    ATTACK = "ATTACK"
    STUNNED = "STUNNED"


class GameMode(str, Enum):
    """Core-relevant game modes. Menus live in the presentation layer."""

    IDLE = "IDLE"  # no session
    MAP = "MAP"  # choosing a building on the overworld
    PLAYING = "PLAYING"
    MESSAGE = "MESSAGE"  # one-off narrative after the first building
    ENDING = "ENDING"  # final narrative pages
    VICTORY = "VICTORY"  # ending finished
    GAME_OVER = "GAME_OVER"


class Ending(str, Enum):
    """Terminal narratives keyed by (hidden cleared, all files collected)."""

    ESCAPE = "escape"
    TRUTH = "truth"
    SECRET_ROOM = "secret_room"
    FULL_STORY = "full_story"


# --- Geometry (pixels) ---
TILE_SIZE = 48
PLAYER_SIZE = 32
ENEMY_SIZE = 32
PROJECTILE_SIZE = 10
FPS = 60
FRAME_MS = 1000 / FPS

# --- World ---
THEMES: tuple[str, ...] = (
    "bathroom",
    "ballroom",
    "living_room",
    "warehouse",
    "dungeon",
    "garden",
)
ROOM_VARIANTS: tuple[tuple[int, int], ...] = ((15, 11), (11, 9), (19, 13), (15, 15))
BUILDING_SEED_STRIDE = 777
ITEM_SEED_OFFSET = 999
ROOM_SEED_RANGE = 1_000_000
DOOR_STYLE_COUNT = 5
HIGH_SCORE_KEY = "escape_island_highscore"
