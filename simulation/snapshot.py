"""Read-only views handed to the presentation layer each frame."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple

import numpy as np

from game.constants import DIRECTIONS, GameMode
from game.entities.components import (
    Enemy,
    Item,
    Particle,
    PlayerState,
    Projectile,
    Shockwave,
)

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from game.game_state import GameState


@dataclass(frozen=True)
class RoomView:
    building_id: int
    room_id: int
    theme: str
    width: int
    height: int
    tiles: np.ndarray
    doors: Dict[str, Optional[int]]
    door_styles: Dict[str, int]
    boss_exit: Optional[str]
    is_boss: bool
    cleared: bool


@dataclass(frozen=True)
class MiniMapRoom:
    room_id: int
    grid_x: int
    grid_y: int
    explored: bool
    cleared: bool
    is_boss: bool
    active: bool
    has_items: bool
    neighbors: Tuple[int, ...]


@dataclass(frozen=True)
class FrameSnapshot:
    mode: GameMode
    tick: int
    player: PlayerState
    high_score: int
    room: Optional[RoomView] = None
    enemies: Tuple[Enemy, ...] = ()
    projectiles: Tuple[Projectile, ...] = ()
    items: Tuple[Item, ...] = ()
    particles: Tuple[Particle, ...] = ()
    shockwaves: Tuple[Shockwave, ...] = ()
    minimap: Tuple[MiniMapRoom, ...] = ()
    narrative_page: Optional[str] = None
    messages: Tuple[str, ...] = ()


def _copies(objs) -> tuple:
    return tuple(dataclasses.replace(o) for o in objs)


def build_snapshot(gs: GameState, message_tail: int = 5) -> FrameSnapshot:
    room_view = None
    minimap: Tuple[MiniMapRoom, ...] = ()
    building = gs.building
    room = gs.current_room
    if building is not None and room is not None and room.layout is not None:
        tiles = room.layout.tiles.copy()
        tiles.flags.writeable = False
        room_view = RoomView(
            building_id=building.id,
            room_id=room.id,
            theme=building.theme,
            width=room.width,
            height=room.height,
            tiles=tiles,
            doors={d.value: room.doors[d] for d in DIRECTIONS},
            door_styles={d.value: s for d, s in room.door_styles.items()},
            boss_exit=room.boss_exit.value if room.boss_exit else None,
            is_boss=room.is_boss,
            cleared=room.cleared,
        )
        minimap = tuple(
            MiniMapRoom(
                room_id=r.id,
                grid_x=r.grid_x,
                grid_y=r.grid_y,
                explored=r.explored,
                cleared=r.cleared,
                is_boss=r.is_boss,
                active=r.id == room.id,
                has_items=bool(r.items),
                neighbors=tuple(building.neighbors(r.id)),
            )
            for r in building.rooms
        )
    return FrameSnapshot(
        mode=gs.mode,
        tick=gs.tick_count,
        player=dataclasses.replace(gs.player),
        high_score=gs.high_scores.high_score,
        room=room_view,
        enemies=_copies(gs.enemies),
        projectiles=_copies(gs.projectiles),
        items=tuple(gs.items),
        particles=_copies(gs.particles),
        shockwaves=_copies(gs.shockwaves),
        minimap=minimap,
        narrative_page=gs.narrative.current_page if gs.narrative else None,
        messages=tuple(gs.message_log)[-message_tail:],
    )
