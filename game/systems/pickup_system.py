# game/systems/pickup_system.py
"""Item pickup: effects, ledger bookkeeping and key-driven unlocks."""
from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.constants import ItemKind
from game.world.world_map import unlock_hidden
from utils.helpers import rects_overlap

if TYPE_CHECKING:
    from game.entities.components import Item, PlayerState
    from game.game_state import GameState
    from game.settings import PickupSettings
    from game.world.procgen import Room

log = structlog.get_logger(__name__)

PICKUP_COLORS = {
    ItemKind.PIZZA: "#f39c12",
    ItemKind.PIZZA_BOX: "#d35400",
    ItemKind.SODA: "#8e44ad",
    ItemKind.SODA_CARRIER: "#9b59b6",
    ItemKind.SNEAKERS: "#1abc9c",
    ItemKind.HOT_SAUCE: "#e74c3c",
    ItemKind.KEY: "#f1c40f",
    ItemKind.FILE: "#ecf0f1",
}


def apply_item_effect(player: PlayerState, kind: ItemKind, pickups: PickupSettings) -> bool:
    """Apply ``kind`` to ``player``.

    Returns ``False`` when the item has no effect (a capped pool is already
    full), in which case it stays on the floor.
    """
    if kind is ItemKind.PIZZA:
        if player.hp >= player.max_hp:
            return False
        player.hp = min(player.hp + 1, player.max_hp)
    elif kind is ItemKind.SODA:
        if player.mp >= player.max_mp:
            return False
        player.mp = min(player.mp + 1, player.max_mp)
    elif kind is ItemKind.PIZZA_BOX:
        player.max_hp += 1
        player.hp = min(player.hp + 1, player.max_hp)
    elif kind is ItemKind.SODA_CARRIER:
        player.max_mp += 1
        player.mp = min(player.mp + 1, player.max_mp)
    elif kind is ItemKind.SNEAKERS:
        player.speed += pickups.sneakers_speed_bonus
    elif kind is ItemKind.HOT_SAUCE:
        player.damage += pickups.hot_sauce_damage_bonus
    elif kind is ItemKind.KEY:
        player.keys += 1
    elif kind is ItemKind.FILE:
        player.files += 1
    else:  # pragma: no cover - exhaustive over ItemKind
        raise ValueError(f"Unhandled item kind: {kind}")
    return True


def consume_item(gs: GameState, room: Room, item: Item) -> bool:
    """Apply ``item`` and remove it for the rest of the session.

    Items already in the ledger are dropped without applying their effect.
    """
    if item.id in gs.ledger:
        room.items = [i for i in room.items if i.id != item.id]
        gs.items = [i for i in gs.items if i.id != item.id]
        return False
    if not apply_item_effect(gs.player, item.kind, gs.settings.pickups):
        return False
    gs.ledger.record(item.id)
    room.items = [i for i in room.items if i.id != item.id]
    gs.items = [i for i in gs.items if i.id != item.id]
    gs.create_particles(item.x, item.y, PICKUP_COLORS[item.kind])
    log.info("Item consumed", item_id=item.id, kind=item.kind.value, room_id=room.id)
    if item.kind is ItemKind.KEY:
        unlock_hidden(gs.world)
        gs.add_message("You found a key. A hidden building appears on the map.")
    elif item.kind is ItemKind.FILE:
        gs.add_message(
            f"File recovered ({gs.player.files}/{gs.settings.world.files_required})."
        )
    return True


def collect_items(gs: GameState, room: Room) -> int:
    """Consume every active item overlapping the player this tick."""
    player = gs.player
    consumed = 0
    for item in list(gs.items):
        if rects_overlap(
            item.x, item.y, item.w, item.h,
            player.x, player.y, player.size, player.size,
        ):
            if consume_item(gs, room, item):
                consumed += 1
    return consumed
