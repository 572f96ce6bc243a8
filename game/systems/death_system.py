# game/systems/death_system.py
"""Removal of defeated enemies and room-clear bookkeeping."""
from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from game.game_state import GameState
    from game.world.procgen import Room

log = structlog.get_logger(__name__)


def remove_dead_enemies(gs: GameState, room: Room) -> int:
    """Drop enemies at 0 hp, award score, and mark the room cleared.

    Returns the number of enemies removed.  ``room.cleared`` is only ever
    set here and never reset, so a cleared room stays empty on re-entry.
    """
    dead = [e for e in gs.enemies if e.hp <= 0]
    if not dead:
        return 0
    gs.enemies = [e for e in gs.enemies if e.hp > 0]
    bonus = len(dead) * gs.settings.combat.kill_score
    gs.player.score += bonus
    log.debug("Enemies defeated", count=len(dead), score=gs.player.score)
    if not gs.enemies and not room.cleared:
        room.cleared = True
        log.info("Room cleared", room_id=room.id)
    return len(dead)
