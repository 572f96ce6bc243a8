"""Simulation engine: the call contract the presentation layer talks to.

The engine owns at most one :class:`~game.game_state.GameState` at a time.
All mutation goes through the methods below; the presentation layer reads
:meth:`SimulationEngine.snapshot` and polls :attr:`mode`,
:attr:`is_game_over` and :attr:`current_narrative` to decide what to draw.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Optional

import structlog

from game.constants import FRAME_MS, GameMode
from game.game_state import GameState
from game.persistence import HighScoreKeeper, KeyValueStore, MemoryStore
from game.settings import GameSettings, load_settings
from game.systems import (
    ai_system,
    combat_system,
    death_system,
    effects_system,
    movement_system,
    pickup_system,
    room_system,
)
from game.world.world_map import last_column, unlock_hidden, unlock_next_column
from game_rng import UINT32_MASK
from simulation.narrative import ending_sequence, intro_sequence, select_ending
from simulation.snapshot import FrameSnapshot, build_snapshot
from utils.helpers import clamp
from utils.logging_utils import bind_session

log = structlog.get_logger(__name__)


class SimulationEngine:
    def __init__(
        self,
        settings: GameSettings | None = None,
        store: KeyValueStore | None = None,
        rng_seed: int | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.high_scores = HighScoreKeeper(store or MemoryStore())
        self.rng_seed = rng_seed
        self.state: Optional[GameState] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start_session(self, character_id: str, root_seed: int | None = None) -> GameState:
        """Begin a new run with ``character_id``; the previous run is dropped."""
        if root_seed is None:
            root_seed = int(time.time() * 1000) & UINT32_MASK
        bind_session(uuid.uuid4().hex[:8], root_seed)
        gs = GameState(
            self.settings,
            character_id,
            root_seed,
            rng_seed=self.rng_seed,
            high_scores=self.high_scores,
        )
        gs.modes.transition(GameMode.MAP, reason="session started")
        self.state = gs
        return gs

    def _require_state(self) -> GameState:
        if self.state is None:
            log.error("No active session")
            raise RuntimeError("start_session must be called first")
        return self.state

    def enter_building(self, node_id: int) -> bool:
        gs = self._require_state()
        node = gs.node(node_id)
        if gs.mode is not GameMode.MAP:
            log.warning("Cannot enter building outside the map", mode=gs.mode.value, node_id=node_id)
            return False
        if node.locked:
            log.warning("Building is locked", node_id=node_id)
            return False

        building = gs.get_building(node)
        gs.current_node_id = node.id
        gs.building = building
        gs.clear_transients()
        start_room = building.room(building.start_room_id)
        gs.center_player_in(start_room)
        gs.player.cooldown = 0
        gs.player.special_cooldown = 0
        room_system.setup_room(gs, building.start_room_id)
        gs.modes.transition(GameMode.PLAYING, reason=f"entered building {node.id}")
        return True

    def complete_level(self) -> None:
        """Finish the current building: clear it, unlock onward, pick what's next."""
        gs = self._require_state()
        node = gs.current_node
        if node is None or gs.mode is not GameMode.PLAYING:
            log.warning("complete_level called outside a building", mode=gs.mode.value)
            return
        node.cleared = True
        gs.clear_transients()
        gs.building = None
        log.info("Level complete", node_id=node.id, column=node.column, score=gs.player.score)

        unlock_next_column(gs.world, node)
        if gs.player.keys > 0:
            unlock_hidden(gs.world)

        if not node.hidden and node.column == last_column(gs.world):
            hidden = gs.hidden_node()
            gs.ending = select_ending(
                hidden is not None and hidden.cleared,
                gs.player.files,
                self.settings.world.files_required,
            )
            gs.narrative = ending_sequence(gs.ending)
            gs.high_scores.submit(gs.player.score)
            gs.modes.transition(GameMode.ENDING, reason=f"ending {gs.ending.value}")
        elif not node.hidden and node.column == 0 and not gs.intro_shown:
            gs.intro_shown = True
            gs.narrative = intro_sequence(gs.player.keys > 0)
            gs.modes.transition(GameMode.MESSAGE, reason=gs.narrative.id)
        else:
            gs.modes.transition(GameMode.MAP, reason="level complete")

    def advance_narrative(self) -> bool:
        """Turn the page. Returns ``True`` while there was another page."""
        gs = self._require_state()
        if gs.narrative is None or gs.mode not in (GameMode.MESSAGE, GameMode.ENDING):
            return False
        if gs.narrative.advance():
            return True
        gs.narrative = None
        if gs.mode is GameMode.MESSAGE:
            gs.modes.transition(GameMode.MAP, reason="message read")
        else:
            gs.modes.transition(GameMode.VICTORY, reason="ending read")
        return False

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def set_movement(self, x: float, y: float) -> None:
        gs = self._require_state()
        gs.input.move_x = clamp(float(x), -1.0, 1.0)
        gs.input.move_y = clamp(float(y), -1.0, 1.0)

    def set_fire(self, pressed: bool) -> None:
        gs = self._require_state()
        if pressed and not gs.input.fire:
            gs.input.fire_pressed = True
        gs.input.fire = bool(pressed)

    def set_special(self, pressed: bool) -> None:
        gs = self._require_state()
        if pressed and not gs.input.special:
            gs.input.special_pressed = True
        gs.input.special = bool(pressed)

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------
    def tick(self, delta_ms: float = FRAME_MS) -> None:
        """Advance the active room by one frame. No-op unless playing."""
        gs = self.state
        if gs is None or not gs.modes.is_playing:
            return
        room = gs.current_room
        if room is None:
            return
        gs.tick_count += 1
        gs.elapsed_ms += delta_ms
        intent = gs.input

        movement_system.move_player(gs, room)
        hit = room_system.check_door_collision(room, *gs.player.center)
        if hit is not None:
            if hit.boss:
                self.complete_level()
                return
            if room_system.transition_room(gs, hit.direction):
                return

        if intent.fire or intent.fire_pressed:
            combat_system.fire_projectile(gs)
        if intent.special or intent.special_pressed:
            combat_system.trigger_special(gs)
        intent.fire_pressed = intent.special_pressed = False
        combat_system.tick_cooldowns(gs)

        effects_system.update_shockwaves(gs)
        combat_system.update_projectiles(gs, room)
        death_system.remove_dead_enemies(gs, room)
        ai_system.dispatch_ai(gs, room)
        if not gs.modes.is_playing:
            return
        pickup_system.collect_items(gs, room)
        effects_system.update_particles(gs)
        self._enforce_bounds(gs)

    @staticmethod
    def _enforce_bounds(gs: GameState) -> None:
        player = gs.player
        player.hp = max(0, min(player.hp, player.max_hp))
        player.mp = max(0, min(player.mp, player.max_mp))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def mode(self) -> GameMode:
        return self.state.mode if self.state else GameMode.IDLE

    @property
    def is_game_over(self) -> bool:
        return self.state is not None and self.state.is_game_over

    @property
    def score(self) -> int:
        return self.state.player.score if self.state else 0

    @property
    def current_narrative(self) -> Optional[str]:
        if self.state is None or self.state.narrative is None:
            return None
        return self.state.narrative.current_page

    def stats(self) -> Dict[str, Any]:
        gs = self._require_state()
        p = gs.player
        return {
            "hp": p.hp,
            "max_hp": p.max_hp,
            "mp": p.mp,
            "max_mp": p.max_mp,
            "speed": p.speed,
            "damage": p.damage,
            "score": p.score,
            "keys": p.keys,
            "files": p.files,
            "high_score": self.high_scores.high_score,
        }

    def snapshot(self) -> FrameSnapshot:
        return build_snapshot(self._require_state())
