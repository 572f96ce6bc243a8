# game/game_state.py
"""Session context shared by every simulation system.

One :class:`GameState` exists per play session.  It owns the overworld, the
cache of generated buildings, the collection ledger, the player and the
transient actors of the room currently being played.  Systems receive it
explicitly; there is no module-level session state.
"""
from collections import deque
from typing import Deque, Dict, List, Optional

import structlog

from game.constants import TILE_SIZE, PLAYER_SIZE, Ending, GameMode
from game.entities.components import (
    Enemy,
    InputIntent,
    Item,
    Particle,
    PlayerState,
    Projectile,
    Shockwave,
)
from game.items.ledger import CollectionLedger
from game.persistence import HighScoreKeeper, KeyValueStore, MemoryStore
from game.settings import CharacterPreset, GameSettings
from game.world.procgen import Building, Room, generate_building
from game.world.world_map import WorldNode, generate_world_map
from game_rng import GameRNG
from simulation.narrative import NarrativeSequence
from simulation.state_machine import ModeMachine

log = structlog.get_logger()

PARTICLE_BURST = 5
PARTICLE_LIFE = 20
PARTICLE_SPREAD = 5.0
MAX_LOG_LENGTH = 50


def player_from_preset(preset: CharacterPreset) -> PlayerState:
    return PlayerState(
        hp=preset.max_hp,
        max_hp=preset.max_hp,
        mp=preset.max_mp,
        max_mp=preset.max_mp,
        speed=preset.speed,
        damage=preset.damage,
        fire_rate_ms=preset.fire_rate_ms,
    )


class GameState:
    """Central container for mutable session data."""

    def __init__(
        self,
        settings: GameSettings,
        character_id: str,
        root_seed: int,
        store: KeyValueStore | None = None,
        rng_seed: int | None = None,
        high_scores: HighScoreKeeper | None = None,
    ):
        log.info("Initializing GameState...", character=character_id, root_seed=root_seed)
        self.settings = settings
        self.character: CharacterPreset = settings.character(character_id)
        self.root_seed: int = int(root_seed)
        # Non-seeded source for session variety (shuffles, jitter, particles)
        self.rng_instance: GameRNG = GameRNG(seed=rng_seed)

        self.world: List[WorldNode] = generate_world_map(
            settings.world.column_schedule,
            settings.world.special_tokens,
            self.rng_instance,
        )
        self.buildings: Dict[int, Building] = {}
        self.ledger = CollectionLedger()
        self.high_scores = high_scores or HighScoreKeeper(store or MemoryStore())
        self.modes = ModeMachine()

        self.player: PlayerState = player_from_preset(self.character)
        self.input = InputIntent()

        self.current_node_id: Optional[int] = None
        self.building: Optional[Building] = None
        self.active_room_id: int = 0

        self.enemies: List[Enemy] = []
        self.projectiles: List[Projectile] = []
        self.items: List[Item] = []
        self.particles: List[Particle] = []
        self.shockwaves: List[Shockwave] = []

        self.message_log: Deque[str] = deque(maxlen=MAX_LOG_LENGTH)
        self.narrative: Optional[NarrativeSequence] = None
        self.ending: Optional[Ending] = None
        self.intro_shown: bool = False

        self.tick_count: int = 0
        self.elapsed_ms: float = 0.0
        log.info(
            "Game state initialized",
            nodes=len(self.world),
            high_score=self.high_scores.high_score,
            rng_seed=self.rng_instance.initial_seed,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def mode(self) -> GameMode:
        return self.modes.mode

    @property
    def is_game_over(self) -> bool:
        return self.modes.mode is GameMode.GAME_OVER

    def node(self, node_id: int) -> WorldNode:
        for node in self.world:
            if node.id == node_id:
                return node
        log.error("Unknown world node", node_id=node_id)
        raise ValueError(f"Unknown world node: {node_id}")

    @property
    def current_node(self) -> Optional[WorldNode]:
        if self.current_node_id is None:
            return None
        return self.node(self.current_node_id)

    @property
    def current_room(self) -> Optional[Room]:
        if self.building is None:
            return None
        return self.building.room(self.active_room_id)

    @property
    def difficulty(self) -> int:
        node = self.current_node
        return node.difficulty if node else 0

    def hidden_node(self) -> Optional[WorldNode]:
        return next((n for n in self.world if n.hidden), None)

    # ------------------------------------------------------------------
    # Buildings
    # ------------------------------------------------------------------
    def get_building(self, node: WorldNode) -> Building:
        """Return the cached building for ``node``, generating it once."""
        building = self.buildings.get(node.id)
        if building is None:
            building = generate_building(
                node.id,
                node.difficulty,
                node.theme,
                self.root_seed,
                node.special_items,
                ledger=self.ledger,
                scale=self.settings.difficulty,
                generation=self.settings.generation,
            )
            self.buildings[node.id] = building
        else:
            log.debug("Reusing cached building", building_id=node.id)
        return building

    # ------------------------------------------------------------------
    # Transient actors
    # ------------------------------------------------------------------
    def clear_transients(self) -> None:
        """Drop everything that belongs only to the room being left."""
        self.projectiles = []
        self.particles = []
        self.shockwaves = []
        self.enemies = []
        self.items = []

    def center_player_in(self, room: Room) -> None:
        offset = (TILE_SIZE - PLAYER_SIZE) / 2
        self.player.x = (room.width // 2) * TILE_SIZE + offset
        self.player.y = (room.height // 2) * TILE_SIZE + offset

    def create_particles(self, x: float, y: float, color: str) -> None:
        rng = self.rng_instance
        for _ in range(PARTICLE_BURST):
            self.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=rng.get_float(-0.5, 0.5) * PARTICLE_SPREAD,
                    vy=rng.get_float(-0.5, 0.5) * PARTICLE_SPREAD,
                    life=PARTICLE_LIFE,
                    color=color,
                )
            )

    def add_message(self, text: str) -> None:
        """Adds a message to the game log."""
        self.message_log.append(text)
        log.debug("Message added", message=text)
