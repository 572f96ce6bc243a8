# game/settings.py
"""Typed access to the YAML tunables in ``game/data/settings.yaml``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

log = structlog.get_logger(__name__)

DATA_DIR = Path(__file__).parent.resolve() / "data"
SETTINGS_FILE = DATA_DIR / "settings.yaml"


@dataclass(frozen=True)
class CharacterPreset:
    id: str
    name: str
    speed: float
    max_hp: int
    max_mp: int
    fire_rate_ms: float
    damage: int = 1


@dataclass(frozen=True)
class DifficultyScale:
    rooms_multiplier: float = 1.5
    enemy_count_multiplier: float = 1.2
    enemy_speed_base: float = 2.0


@dataclass(frozen=True)
class WorldSettings:
    column_schedule: tuple[int, ...] = (1, 2, 2, 1)
    special_tokens: Dict[str, int] = field(
        default_factory=lambda: {"file": 3, "sneakers": 2, "hot_sauce": 2}
    )
    files_required: int = 3


@dataclass(frozen=True)
class GenerationSettings:
    furniture_chance: float = 0.15
    center_safe_radius: int = 2
    consumable_chance: float = 0.3
    placement_attempts: int = 10


@dataclass(frozen=True)
class CombatSettings:
    projectile_speed: float = 10.0
    projectile_life: int = 60
    auto_aim_radius: float = 1000.0
    projectile_stun_ticks: int = 60
    special_cost: int = 1
    special_damage: int = 2
    special_stun_ticks: int = 120
    special_cooldown_ticks: int = 60
    knockback: float = 50.0
    kill_score: int = 100


@dataclass(frozen=True)
class EnemySettings:
    base_count: int = 2
    base_hp: int = 2
    base_speed: float = 1.5
    speed_per_level: float = 0.1
    chase_speed_factor: float = 0.5
    close_range: float = 40.0
    attack_range: float = 50.0
    prepare_ticks: int = 30
    prepare_ticks_per_level: int = 5
    attack_cooldown_ticks: int = 60
    spawn_min_distance: float = 150.0
    spawn_attempts: int = 50


@dataclass(frozen=True)
class PickupSettings:
    sneakers_speed_bonus: float = 0.5
    hot_sauce_damage_bonus: int = 1


DEFAULT_CHARACTERS: Dict[str, CharacterPreset] = {
    "runner": CharacterPreset("runner", "Swift Scout", 5.0, 3, 3, 400),
    "tank": CharacterPreset("tank", "Heavy Guard", 3.5, 5, 2, 600),
}


@dataclass(frozen=True)
class GameSettings:
    characters: Dict[str, CharacterPreset] = field(
        default_factory=lambda: dict(DEFAULT_CHARACTERS)
    )
    difficulty: DifficultyScale = field(default_factory=DifficultyScale)
    world: WorldSettings = field(default_factory=WorldSettings)
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    combat: CombatSettings = field(default_factory=CombatSettings)
    enemies: EnemySettings = field(default_factory=EnemySettings)
    pickups: PickupSettings = field(default_factory=PickupSettings)

    def character(self, character_id: str) -> CharacterPreset:
        try:
            return self.characters[character_id]
        except KeyError:
            log.error("Unknown character", character_id=character_id)
            raise ValueError(f"Unknown character: {character_id}") from None


def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads a YAML configuration file."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(
            f"{config_name} configuration file not found: {config_path}"
        )
    try:
        with config_path.open("r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
            exc_info=True,
        )
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data


def _section(cls, data: Dict[str, Any] | None):
    """Build ``cls`` from the keys of ``data`` it knows about."""
    data = data or {}
    known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
    unknown = sorted(set(data) - set(known))
    if unknown:
        log.warning("Ignoring unknown settings keys", section=cls.__name__, keys=unknown)
    return cls(**known)


def settings_from_dict(config: Dict[str, Any]) -> GameSettings:
    characters = dict(DEFAULT_CHARACTERS)
    for char_id, raw in (config.get("characters") or {}).items():
        base = characters.get(char_id)
        characters[char_id] = CharacterPreset(
            id=char_id,
            name=raw.get("name", base.name if base else char_id),
            speed=float(raw.get("speed", base.speed if base else 4.0)),
            max_hp=int(raw.get("max_hp", base.max_hp if base else 3)),
            max_mp=int(raw.get("max_mp", base.max_mp if base else 3)),
            fire_rate_ms=float(raw.get("fire_rate_ms", base.fire_rate_ms if base else 500)),
            damage=int(raw.get("damage", base.damage if base else 1)),
        )

    world_cfg = dict(config.get("world") or {})
    if "column_schedule" in world_cfg:
        world_cfg["column_schedule"] = tuple(int(n) for n in world_cfg["column_schedule"])
        if not world_cfg["column_schedule"] or min(world_cfg["column_schedule"]) < 1:
            raise ValueError("world.column_schedule needs at least one positive count")

    return GameSettings(
        characters=characters,
        difficulty=_section(DifficultyScale, config.get("difficulty")),
        world=_section(WorldSettings, world_cfg),
        generation=_section(GenerationSettings, config.get("generation")),
        combat=_section(CombatSettings, config.get("combat")),
        enemies=_section(EnemySettings, config.get("enemies")),
        pickups=_section(PickupSettings, config.get("pickups")),
    )


def load_settings(path: Path | None = None) -> GameSettings:
    """Load settings from ``path`` (defaults to the packaged YAML file)."""
    config = load_yaml_config(path or SETTINGS_FILE, "Game settings")
    return settings_from_dict(config)


__all__ = [
    "CharacterPreset",
    "GameSettings",
    "load_settings",
    "settings_from_dict",
]
