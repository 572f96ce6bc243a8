import pytest

from game.constants import TILE_SIZE, EnemyState, GameMode, TileKind
from game.entities.components import Enemy, Projectile
from game.persistence import MemoryStore
from game.settings import load_settings
from game.systems import ai_system, combat_system
from game.world.procgen import ensure_layout
from simulation.engine import SimulationEngine


def make_engine(store=None, seed=12345):
    engine = SimulationEngine(load_settings(), store=store, rng_seed=7)
    engine.start_session("runner", root_seed=seed)
    assert engine.enter_building(0)
    return engine


def add_enemy(gs, dx=2 * TILE_SIZE, dy=0.0, hp=2):
    enemy = Enemy(x=gs.player.x + dx, y=gs.player.y + dy, hp=hp, max_hp=hp, speed=3.0)
    gs.enemies.append(enemy)
    return enemy


def test_projectile_hit_stuns_then_enemy_recovers():
    engine = make_engine()
    gs = engine.state
    room = gs.current_room
    enemy = add_enemy(gs)
    ex, ey = enemy.center
    gs.projectiles.append(Projectile(x=ex - 10, y=ey, vx=10, vy=0, life=60))

    combat_system.update_projectiles(gs, room)

    assert enemy.hp == 1
    assert enemy.state is EnemyState.STUNNED
    assert enemy.timer == 60
    assert gs.projectiles == []

    for _ in range(59):
        ai_system.dispatch_ai(gs, room)
    assert enemy.state is EnemyState.STUNNED
    ai_system.dispatch_ai(gs, room)
    assert enemy.state is EnemyState.CHASE


def test_projectile_expires_in_walls():
    engine = make_engine()
    gs = engine.state
    enemy = add_enemy(gs)
    gs.projectiles.append(Projectile(x=5, y=5, vx=0, vy=0, life=60))
    combat_system.update_projectiles(gs, gs.current_room)
    assert gs.projectiles == []
    assert enemy.hp == 2


def test_projectile_life_runs_out():
    engine = make_engine()
    gs = engine.state
    px, py = gs.player.center
    gs.projectiles.append(Projectile(x=px, y=py, vx=0, vy=0, life=2))
    combat_system.update_projectiles(gs, gs.current_room)
    assert len(gs.projectiles) == 1
    combat_system.update_projectiles(gs, gs.current_room)
    assert gs.projectiles == []


def test_fire_sets_cooldown_from_fire_rate():
    engine = make_engine()
    gs = engine.state
    assert combat_system.fire_projectile(gs)
    assert gs.player.cooldown == 24
    assert not combat_system.fire_projectile(gs)
    assert len(gs.projectiles) == 1


def test_fire_auto_aims_at_nearest_enemy():
    engine = make_engine()
    gs = engine.state
    gs.player.facing = (0.0, -1.0)
    add_enemy(gs, dx=-2 * TILE_SIZE)
    combat_system.fire_projectile(gs)
    shot = gs.projectiles[0]
    assert shot.vx == pytest.approx(-10.0)
    assert shot.vy == pytest.approx(0.0)


def test_fire_without_enemies_uses_facing():
    engine = make_engine()
    gs = engine.state
    gs.player.facing = (0.0, 1.0)
    combat_system.fire_projectile(gs)
    shot = gs.projectiles[0]
    assert (shot.vx, shot.vy) == pytest.approx((0.0, 10.0))


def test_special_attack_spends_resource_and_stuns_all():
    engine = make_engine()
    gs = engine.state
    gs.player.mp = 1
    first = add_enemy(gs, hp=5)
    second = add_enemy(gs, dx=-2 * TILE_SIZE, hp=5)

    assert combat_system.trigger_special(gs)

    assert gs.player.mp == 0
    for enemy in (first, second):
        assert enemy.hp == 3
        assert enemy.state is EnemyState.STUNNED
        assert enemy.timer == 120
    assert len(gs.shockwaves) == 1


def test_special_attack_blocked_without_resource():
    engine = make_engine()
    gs = engine.state
    gs.player.mp = 0
    enemy = add_enemy(gs, hp=5)

    assert not combat_system.trigger_special(gs)

    assert gs.player.mp == 0
    assert enemy.hp == 5
    assert enemy.state is EnemyState.CHASE
    assert gs.shockwaves == []


def test_special_attack_blocked_on_cooldown():
    engine = make_engine()
    gs = engine.state
    assert combat_system.trigger_special(gs)
    mp_after = gs.player.mp
    assert not combat_system.trigger_special(gs)
    assert gs.player.mp == mp_after
    for _ in range(60):
        combat_system.tick_cooldowns(gs)
    assert combat_system.trigger_special(gs)


def test_special_damage_never_drives_hp_negative():
    engine = make_engine()
    gs = engine.state
    enemy = add_enemy(gs, hp=1)
    combat_system.trigger_special(gs)
    assert enemy.hp == 0


def test_lethal_hit_ends_game_and_saves_high_score():
    store = MemoryStore({"escape_island_highscore": "100"})
    engine = make_engine(store=store)
    gs = engine.state
    gs.player.hp = 1
    gs.player.max_hp = 3
    gs.player.score = 500

    combat_system.damage_player(gs)

    assert gs.player.hp == 0
    assert gs.mode is GameMode.GAME_OVER
    assert engine.is_game_over
    assert store.data["escape_island_highscore"] == "500"


def test_lower_score_does_not_overwrite_high_score():
    store = MemoryStore({"escape_island_highscore": "1000"})
    engine = make_engine(store=store)
    gs = engine.state
    gs.player.hp = 1
    gs.player.score = 300
    combat_system.damage_player(gs)
    assert gs.mode is GameMode.GAME_OVER
    assert store.data["escape_island_highscore"] == "1000"


def test_hit_knocks_player_back_against_facing():
    engine = make_engine()
    gs = engine.state
    gs.player.facing = (1.0, 0.0)
    x0, y0 = gs.player.x, gs.player.y
    combat_system.damage_player(gs)
    assert gs.player.hp == 2
    assert gs.player.x == pytest.approx(x0 - 50)
    assert gs.player.y == pytest.approx(y0)


def test_knockback_stops_at_furniture():
    engine = make_engine()
    gs = engine.state
    player = gs.player
    layout = ensure_layout(gs.current_room)
    row = gs.current_room.height // 2
    for gx in (3, 5):
        layout.tiles[row, gx] = TileKind.FLOOR
    layout.tiles[row, 4] = TileKind.FURNITURE
    player.x = 5 * TILE_SIZE + 1 - player.size / 2
    player.y = row * TILE_SIZE + (TILE_SIZE - player.size) / 2
    player.facing = (1.0, 0.0)
    x0 = player.x

    combat_system.damage_player(gs)

    cx, _ = player.center
    assert int(cx // TILE_SIZE) == 5
    assert player.x == pytest.approx(x0)


def test_knockback_slides_along_open_axis():
    engine = make_engine()
    gs = engine.state
    player = gs.player
    layout = ensure_layout(gs.current_room)
    row = gs.current_room.height // 2
    for gx in range(2, 7):
        layout.tiles[row, gx] = TileKind.FLOOR
        layout.tiles[row - 1, gx] = TileKind.FLOOR
    layout.tiles[row, 4] = TileKind.FURNITURE
    player.x = 5 * TILE_SIZE + 1 - player.size / 2
    player.y = row * TILE_SIZE + (TILE_SIZE - player.size) / 2
    player.facing = (0.6, 0.8)
    y0 = player.y

    combat_system.knock_back(player, -30.0, -40.0, gs.current_room)

    cx, _ = player.center
    assert int(cx // TILE_SIZE) == 5
    assert player.y == pytest.approx(y0 - 40.0)
