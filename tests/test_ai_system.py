import pytest

from game.ai import HANDLERS, get_handler
from game.constants import TILE_SIZE, EnemyState, GameMode
from game.entities.components import Enemy
from game.settings import load_settings
from game.systems import ai_system
from simulation.engine import SimulationEngine


def make_state():
    engine = SimulationEngine(load_settings(), rng_seed=3)
    engine.start_session("runner", root_seed=2024)
    assert engine.enter_building(0)
    return engine.state


def make_enemy(gs, dx=0.0, dy=0.0, state=EnemyState.CHASE, timer=0):
    enemy = Enemy(
        x=gs.player.x + dx, y=gs.player.y + dy, hp=2, max_hp=2, speed=3.0,
        state=state, timer=timer,
    )
    gs.enemies.append(enemy)
    return enemy


def test_every_state_has_a_handler():
    assert set(HANDLERS) == set(EnemyState)
    assert get_handler(EnemyState.CHASE) is HANDLERS[EnemyState.CHASE]


def test_chase_moves_toward_player_at_half_speed():
    gs = make_state()
    enemy = make_enemy(gs, dx=2 * TILE_SIZE)
    x0 = enemy.x
    ai_system.dispatch_ai(gs, gs.current_room)
    assert enemy.state is EnemyState.CHASE
    assert enemy.x == pytest.approx(x0 - 1.5)


def test_chase_switches_to_prepare_when_close():
    gs = make_state()
    enemy = make_enemy(gs, dx=20)
    ai_system.dispatch_ai(gs, gs.current_room)
    assert enemy.state is EnemyState.PREPARE
    assert enemy.timer == 30


def test_prepare_hits_player_in_range():
    gs = make_state()
    enemy = make_enemy(gs, dx=10, state=EnemyState.PREPARE, timer=1)
    ai_system.dispatch_ai(gs, gs.current_room)
    assert enemy.state is EnemyState.ATTACK
    assert enemy.timer == 60
    assert gs.player.hp == gs.player.max_hp - 1


def test_prepare_misses_player_out_of_range():
    gs = make_state()
    enemy = make_enemy(gs, dx=2 * TILE_SIZE, state=EnemyState.PREPARE, timer=1)
    ai_system.dispatch_ai(gs, gs.current_room)
    assert enemy.state is EnemyState.ATTACK
    assert gs.player.hp == gs.player.max_hp


def test_attack_cooldown_returns_to_chase():
    gs = make_state()
    enemy = make_enemy(gs, dx=2 * TILE_SIZE, state=EnemyState.ATTACK, timer=60)
    for _ in range(59):
        get_handler(enemy.state)(enemy, gs, gs.current_room, 100.0)
    assert enemy.state is EnemyState.ATTACK
    get_handler(enemy.state)(enemy, gs, gs.current_room, 100.0)
    assert enemy.state is EnemyState.CHASE


def test_dispatch_stops_once_player_dies():
    gs = make_state()
    gs.player.hp = 1
    first = make_enemy(gs, state=EnemyState.PREPARE, timer=1)
    second = make_enemy(gs, state=EnemyState.PREPARE, timer=1)
    ai_system.dispatch_ai(gs, gs.current_room)
    assert gs.mode is GameMode.GAME_OVER
    assert first.state is EnemyState.ATTACK
    assert second.state is EnemyState.PREPARE
    assert second.timer == 1


def test_dead_enemies_are_skipped():
    gs = make_state()
    enemy = make_enemy(gs, dx=2 * TILE_SIZE)
    enemy.hp = 0
    x0 = enemy.x
    ai_system.dispatch_ai(gs, gs.current_room)
    assert enemy.x == x0
