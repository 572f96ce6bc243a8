import dataclasses

import pytest

from game.constants import Ending, GameMode
from game.game_state import MAX_LOG_LENGTH
from game.settings import load_settings
from simulation.engine import SimulationEngine
from simulation.narrative import ENDING_PAGES, INTRO_KEY, INTRO_NO_KEY


def make_engine(settings=None, enter=True):
    engine = SimulationEngine(settings or load_settings(), rng_seed=5)
    engine.start_session("runner", root_seed=12345)
    if enter:
        assert engine.enter_building(0)
    return engine


def single_column_settings():
    settings = load_settings()
    world = dataclasses.replace(settings.world, column_schedule=(1,))
    return dataclasses.replace(settings, world=world)


def test_session_starts_on_the_map():
    engine = make_engine(enter=False)
    assert engine.mode is GameMode.MAP
    assert engine.state.player.hp == 3
    assert engine.state.player.speed == 5.0


def test_unknown_character_rejected():
    engine = SimulationEngine(load_settings())
    with pytest.raises(ValueError):
        engine.start_session("ghost", root_seed=1)


def test_calls_before_a_session_fail():
    engine = SimulationEngine(load_settings())
    engine.tick()
    assert engine.mode is GameMode.IDLE
    with pytest.raises(RuntimeError):
        engine.enter_building(0)


def test_tick_is_noop_outside_play():
    engine = make_engine(enter=False)
    engine.tick()
    assert engine.state.tick_count == 0


def test_locked_and_unknown_buildings():
    engine = make_engine(enter=False)
    assert not engine.enter_building(1)
    assert engine.mode is GameMode.MAP
    with pytest.raises(ValueError):
        engine.enter_building(99)


def test_cannot_enter_while_playing():
    engine = make_engine()
    assert not engine.enter_building(0)


def test_movement_input_is_clamped():
    engine = make_engine()
    engine.set_movement(5, -3)
    assert (engine.state.input.move_x, engine.state.input.move_y) == (1.0, -1.0)


def test_tick_moves_player_by_speed():
    engine = make_engine()
    gs = engine.state
    x0 = gs.player.x
    engine.set_movement(1, 0)
    engine.tick()
    assert gs.player.x == pytest.approx(x0 + 5.0)
    assert gs.player.facing == (1.0, 0.0)
    assert gs.tick_count == 1


def test_tapped_fire_between_ticks_still_shoots():
    engine = make_engine()
    engine.set_fire(True)
    engine.set_fire(False)
    engine.tick()
    assert len(engine.state.projectiles) == 1
    engine.tick()
    assert len(engine.state.projectiles) == 1


def test_held_fire_respects_cooldown():
    engine = make_engine()
    player = engine.state.player
    engine.set_fire(True)
    engine.tick()
    assert player.cooldown == 23
    for _ in range(23):
        engine.tick()
    assert player.cooldown == 0
    engine.tick()
    assert player.cooldown == 23


def test_resources_stay_in_bounds():
    engine = make_engine()
    gs = engine.state
    gs.player.hp = 10
    gs.player.mp = -2
    engine.tick()
    assert gs.player.hp == gs.player.max_hp
    assert gs.player.mp == 0


def test_game_over_stops_ticks():
    engine = make_engine()
    gs = engine.state
    gs.player.hp = 0
    gs.modes.transition(GameMode.GAME_OVER)
    engine.tick()
    assert gs.tick_count == 0
    assert engine.is_game_over


def test_first_building_shows_intro_without_key():
    engine = make_engine()
    engine.complete_level()
    assert engine.mode is GameMode.MESSAGE
    assert engine.state.narrative.id == INTRO_NO_KEY
    assert engine.state.hidden_node().locked
    engine.advance_narrative()
    assert not engine.advance_narrative()
    assert engine.mode is GameMode.MAP


def test_first_building_with_key_unlocks_hidden():
    engine = make_engine()
    engine.state.player.keys = 1
    engine.complete_level()
    assert engine.state.narrative.id == INTRO_KEY
    assert not engine.state.hidden_node().locked


def test_intro_shown_only_once():
    engine = make_engine()
    engine.complete_level()
    while engine.advance_narrative():
        pass
    assert engine.enter_building(1)
    engine.complete_level()
    assert engine.mode is GameMode.MAP
    assert not engine.state.node(3).locked


def test_final_column_plays_ending_then_victory():
    engine = make_engine(settings=single_column_settings())
    engine.state.player.score = 250
    engine.complete_level()
    assert engine.mode is GameMode.ENDING
    assert engine.state.ending is Ending.ESCAPE
    assert engine.high_scores.high_score == 250

    pages = [engine.current_narrative]
    while engine.advance_narrative():
        pages.append(engine.current_narrative)
    assert tuple(pages) == ENDING_PAGES[Ending.ESCAPE]
    assert engine.mode is GameMode.VICTORY
    assert engine.current_narrative is None


def test_full_story_needs_hidden_and_files():
    engine = make_engine(settings=single_column_settings())
    gs = engine.state
    gs.player.files = 3
    gs.hidden_node().cleared = True
    engine.complete_level()
    assert gs.ending is Ending.FULL_STORY


def test_snapshot_is_a_copy():
    engine = make_engine()
    snap = engine.snapshot()
    assert snap.mode is GameMode.PLAYING
    assert snap.room.room_id == 0
    assert not snap.room.tiles.flags.writeable
    snap.player.hp = 99
    assert engine.state.player.hp == 3
    assert any(r.active for r in snap.minimap)


def test_stats_report_player_and_high_score():
    engine = make_engine()
    stats = engine.stats()
    assert stats["hp"] == 3 and stats["max_mp"] == 3
    assert stats["high_score"] == 0
    assert engine.score == 0


def test_message_log_keeps_only_recent_messages():
    engine = make_engine()
    gs = engine.state
    for i in range(MAX_LOG_LENGTH + 20):
        gs.add_message(f"message {i}")
    assert len(gs.message_log) == MAX_LOG_LENGTH
    assert gs.message_log[-1] == f"message {MAX_LOG_LENGTH + 19}"
    assert engine.snapshot().messages[-1] == f"message {MAX_LOG_LENGTH + 19}"
    assert len(engine.snapshot().messages) == 5
