import pytest

from engine.main_loop import MainLoop
from game.constants import GameMode
from game.settings import load_settings
from simulation.engine import SimulationEngine


class FakeClock:
    def __init__(self, *times):
        self.times = list(times)

    def __call__(self):
        return self.times.pop(0)


class CountingEngine:
    def __init__(self):
        self.ticks = []
        self.state = None
        self.is_game_over = False

    def tick(self, delta_ms):
        self.ticks.append(delta_ms)


def create_main_loop():
    engine = SimulationEngine(load_settings(), rng_seed=1)
    engine.start_session("tank", root_seed=99)
    return MainLoop(engine), engine


def test_step_converts_elapsed_time_into_frames():
    engine = CountingEngine()
    loop = MainLoop(engine, time_source=FakeClock(0.0, 0.060, 0.070))
    assert loop.step() == 0
    assert loop.step() == 3
    assert loop.step() == 1
    assert len(engine.ticks) == 4
    assert loop.frames_run == 4


def test_step_caps_catch_up_frames():
    engine = CountingEngine()
    loop = MainLoop(engine, time_source=FakeClock(0.0, 1.0, 1.0))
    loop.step()
    assert loop.step() == 5
    assert loop.step() == 0


def test_commands_reach_the_engine():
    loop, engine = create_main_loop()
    assert loop.handle_command({"type": "enter", "node_id": 0})
    assert engine.mode is GameMode.PLAYING
    assert loop.handle_command({"type": "move", "x": 0.5, "y": 0})
    assert engine.state.input.move_x == 0.5
    assert loop.handle_command({"type": "fire"})
    assert engine.state.input.fire


def test_value_error_is_handled():
    loop, engine = create_main_loop()
    assert loop.handle_command({"type": "teleport"}) is False
    assert engine.state.message_log
    assert loop.handle_command({"type": "enter", "node_id": 42}) is False


def test_unexpected_exception_propagates(monkeypatch):
    loop, engine = create_main_loop()

    def boom(delta_ms):
        raise RuntimeError("boom")

    monkeypatch.setattr(engine, "tick", boom)
    with pytest.raises(RuntimeError):
        loop.run_frames(1)


def test_run_frames_stops_at_game_over():
    loop, engine = create_main_loop()
    loop.handle_command({"type": "enter", "node_id": 0})
    engine.state.player.hp = 0
    engine.state.modes.transition(GameMode.GAME_OVER)
    loop.run_frames(10)
    assert loop.frames_run == 0
