# engine/main_loop.py
import time
from typing import Any, Callable, Self

import structlog

from game.constants import FRAME_MS
from simulation.engine import SimulationEngine

log = structlog.get_logger()

MAX_CATCH_UP_FRAMES = 5


class MainLoop:
    """
    Drives a :class:`SimulationEngine` from a monotonic clock and routes
    presentation-layer commands into it.

    Elapsed wall time is accumulated and converted into whole fixed-size
    frames, so movement speed does not depend on the display refresh rate.
    """

    def __init__(
        self: Self,
        engine: SimulationEngine,
        time_source: Callable[[], float] = time.perf_counter,
        frame_ms: float = FRAME_MS,
        max_catch_up: int = MAX_CATCH_UP_FRAMES,
    ):
        self.engine = engine
        self.time_source = time_source
        self.frame_ms = frame_ms
        self.max_catch_up = max_catch_up
        self._last_time: float | None = None
        self._accumulator = 0.0
        self.frames_run = 0
        log.info("MainLoop initialized", frame_ms=round(frame_ms, 3))

    def handle_command(self: Self, command: dict[str, Any]) -> bool:
        """
        Applies one input command. Returns True if the engine accepted it.

        Malformed commands (ValueError) are logged and reported in the
        message log; anything else propagates.
        """
        engine = self.engine
        kind = command.get("type")
        try:
            if kind == "move":
                engine.set_movement(command.get("x", 0.0), command.get("y", 0.0))
                return True
            if kind == "fire":
                engine.set_fire(bool(command.get("pressed", True)))
                return True
            if kind == "special":
                engine.set_special(bool(command.get("pressed", True)))
                return True
            if kind == "enter":
                return engine.enter_building(int(command["node_id"]))
            if kind == "advance":
                return engine.advance_narrative()
            raise ValueError(f"Unknown command type: {kind!r}")
        except ValueError as e:
            log.error("Invalid command", command=command, error=str(e))
            if engine.state is not None:
                engine.state.add_message("That command could not be carried out.")
            return False

    def step(self: Self) -> int:
        """Advances the engine by however many frames have elapsed."""
        now = self.time_source()
        if self._last_time is None:
            self._last_time = now
            return 0
        self._accumulator += (now - self._last_time) * 1000.0
        self._last_time = now

        frames = 0
        while self._accumulator >= self.frame_ms and frames < self.max_catch_up:
            self._tick()
            self._accumulator -= self.frame_ms
            frames += 1
        if self._accumulator >= self.frame_ms:
            log.debug("Dropping backlog", dropped_ms=round(self._accumulator, 1))
            self._accumulator %= self.frame_ms
        return frames

    def run_frames(self: Self, count: int) -> None:
        """Runs ``count`` frames back to back, ignoring the clock."""
        for _ in range(count):
            if self.engine.is_game_over:
                break
            self._tick()

    def _tick(self: Self) -> None:
        try:
            self.engine.tick(self.frame_ms)
        except Exception as e:
            log.error("Exception during frame update", error=str(e), exc_info=True)
            raise
        self.frames_run += 1
