# main.py
"""Headless demo: plays a session with a simple autopilot and prints rooms.

The autopilot walks along door axes only (arrival axis to the centre, then
the centre to the next door), which furniture placement always leaves clear.
"""
import argparse
import logging
import sys
from collections import deque
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import structlog

from engine.main_loop import MainLoop
from game.constants import PLAYER_SIZE, TILE_SIZE, Direction, GameMode, TileKind
from game.persistence import JsonFileStore, KeyValueStore, MemoryStore
from game.settings import load_settings
from game.world.procgen import Building, Room
from game.world.world_map import WorldNode
from simulation.engine import SimulationEngine
from simulation.snapshot import FrameSnapshot
from utils.logging_utils import setup_logging

log = structlog.get_logger()

DEFAULT_MAX_FRAMES = 20_000
AXIS_TOLERANCE = 1.0


# --- Debug Room Printing ---
def print_room_section(snapshot: FrameSnapshot) -> None:
    """Prints the active room with doors, items, enemies and the player."""
    view = snapshot.room
    if view is None:
        log.warning("Cannot print room: no active room")
        return
    glyphs = {TileKind.FLOOR: ".", TileKind.WALL: "#", TileKind.FURNITURE: "F"}
    rows = [[glyphs.get(TileKind(int(t)), "?") for t in row] for row in view.tiles]

    mid_x, mid_y = view.width // 2, view.height // 2
    door_cells = {
        "top": (mid_x, 0),
        "bottom": (mid_x, view.height - 1),
        "left": (0, mid_y),
        "right": (view.width - 1, mid_y),
    }
    for name, target in view.doors.items():
        if target is not None:
            x, y = door_cells[name]
            rows[y][x] = "D"
    if view.boss_exit is not None:
        x, y = door_cells[view.boss_exit]
        rows[y][x] = "E"

    def put(px: float, py: float, size: float, glyph: str) -> None:
        gx = int((px + size / 2) // TILE_SIZE)
        gy = int((py + size / 2) // TILE_SIZE)
        if 0 <= gy < view.height and 0 <= gx < view.width:
            rows[gy][gx] = glyph

    for item in snapshot.items:
        put(item.x, item.y, item.w, "*")
    for enemy in snapshot.enemies:
        put(enemy.x, enemy.y, enemy.size, "e")
    put(snapshot.player.x, snapshot.player.y, snapshot.player.size, "@")

    print(
        f"\n--- Building {view.building_id} ({view.theme}) room {view.room_id}"
        f"{' [BOSS]' if view.is_boss else ''} ---"
    )
    for row in rows:
        print(" ".join(row))
    print("------------------------------------\n")
# --- End Debug Room Printing ---


def path_to_boss(building: Building, start_id: int) -> List[int]:
    """Room ids from ``start_id`` to the boss room, inclusive."""
    target = building.boss_room.id
    previous: Dict[int, Optional[int]] = {start_id: None}
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        if current == target:
            break
        for neighbor in building.neighbors(current):
            if neighbor not in previous:
                previous[neighbor] = current
                queue.append(neighbor)
    path = [target]
    while previous[path[-1]] is not None:
        path.append(previous[path[-1]])
    return path[::-1]


def next_exit(building: Building, room: Room) -> Direction:
    if room.is_boss:
        return room.boss_exit
    path = path_to_boss(building, room.id)
    next_id = path[1]
    return next(d for d, target in room.doors.items() if target == next_id)


def _step(delta: float, speed: float) -> float:
    if abs(delta) <= AXIS_TOLERANCE:
        return 0.0
    return max(-1.0, min(1.0, delta / speed))


def autopilot(engine: SimulationEngine) -> Tuple[float, float]:
    """Movement input that heads for the next door on the way to the exit."""
    gs = engine.state
    room = gs.current_room
    player = gs.player
    offset = (TILE_SIZE - PLAYER_SIZE) / 2
    cx = (room.width // 2) * TILE_SIZE + offset
    cy = (room.height // 2) * TILE_SIZE + offset
    exit_dir = next_exit(gs.building, room)
    dx, dy = cx - player.x, cy - player.y

    if exit_dir in (Direction.TOP, Direction.BOTTOM):
        if abs(dx) > AXIS_TOLERANCE:
            return _step(dx, player.speed), _step(dy, player.speed)
        return 0.0, -1.0 if exit_dir is Direction.TOP else 1.0
    if abs(dy) > AXIS_TOLERANCE:
        return _step(dx, player.speed), _step(dy, player.speed)
    return -1.0 if exit_dir is Direction.LEFT else 1.0, 0.0


def choose_node(nodes: List[WorldNode]) -> Optional[WorldNode]:
    """Hidden node first once open, else the lowest open uncleared column."""
    open_nodes = [n for n in nodes if not n.locked and not n.cleared]
    if not open_nodes:
        return None
    hidden = [n for n in open_nodes if n.hidden]
    if hidden:
        return hidden[0]
    return min(open_nodes, key=lambda n: (n.column, n.position))


def play(engine: SimulationEngine, loop: MainLoop, max_frames: int, show_rooms: bool) -> None:
    last_room: Optional[Tuple[int, int]] = None
    while loop.frames_run < max_frames:
        mode = engine.mode
        if mode is GameMode.MAP:
            node = choose_node(engine.state.world)
            if node is None:
                log.info("No building left to enter")
                return
            loop.handle_command({"type": "enter", "node_id": node.id})
        elif mode in (GameMode.MESSAGE, GameMode.ENDING):
            print(f"  > {engine.current_narrative}")
            loop.handle_command({"type": "advance"})
        elif mode is GameMode.PLAYING:
            room_key = (engine.state.building.id, engine.state.active_room_id)
            if show_rooms and room_key != last_room:
                print_room_section(engine.snapshot())
                last_room = room_key
            mx, my = autopilot(engine)
            loop.handle_command({"type": "move", "x": mx, "y": my})
            loop.handle_command({"type": "fire", "pressed": True})
            loop.handle_command({"type": "special", "pressed": bool(engine.state.enemies)})
            loop.run_frames(1)
        else:
            return
    log.warning("Frame budget exhausted", frames=loop.frames_run)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a headless Escape Island session.")
    parser.add_argument("--seed", type=int, default=None, help="Root seed (default: time-based).")
    parser.add_argument("--character", default="runner", help="Character preset id.")
    parser.add_argument("--frames", type=int, default=DEFAULT_MAX_FRAMES, help="Frame budget.")
    parser.add_argument("--scores", type=Path, default=None, help="JSON file for the high score.")
    parser.add_argument("--settings", type=Path, default=None, help="Alternative settings YAML.")
    parser.add_argument("--quiet", action="store_true", help="Do not print rooms.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.INFO)
    log.info("Application starting...")

    try:
        settings = load_settings(args.settings)
        store: KeyValueStore = JsonFileStore(args.scores) if args.scores else MemoryStore()
        engine = SimulationEngine(settings, store=store, rng_seed=args.seed)
        engine.start_session(args.character, root_seed=args.seed)
    except FileNotFoundError as e:
        log.critical("Required file not found during init", error=str(e), exc_info=True)
        sys.exit(f"Initialization failed: File not found - {e}")
    except ValueError as e:
        log.critical("Invalid configuration", error=str(e), exc_info=True)
        sys.exit(f"Initialization failed: {e}")

    loop = MainLoop(engine)
    play(engine, loop, args.frames, show_rooms=not args.quiet)

    gs = engine.state
    print(
        f"Result: {engine.mode.value}  score={engine.score}  "
        f"high score={engine.high_scores.high_score}  "
        f"ending={gs.ending.value if gs.ending else '-'}  frames={loop.frames_run}"
    )


if __name__ == "__main__":
    main()
