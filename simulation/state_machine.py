"""Explicit game-mode machine.

Only the modes the simulation core cares about are modelled; menus and
character selection belong to the presentation layer and map onto
:attr:`GameMode.IDLE`.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Tuple

import structlog

from game.constants import GameMode

log = structlog.get_logger(__name__)

TRANSITIONS: Dict[GameMode, FrozenSet[GameMode]] = {
    GameMode.IDLE: frozenset({GameMode.MAP}),
    GameMode.MAP: frozenset({GameMode.PLAYING, GameMode.IDLE}),
    GameMode.PLAYING: frozenset(
        {GameMode.MAP, GameMode.MESSAGE, GameMode.ENDING, GameMode.GAME_OVER}
    ),
    GameMode.MESSAGE: frozenset({GameMode.MAP}),
    GameMode.ENDING: frozenset({GameMode.VICTORY}),
    GameMode.VICTORY: frozenset({GameMode.IDLE, GameMode.MAP}),
    GameMode.GAME_OVER: frozenset({GameMode.IDLE, GameMode.MAP}),
}
TERMINAL_MODES = frozenset({GameMode.GAME_OVER, GameMode.VICTORY})


class ModeMachine:
    def __init__(self, initial: GameMode = GameMode.IDLE) -> None:
        self.mode: GameMode = initial
        self.history: List[Tuple[GameMode, GameMode, str]] = []

    @property
    def is_playing(self) -> bool:
        return self.mode is GameMode.PLAYING

    @property
    def is_terminal(self) -> bool:
        return self.mode in TERMINAL_MODES

    def can(self, target: GameMode) -> bool:
        return target in TRANSITIONS[self.mode]

    def transition(self, target: GameMode, reason: str = "") -> bool:
        """Move to ``target`` if the table allows it; otherwise log and refuse."""
        if not self.can(target):
            log.warning(
                "Rejected mode transition",
                current=self.mode.value,
                target=target.value,
                reason=reason,
            )
            return False
        log.info("Mode transition", previous=self.mode.value, current=target.value, reason=reason)
        self.history.append((self.mode, target, reason))
        self.mode = target
        return True
