"""Enemy behaviour handlers.

Every enemy runs the same four-state machine.  :data:`HANDLERS` maps each
:class:`~game.constants.EnemyState` to the function that advances an enemy
in that state by one tick; the mapping is checked to be exhaustive at import
time so adding a state without a handler fails loudly.
"""

from __future__ import annotations

from typing import Callable, Dict

import structlog

from game.constants import EnemyState

from . import chaser

log = structlog.get_logger()

HANDLERS: Dict[EnemyState, Callable] = {
    EnemyState.STUNNED: chaser.handle_stunned,
    EnemyState.CHASE: chaser.handle_chase,
    EnemyState.PREPARE: chaser.handle_prepare,
    EnemyState.ATTACK: chaser.handle_attack,
}

_missing = set(EnemyState) - set(HANDLERS)
if _missing:  # pragma: no cover - guards future edits
    raise RuntimeError(f"No AI handler for states: {sorted(s.value for s in _missing)}")


def get_handler(state: EnemyState) -> Callable:
    """Return the handler for ``state``."""
    return HANDLERS[state]
