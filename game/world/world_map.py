# game/world/world_map.py
"""Overworld generation: buildings arranged in columns plus one hidden node.

Column index doubles as difficulty.  Only column 0 starts unlocked; clearing
any node of column ``c`` unlocks every regular node of column ``c + 1``.  The
hidden node sits beside column 0 and is opened only by holding the key.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

import structlog

from game.constants import THEMES, ItemKind
from game_rng import GameRNG

log = structlog.get_logger(__name__)


@dataclass
class WorldNode:
    id: int
    column: int
    position: int  # index within its column
    theme: str
    difficulty: int
    locked: bool = True
    cleared: bool = False
    hidden: bool = False
    special_items: List[ItemKind] = field(default_factory=list)


def build_token_pool(token_counts: Dict[str, int]) -> List[ItemKind]:
    """Expand ``{"file": 3, ...}`` into a flat token list (key excluded)."""
    pool: List[ItemKind] = []
    for name, count in token_counts.items():
        kind = ItemKind(name)
        if kind is ItemKind.KEY:
            raise ValueError("The key token is placed separately")
        if not kind.is_special:
            raise ValueError(f"{name} is not a special item")
        pool.extend([kind] * int(count))
    return pool


def generate_world_map(
    column_schedule: Sequence[int],
    token_counts: Dict[str, int],
    rng: GameRNG,
) -> List[WorldNode]:
    """Create the overworld for a new session.

    ``rng`` is the non-seeded session source: token distribution is session
    variety, not part of the reproducible generation contract.
    """
    nodes: List[WorldNode] = []
    for column, count in enumerate(column_schedule):
        for position in range(count):
            node_id = len(nodes)
            nodes.append(
                WorldNode(
                    id=node_id,
                    column=column,
                    position=position,
                    theme=THEMES[(column + position) % len(THEMES)],
                    difficulty=column,
                    locked=column != 0,
                )
            )
    last_column = len(column_schedule) - 1

    hidden = WorldNode(
        id=len(nodes),
        column=0,
        position=-1,
        theme=THEMES[last_column % len(THEMES)],
        difficulty=last_column,
        locked=True,
        hidden=True,
    )

    regular = list(nodes)
    pool = build_token_pool(token_counts)
    rng.shuffle(pool)
    for i, token in enumerate(pool):
        regular[i % len(regular)].special_items.append(token)

    key_candidates = [n for n in regular if n.column < last_column] or regular
    key_holder = rng.choice(key_candidates)
    key_holder.special_items.append(ItemKind.KEY)

    nodes.append(hidden)
    log.info(
        "World map generated",
        buildings=len(regular),
        columns=len(column_schedule),
        key_node=key_holder.id,
        tokens=len(pool),
    )
    return nodes


def last_column(nodes: Iterable[WorldNode]) -> int:
    return max(n.column for n in nodes if not n.hidden)


def unlock_next_column(nodes: Iterable[WorldNode], cleared: WorldNode) -> List[WorldNode]:
    """Unlock the regular nodes one column past ``cleared``."""
    if cleared.hidden:
        return []
    opened = []
    for node in nodes:
        if not node.hidden and node.column == cleared.column + 1 and node.locked:
            node.locked = False
            opened.append(node)
    if opened:
        log.info(
            "Unlocked column",
            column=cleared.column + 1,
            nodes=[n.id for n in opened],
        )
    return opened


def unlock_hidden(nodes: Iterable[WorldNode]) -> WorldNode | None:
    """Open the hidden node; called once the player holds a key."""
    for node in nodes:
        if node.hidden:
            if node.locked:
                node.locked = False
                log.info("Hidden building unlocked", node_id=node.id)
            return node
    return None
