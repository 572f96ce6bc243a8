# game/items/ledger.py
"""Session-wide record of consumed item ids."""
from __future__ import annotations

from typing import Iterable, Iterator, List, Set

import structlog

from game.entities.components import Item

log = structlog.get_logger(__name__)


class CollectionLedger:
    """Ids recorded here never reappear in any room's item list."""

    def __init__(self, consumed: Iterable[int] = ()) -> None:
        self._consumed: Set[int] = set(consumed)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._consumed

    def __len__(self) -> int:
        return len(self._consumed)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._consumed))

    def record(self, item_id: int) -> bool:
        """Record ``item_id``. Returns ``False`` if it was already recorded."""
        if item_id in self._consumed:
            log.debug("Item already in ledger", item_id=item_id)
            return False
        self._consumed.add(item_id)
        log.debug("Item recorded in ledger", item_id=item_id, total=len(self._consumed))
        return True

    def filter_items(self, items: Iterable[Item]) -> List[Item]:
        return [item for item in items if item.id not in self._consumed]
