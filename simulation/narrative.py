"""Narrative branches shown between buildings and at the end of a run.

The ending is a pure lookup over two booleans, decided once when the final
column is cleared.  Page navigation only walks the chosen tuple; nothing
that happens afterwards can move the reader into another branch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from game.constants import Ending

INTRO_KEY = "intro_key"
INTRO_NO_KEY = "intro_no_key"

INTRO_PAGES: Dict[str, Tuple[str, ...]] = {
    INTRO_KEY: (
        "The first building falls silent behind you.",
        "The key you found is warm and hums faintly. Somewhere on this island a door is waiting for it.",
    ),
    INTRO_NO_KEY: (
        "The first building falls silent behind you.",
        "Scratched into the exit frame: 'The one who holds the key sees the hidden house.'",
    ),
}

# (hidden building cleared, all files collected) -> ending
ENDING_TABLE: Dict[Tuple[bool, bool], Ending] = {
    (False, False): Ending.ESCAPE,
    (False, True): Ending.TRUTH,
    (True, False): Ending.SECRET_ROOM,
    (True, True): Ending.FULL_STORY,
}

ENDING_PAGES: Dict[Ending, Tuple[str, ...]] = {
    Ending.ESCAPE: (
        "The last door opens onto the beach.",
        "A boat is tied to the pier. You row away without looking back.",
        "You escaped the island. Some questions stay unanswered.",
    ),
    Ending.TRUTH: (
        "The last door opens onto the beach.",
        "The files you gathered fit together: the island was never abandoned.",
        "You leave with proof. The world will hear about this place.",
    ),
    Ending.SECRET_ROOM: (
        "The last door opens onto the beach.",
        "The hidden house showed you who built these rooms, but not why.",
        "You sail home with a map nobody else has seen.",
    ),
    Ending.FULL_STORY: (
        "The last door opens onto the beach.",
        "The hidden house and the files tell the same story.",
        "The island lets you go, and for the first time it sounds like a thank-you.",
        "You know everything. This is the true ending.",
    ),
}


def select_ending(hidden_cleared: bool, files_collected: int, files_required: int) -> Ending:
    return ENDING_TABLE[(bool(hidden_cleared), files_collected >= files_required)]


@dataclass
class NarrativeSequence:
    """A fixed list of pages read front to back."""

    id: str
    pages: Tuple[str, ...]
    index: int = 0

    @property
    def current_page(self) -> str:
        return self.pages[self.index]

    @property
    def finished(self) -> bool:
        return self.index >= len(self.pages) - 1

    def advance(self) -> bool:
        """Move to the next page. Returns ``False`` when already on the last."""
        if self.finished:
            return False
        self.index += 1
        return True


def intro_sequence(has_key: bool) -> NarrativeSequence:
    branch = INTRO_KEY if has_key else INTRO_NO_KEY
    return NarrativeSequence(branch, INTRO_PAGES[branch])


def ending_sequence(ending: Ending) -> NarrativeSequence:
    return NarrativeSequence(ending.value, ENDING_PAGES[ending])
