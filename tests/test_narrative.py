import pytest

from game.constants import Ending, GameMode
from simulation.narrative import (
    ENDING_PAGES,
    INTRO_KEY,
    INTRO_NO_KEY,
    NarrativeSequence,
    ending_sequence,
    intro_sequence,
    select_ending,
)
from simulation.state_machine import ModeMachine


@pytest.mark.parametrize(
    "hidden_cleared, files, expected",
    [
        (False, 0, Ending.ESCAPE),
        (False, 3, Ending.TRUTH),
        (True, 2, Ending.SECRET_ROOM),
        (True, 4, Ending.FULL_STORY),
    ],
)
def test_ending_table(hidden_cleared, files, expected):
    assert select_ending(hidden_cleared, files, 3) is expected


def test_every_ending_has_pages():
    for ending in Ending:
        assert ENDING_PAGES[ending]


def test_intro_branches():
    assert intro_sequence(True).id == INTRO_KEY
    assert intro_sequence(False).id == INTRO_NO_KEY


def test_sequence_walks_pages_in_order():
    seq = NarrativeSequence("demo", ("a", "b", "c"))
    assert seq.current_page == "a"
    assert seq.advance() and seq.current_page == "b"
    assert seq.advance() and seq.current_page == "c"
    assert seq.finished
    assert not seq.advance()
    assert seq.current_page == "c"


def test_ending_sequence_is_fixed_to_its_branch():
    seq = ending_sequence(Ending.TRUTH)
    pages = [seq.current_page]
    while seq.advance():
        pages.append(seq.current_page)
    assert tuple(pages) == ENDING_PAGES[Ending.TRUTH]


def test_mode_machine_rejects_illegal_moves():
    modes = ModeMachine()
    assert modes.mode is GameMode.IDLE
    assert not modes.transition(GameMode.PLAYING)
    assert modes.mode is GameMode.IDLE
    assert modes.transition(GameMode.MAP)
    assert modes.transition(GameMode.PLAYING)
    assert modes.is_playing
    assert not modes.transition(GameMode.VICTORY)
    assert modes.transition(GameMode.ENDING)
    assert modes.transition(GameMode.VICTORY)
    assert modes.is_terminal
    assert [(a, b) for a, b, _ in modes.history] == [
        (GameMode.IDLE, GameMode.MAP),
        (GameMode.MAP, GameMode.PLAYING),
        (GameMode.PLAYING, GameMode.ENDING),
        (GameMode.ENDING, GameMode.VICTORY),
    ]


def test_game_over_is_terminal():
    modes = ModeMachine(GameMode.PLAYING)
    assert modes.transition(GameMode.GAME_OVER)
    assert modes.is_terminal
    assert not modes.can(GameMode.PLAYING)
