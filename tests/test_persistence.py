import json

from game.persistence import HighScoreKeeper, JsonFileStore, MemoryStore


def test_high_score_starts_at_zero():
    keeper = HighScoreKeeper(MemoryStore())
    assert keeper.high_score == 0


def test_submit_only_keeps_improvements():
    store = MemoryStore()
    keeper = HighScoreKeeper(store)
    assert keeper.submit(300)
    assert not keeper.submit(200)
    assert keeper.high_score == 300
    assert store.get("escape_island_highscore") == "300"


def test_malformed_value_treated_as_zero():
    keeper = HighScoreKeeper(MemoryStore({"escape_island_highscore": "lots"}))
    assert keeper.high_score == 0


def test_json_store_persists_between_keepers(tmp_path):
    path = tmp_path / "scores" / "highscore.json"
    HighScoreKeeper(JsonFileStore(path)).submit(1200)
    assert json.loads(path.read_text())["escape_island_highscore"] == "1200"
    assert HighScoreKeeper(JsonFileStore(path)).high_score == 1200


def test_read_failure_is_logged_not_raised(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[1, 2, 3]")
    keeper = HighScoreKeeper(JsonFileStore(path))
    assert keeper.high_score == 0


def test_write_failure_keeps_in_memory_score(monkeypatch):
    store = MemoryStore()

    def refuse(key, value):
        raise OSError("disk full")

    monkeypatch.setattr(store, "set", refuse)
    keeper = HighScoreKeeper(store)
    assert keeper.submit(50)
    assert keeper.high_score == 50
