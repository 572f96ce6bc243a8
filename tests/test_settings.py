import pytest

from game.settings import SETTINGS_FILE, load_settings, load_yaml_config


def test_packaged_settings_load():
    settings = load_settings()
    runner = settings.character("runner")
    tank = settings.character("tank")
    assert (runner.speed, runner.max_hp, runner.max_mp, runner.fire_rate_ms) == (5.0, 3, 3, 400)
    assert (tank.speed, tank.max_hp, tank.max_mp, tank.fire_rate_ms) == (3.5, 5, 2, 600)
    assert settings.world.column_schedule == (1, 2, 2, 1)
    assert settings.generation.furniture_chance == 0.15
    assert settings.combat.special_stun_ticks == 120


def test_unknown_character_raises():
    with pytest.raises(ValueError):
        load_settings().character("ghost")


def test_partial_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("combat:\n  knockback: 10.0\n  mystery: 1\n")
    settings = load_settings(path)
    assert settings.combat.knockback == 10.0
    assert settings.combat.kill_score == 100
    assert settings.character("runner").speed == 5.0


def test_bad_column_schedule_rejected(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("world:\n  column_schedule: [1, 0]\n")
    with pytest.raises(ValueError):
        load_settings(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "nope.yaml", "Missing")


def test_empty_file_gives_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_yaml_config(path, "Empty") == {}
    assert SETTINGS_FILE.is_file()
