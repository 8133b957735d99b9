import json

import pytest

from nexustd.core.config import DEFAULT_CONFIG, apply_overrides, config_to_dict, load_game_config


def test_defaults_match_tunables() -> None:
    cfg = load_game_config()
    assert cfg == DEFAULT_CONFIG
    assert cfg.spawn_interval == 1.0
    assert cfg.enemies_per_wave == 5
    assert cfg.wave_bonus == 50
    assert cfg.hit_radius == 20.0


def test_file_is_merged_over_defaults(tmp_path) -> None:
    path = tmp_path / "game.json"
    path.write_text(json.dumps({"schema_version": 1, "game": {"wave_bonus": 75, "spawn_interval": 0.5}}))

    cfg = load_game_config(path)

    assert cfg.wave_bonus == 75
    assert cfg.spawn_interval == 0.5
    assert cfg.enemies_per_wave == DEFAULT_CONFIG.enemies_per_wave


def test_overrides_are_cast_and_win_over_file(tmp_path) -> None:
    path = tmp_path / "game.json"
    path.write_text(json.dumps({"game": {"wave_bonus": 75}}))

    cfg = load_game_config(path, ["game.wave_bonus=80", "game.hit_radius=25.5"])

    assert cfg.wave_bonus == 80
    assert cfg.hit_radius == 25.5


@pytest.mark.parametrize(
    "overrides",
    [
        ["game.lives=3"],
        ["render.fps=30"],
        ["game.wave_bonus"],
        ["game..wave_bonus=1"],
        ["schema_version=2"],
        ["game.enemies_per_wave=many"],
    ],
)
def test_bad_overrides_raise(overrides: list[str]) -> None:
    with pytest.raises(ValueError):
        load_game_config(None, overrides)


def test_unknown_key_in_file_raises(tmp_path) -> None:
    path = tmp_path / "game.json"
    path.write_text(json.dumps({"game": {"towers": {}}}))
    with pytest.raises(ValueError, match="unknown config key: game.towers"):
        load_game_config(path)


def test_non_object_root_raises(tmp_path) -> None:
    path = tmp_path / "game.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_game_config(path)


def test_apply_overrides_without_items_is_identity() -> None:
    cfg = config_to_dict(DEFAULT_CONFIG)
    assert apply_overrides(cfg, None) is cfg
