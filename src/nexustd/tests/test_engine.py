from dataclasses import replace

import pytest

from nexustd.core.config import DEFAULT_CONFIG
from nexustd.core.engine import Engine
from nexustd.core.model.path import PATH_PATTERNS, get_path_pattern


def _names(engine: Engine) -> list[str]:
    return [e.name for e in engine.drain_events()]


def test_nothing_happens_before_start(zigzag_engine: Engine) -> None:
    zigzag_engine.step(2.0)
    assert zigzag_engine.registry.enemies == []
    assert zigzag_engine.elapsed == 0.0


def test_start_spawns_on_first_tick(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine.step(1 / 60)
    assert len(zigzag_engine.registry.enemies) == 1
    assert _names(zigzag_engine) == ["game_started"]


def test_placement_needs_a_running_game(zigzag_engine: Engine) -> None:
    payload = {"x": 400.0, "y": 50.0, "kind": "laser"}
    assert zigzag_engine.act("PLACE_TOWER", payload) is None

    zigzag_engine.act("START")
    tower = zigzag_engine.act("PLACE_TOWER", payload)
    assert tower is not None
    assert zigzag_engine.state.credits == 100
    assert "tower_placed" in _names(zigzag_engine)

    zigzag_engine.act("PAUSE_TOGGLE")
    assert zigzag_engine.act("PLACE_TOWER", {"x": 600.0, "y": 50.0}) is None


def test_unknown_tower_kind_is_a_refusal(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    assert zigzag_engine.act("PLACE_TOWER", {"x": 400.0, "y": 50.0, "kind": "foo"}) is None
    assert zigzag_engine.registry.towers == []
    assert zigzag_engine.state.credits == 150


def test_pause_freezes_simulation(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine.step(0.5)
    elapsed = zigzag_engine.elapsed
    x = zigzag_engine.registry.enemies[0].x

    zigzag_engine.act("PAUSE_TOGGLE")
    zigzag_engine.step(1.0)
    assert zigzag_engine.elapsed == elapsed
    assert zigzag_engine.registry.enemies[0].x == x

    zigzag_engine.act("PAUSE_TOGGLE")
    zigzag_engine.step(0.5)
    assert zigzag_engine.registry.enemies[0].x > x


def test_fixed_step_accumulates_partial_frames(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine.step(0.01)
    assert zigzag_engine.elapsed == 0.0
    zigzag_engine.step(0.01)
    assert zigzag_engine.elapsed == pytest.approx(1 / 60)


def test_game_over_ignores_everything_but_reset(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine.state.game_over = True
    zigzag_engine.state.playing = False

    zigzag_engine.act("START")
    assert not zigzag_engine.state.playing
    assert zigzag_engine.act("PLACE_TOWER", {"x": 400.0, "y": 50.0}) is None

    zigzag_engine.act("RESET")
    assert not zigzag_engine.state.game_over
    assert zigzag_engine.state.credits == 150


def test_reset_clears_registry_and_keeps_fixed_path(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine.act("PLACE_TOWER", {"x": 400.0, "y": 50.0})
    zigzag_engine.step(1.0)
    zigzag_engine.drain_events()

    zigzag_engine.act("RESET")

    assert zigzag_engine.registry.towers == []
    assert zigzag_engine.registry.enemies == []
    assert zigzag_engine.state.wave == 1
    assert zigzag_engine.elapsed == 0.0
    assert zigzag_engine.path.name == "zigzag"
    assert _names(zigzag_engine) == ["game_reset"]


def test_reset_picks_a_new_random_path_when_none_was_given() -> None:
    engine = Engine(seed=11)
    seen = {engine.path.name}
    for _ in range(20):
        engine.reset()
        seen.add(engine.path.name)
    assert seen <= {p.name for p in PATH_PATTERNS}
    assert len(seen) > 1


def test_surface_scale_applies_to_path() -> None:
    engine = Engine(get_path_pattern("zigzag"), width=1600, height=200)
    assert engine.scale_x == 2.0
    assert engine.scale_y == 0.5
    assert engine.path_points[1] == (300.0, 100.0)


def test_unknown_action_raises(zigzag_engine: Engine) -> None:
    with pytest.raises(ValueError):
        zigzag_engine.act("SELL_TOWER")


def test_tick_refuses_reentry(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine._in_tick = True
    with pytest.raises(RuntimeError):
        zigzag_engine.tick(1.0)


def test_towers_kill_enemies_and_wave_rolls_over() -> None:
    # short flight: no target can leave the hit radius before landing
    config = replace(DEFAULT_CONFIG, projectile_speed=20.0)
    engine = Engine(get_path_pattern("zigzag"), config=config, seed=3)
    engine.state.credits = 2000
    engine.act("START")
    for x, y in [(75.0, 160.0), (75.0, 240.0), (225.0, 150.0), (225.0, 60.0), (375.0, 200.0), (375.0, 340.0)]:
        assert engine.act("PLACE_TOWER", {"x": x, "y": y, "kind": "quantum"}) is not None

    for _ in range(60 * 60):
        engine.step(1 / 60)
        if engine.state.wave > 1 or engine.state.game_over:
            break

    assert engine.state.wave == 2
    assert engine.state.score > 0
    names = _names(engine)
    assert "enemy_destroyed" in names
    assert "wave_complete" in names


def test_observe_is_plain_data(zigzag_engine: Engine) -> None:
    zigzag_engine.act("START")
    zigzag_engine.act("PLACE_TOWER", {"x": 400.0, "y": 50.0, "kind": "plasma"})
    zigzag_engine.step(0.1)
    obs = zigzag_engine.observe()
    assert obs["credits"] == 50
    assert obs["towers"][0]["kind"] == "plasma"
    assert len(obs["enemies"]) == 1
    assert obs["path"][0] == [0.0, 200.0]
