import json

import pytest

from nexustd.core.engine import Engine
from nexustd.core.model.path import get_path_pattern
from nexustd.io.snapshot import SnapshotError, capture_snapshot, restore_snapshot


def _played_engine() -> Engine:
    engine = Engine(get_path_pattern("zigzag"), seed=21)
    engine.act("START")
    engine.step(2.0)
    engine.act("PLACE_TOWER", {"x": 75.0, "y": 160.0, "kind": "laser"})
    return engine


def test_snapshot_is_json_ready_with_camel_case_keys() -> None:
    snap = json.loads(json.dumps(capture_snapshot(_played_engine())))
    assert {"health", "credits", "wave", "score", "gameOver", "gamePath", "towers", "enemies", "projectiles"} <= set(snap)
    assert snap["towers"][0]["type"] == "laser"
    assert "maxHealth" in snap["enemies"][0]
    assert snap["gamePath"]["name"] == "zigzag"


def test_restore_replaces_state_and_registry_wholesale() -> None:
    source = _played_engine()
    source.state.wave = 3
    snap = json.loads(json.dumps(capture_snapshot(source)))

    target = Engine(get_path_pattern("spiral"), seed=99)
    target.act("START")
    target.act("PLACE_TOWER", {"x": 700.0, "y": 30.0})
    target.step(3.0)
    towers_list = target.registry.towers

    restore_snapshot(target, snap)

    assert target.state.wave == 3
    assert target.state.credits == source.state.credits
    assert target.state.rng_state == source.state.rng_state
    assert target.path.name == "zigzag"
    assert target.registry.towers is towers_list
    assert [(t.x, t.y) for t in target.registry.towers] == [(75.0, 160.0)]
    assert len(target.registry.enemies) == len(source.registry.enemies)


def test_restore_rescales_positions_to_local_surface() -> None:
    source = _played_engine()
    snap = capture_snapshot(source)

    target = Engine(get_path_pattern("zigzag"), width=1600, height=800)
    restore_snapshot(target, snap)

    tower = target.registry.towers[0]
    assert (tower.x, tower.y) == (150.0, 320.0)
    assert tower.range == pytest.approx(160.0)
    assert target.path_points[1] == (300.0, 400.0)
    for mine, theirs in zip(target.registry.enemies, source.registry.enemies):
        assert mine.x == pytest.approx(theirs.x * 2)
        assert mine.y == pytest.approx(theirs.y * 2)


def test_restore_rebases_timers_onto_local_clock() -> None:
    source = _played_engine()
    source.registry.towers[0].last_shot = source.elapsed - 0.2
    snap = capture_snapshot(source)

    target = Engine(get_path_pattern("zigzag"))
    restore_snapshot(target, snap)

    assert target.registry.towers[0].last_shot == pytest.approx(-0.2)
    assert target.state.last_wave_spawn_time == pytest.approx(source.state.last_wave_spawn_time - source.elapsed)


def test_game_over_snapshot_stops_play() -> None:
    source = _played_engine()
    snap = capture_snapshot(source)
    snap["gameOver"] = True

    target = Engine(get_path_pattern("zigzag"))
    target.act("START")
    restore_snapshot(target, snap)

    assert target.state.game_over
    assert not target.state.playing


@pytest.mark.parametrize(
    "bad",
    [
        ["not", "an", "object"],
        {"towers": [{"x": 1}]},
        {"enemies": [None]},
        {"gamePath": {"points": [{"x": 1, "y": 2}]}},
        {"gamePath": {"points": [[0, 0], [1, 1]], "width": 0}},
        {"gamePath": "zigzag"},
        {"surface": [800, 400]},
        {"surface": {"width": 0, "height": 400}},
        {"towers": {"x": 1}},
    ],
)
def test_malformed_snapshot_raises(bad) -> None:
    with pytest.raises(SnapshotError):
        restore_snapshot(Engine(get_path_pattern("zigzag")), bad)


@pytest.mark.parametrize("section", ["towers", "enemies", "projectiles"])
def test_unknown_entity_type_is_rejected(section: str) -> None:
    snap = capture_snapshot(_played_engine())
    snap["projectiles"] = [
        {"x": 75.0, "y": 160.0, "targetX": 90.0, "targetY": 200.0, "damage": 10, "speed": 5.0, "type": "laser"}
    ]
    assert snap[section]
    snap[section][0]["type"] = "railgun"

    target = Engine(get_path_pattern("zigzag"))
    with pytest.raises(SnapshotError):
        restore_snapshot(target, snap)
    assert target.registry.towers == []
    assert target.registry.enemies == []
