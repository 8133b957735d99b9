from types import SimpleNamespace

import pytest

from nexustd.core.model.entities import Enemy, Tower
from nexustd.core.model.state import EntityRegistry, GameState
from nexustd.core.rules.tower_attack import select_target, step_towers, tower_ready


def _tower(x: float = 0.0, y: float = 0.0, rng: float = 100.0, last_shot: float | None = None) -> Tower:
    return Tower(
        x=x, y=y, kind="laser", level=1, range=rng, damage=25, cost=50, fire_interval=0.5, last_shot=last_shot
    )


def _enemy(x: float, y: float) -> Enemy:
    return Enemy(x=x, y=y, kind="virus", waypoint=1, health=50, max_health=50, speed=2, value=10)


def test_target_is_first_in_range_not_nearest() -> None:
    far = _enemy(90.0, 0.0)
    near = _enemy(10.0, 0.0)
    assert select_target(_tower(), [far, near]) is far


def test_range_edge_is_inclusive() -> None:
    edge = _enemy(100.0, 0.0)
    outside = _enemy(100.5, 0.0)
    assert select_target(_tower(), [outside, edge]) is edge
    assert select_target(_tower(), [outside]) is None


@pytest.mark.parametrize(
    ("last_shot", "now", "ready"),
    [(None, 0.0, True), (1.0, 1.5, False), (1.0, 1.51, True), (1.0, 1.2, False)],
)
def test_cooldown_is_strictly_greater_than_interval(last_shot, now, ready) -> None:
    assert tower_ready(SimpleNamespace(last_shot=last_shot, fire_interval=0.5), now) is ready


def test_fire_copies_target_position_and_records_shot_time() -> None:
    target = _enemy(30.0, 40.0)
    reg = EntityRegistry(towers=[_tower()], enemies=[target])
    events: list = []

    fired = step_towers(GameState(), reg, 2.0, events=events)

    assert len(fired) == 1
    projectile = reg.projectiles[0]
    assert (projectile.target_x, projectile.target_y) == (30.0, 40.0)
    assert projectile.speed == 8.0
    assert projectile.damage == 25
    assert reg.towers[0].last_shot == 2.0
    assert [e.name for e in events] == ["shot_fired"]

    target.x = 99.0
    assert projectile.target_x == 30.0
    assert step_towers(GameState(), reg, 2.3) == []


def test_projectile_speed_scales_with_surface() -> None:
    reg = EntityRegistry(towers=[_tower()], enemies=[_enemy(10.0, 0.0)])
    step_towers(GameState(), reg, 0.0, scale_x=1.5)
    assert reg.projectiles[0].speed == pytest.approx(12.0)
