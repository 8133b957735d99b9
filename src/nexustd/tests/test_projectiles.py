from nexustd.core.model.entities import Enemy, Projectile
from nexustd.core.model.state import EntityRegistry, GameState
from nexustd.core.rules.projectiles import step_projectiles


def _enemy(x: float, y: float, health: float = 50.0, value: int = 10) -> Enemy:
    return Enemy(x=x, y=y, kind="virus", waypoint=1, health=health, max_health=50.0, speed=2.0, value=value)


def _projectile(x: float, y: float, tx: float, ty: float, damage: float = 25.0) -> Projectile:
    return Projectile(x=x, y=y, target_x=tx, target_y=ty, damage=damage, speed=8.0, kind="laser")


def test_projectile_travels_toward_target() -> None:
    reg = EntityRegistry(projectiles=[_projectile(0.0, 0.0, 100.0, 0.0)])
    step_projectiles(GameState(), reg)
    assert reg.projectiles[0].x == 8.0


def test_exactly_zero_health_is_a_kill() -> None:
    s = GameState(credits=0, score=0)
    reg = EntityRegistry(enemies=[_enemy(50.0, 50.0, health=25.0)], projectiles=[_projectile(45.0, 50.0, 50.0, 50.0)])
    events: list = []

    kills = step_projectiles(s, reg, events=events)

    assert kills == 1
    assert reg.enemies == []
    assert reg.projectiles == []
    assert s.credits == 10
    assert s.score == 100
    assert [e.name for e in events] == ["enemy_destroyed"]


def test_kill_pays_exactly_once_with_two_landings_same_tick() -> None:
    s = GameState(credits=0, score=0)
    reg = EntityRegistry(
        enemies=[_enemy(50.0, 50.0, health=20.0)],
        projectiles=[_projectile(48.0, 50.0, 50.0, 50.0), _projectile(52.0, 50.0, 50.0, 50.0)],
    )

    assert step_projectiles(s, reg) == 1
    assert s.credits == 10
    assert s.score == 100
    step_projectiles(s, reg)
    assert s.credits == 10


def test_landing_damages_everything_near_target_point() -> None:
    s = GameState(credits=0)
    a = _enemy(50.0, 50.0)
    b = _enemy(60.0, 55.0)
    c = _enemy(90.0, 50.0)
    reg = EntityRegistry(enemies=[a, b, c], projectiles=[_projectile(50.0, 45.0, 50.0, 50.0)])

    step_projectiles(s, reg)

    assert a.health == 25.0
    assert b.health == 25.0
    assert c.health == 50.0
    assert s.credits == 0


def test_projectile_misses_when_target_moved_away() -> None:
    s = GameState(credits=0)
    enemy = _enemy(200.0, 200.0)
    reg = EntityRegistry(enemies=[enemy], projectiles=[_projectile(99.0, 100.0, 100.0, 100.0)])

    step_projectiles(s, reg)

    assert reg.projectiles == []
    assert enemy.health == 50.0
