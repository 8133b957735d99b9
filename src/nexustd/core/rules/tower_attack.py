# src/nexustd/core/rules/tower_attack.py
from __future__ import annotations

import math

from ..config import DEFAULT_CONFIG, GameConfig
from ..events import emit
from ..model.entities import Enemy, Projectile, Tower


def tower_ready(tower: Tower, now: float) -> bool:
    if tower.last_shot is None:
        return True
    return now - tower.last_shot > tower.fire_interval


def select_target(tower: Tower, enemies: list[Enemy]) -> Enemy | None:
    """
    First enemy in registry order inside the tower's range.

    Not the nearest one: iteration order is the tie-break, and wave balance
    depends on it.
    """
    for enemy in enemies:
        if math.hypot(enemy.x - tower.x, enemy.y - tower.y) <= tower.range:
            return enemy
    return None


def fire_projectile(tower: Tower, target: Enemy, *, speed: float) -> Projectile:
    return Projectile(
        x=float(tower.x),
        y=float(tower.y),
        target_x=float(target.x),
        target_y=float(target.y),
        damage=float(tower.damage),
        speed=float(speed),
        kind=tower.kind,
    )


def step_towers(
    state,
    registry,
    now: float,
    *,
    scale_x: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
    events=None,
) -> list[Projectile]:
    """
    Tick tower -> target -> fire. Damage is applied later, when the
    projectile lands.
    """
    if state.paused or state.game_over:
        return []

    fired: list[Projectile] = []
    if not registry.towers or not registry.enemies:
        return fired

    speed = config.projectile_speed * scale_x
    for tower in registry.towers:
        if not tower_ready(tower, now):
            continue
        target = select_target(tower, registry.enemies)
        if target is None:
            continue
        projectile = fire_projectile(tower, target, speed=speed)
        registry.projectiles.append(projectile)
        tower.last_shot = float(now)
        fired.append(projectile)
        emit(events, "shot_fired", kind=tower.kind, x=tower.x, y=tower.y)
    return fired
