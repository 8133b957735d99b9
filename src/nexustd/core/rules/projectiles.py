# src/nexustd/core/rules/projectiles.py
from __future__ import annotations

import math

from ..config import DEFAULT_CONFIG, GameConfig
from ..events import emit


def step_projectiles(
    state,
    registry,
    *,
    scale_x: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
    events=None,
) -> int:
    """
    Move projectiles toward their fixed target point and resolve landings.

    A landing damages every enemy within ``hit_radius`` of the target point,
    whoever was aimed at. The projectile is gone afterwards, hit or miss.
    Returns the number of enemies killed this tick.
    """
    if state.paused or state.game_over:
        return 0

    hit_radius = config.hit_radius * scale_x
    kills = 0
    remaining = []
    for projectile in registry.projectiles:
        dx = projectile.target_x - projectile.x
        dy = projectile.target_y - projectile.y
        distance = math.hypot(dx, dy)

        if distance < projectile.speed:
            kills += _resolve_hit(state, registry, projectile, hit_radius, config=config, events=events)
            continue

        projectile.x += (dx / distance) * projectile.speed
        projectile.y += (dy / distance) * projectile.speed
        remaining.append(projectile)

    registry.projectiles[:] = remaining
    return kills


def _resolve_hit(state, registry, projectile, hit_radius: float, *, config: GameConfig, events) -> int:
    kills = 0
    survivors = []
    for enemy in registry.enemies:
        if math.hypot(enemy.x - projectile.target_x, enemy.y - projectile.target_y) < hit_radius:
            enemy.health -= projectile.damage
            if enemy.health <= 0:
                state.credits += int(enemy.value)
                state.score += int(enemy.value) * int(config.score_per_value)
                kills += 1
                emit(events, "enemy_destroyed", kind=enemy.kind, value=int(enemy.value), x=enemy.x, y=enemy.y)
                continue
        survivors.append(enemy)
    registry.enemies[:] = survivors
    return kills
