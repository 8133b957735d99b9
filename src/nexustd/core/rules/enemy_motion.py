# src/nexustd/core/rules/enemy_motion.py
from __future__ import annotations

import math

from ..config import DEFAULT_CONFIG, GameConfig


def step_enemies(
    state,
    registry,
    path_points,
    *,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
):
    """
    Walk every enemy one tick along the path.

    Within ``arrival_epsilon`` of its waypoint an enemy only advances its
    index; it moves again on the next tick. An enemy whose index runs past
    the last waypoint is at the core. Returns that enemy (the first one found)
    or None; the caller decides what game-over means, the enemy stays in the
    registry. Enemies after it in iteration order are not moved.
    """
    if state.paused or state.game_over:
        return None

    last_index = len(path_points) - 1
    epsilon = config.arrival_epsilon * scale_x

    for enemy in registry.enemies:
        if enemy.waypoint > last_index:
            return enemy

        tx, ty = path_points[enemy.waypoint]
        dx = tx - enemy.x
        dy = ty - enemy.y
        distance = math.hypot(dx, dy)

        if distance < epsilon:
            enemy.waypoint += 1
            if enemy.waypoint > last_index:
                return enemy
        else:
            enemy.x += (dx / distance) * enemy.speed * scale_x
            enemy.y += (dy / distance) * enemy.speed * scale_y
    return None


def distance_to_core(enemy, path_points) -> float:
    """Remaining walking distance, used to rank threats in observations."""
    if enemy.waypoint >= len(path_points):
        return 0.0
    tx, ty = path_points[enemy.waypoint]
    total = math.hypot(tx - enemy.x, ty - enemy.y)
    for (x1, y1), (x2, y2) in zip(path_points[enemy.waypoint:-1], path_points[enemy.waypoint + 1:]):
        total += math.hypot(x2 - x1, y2 - y1)
    return total
