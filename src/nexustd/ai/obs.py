from __future__ import annotations

import math
from typing import Any

from nexustd.core.rules.enemy_motion import distance_to_core
from nexustd.core.rules.wave_spawner import wave_quota


SCALAR_KEYS = (
    "health_norm",
    "credits_norm",
    "wave_norm",
    "score_norm",
    "wave_progress",
    "tower_count_norm",
    "enemy_count_norm",
)
ENEMY_SLOT_SIZE = 5


def build_observation(engine, *, max_enemies: int, max_towers: int) -> dict[str, Any]:
    s = engine.state
    config = engine.config
    quota = max(1, wave_quota(s, config))
    points = engine.path_points
    path_length = max(
        1.0,
        sum(math.hypot(x2 - x1, y2 - y1) for (x1, y1), (x2, y2) in zip(points[:-1], points[1:])),
    )
    enemy_slots: list[list[float]] = []
    for enemy in engine.registry.enemies[:max_enemies]:
        enemy_slots.append(
            [
                1.0,
                enemy.x / engine.width,
                enemy.y / engine.height,
                enemy.health / enemy.max_health if enemy.max_health else 0.0,
                distance_to_core(enemy, engine.path_points) / path_length,
            ]
        )
    return {
        "health_norm": s.health / max(1, config.starting_health),
        "credits_norm": s.credits / 1000.0,
        "wave_norm": s.wave / 50.0,
        "score_norm": s.score / 100_000.0,
        "wave_progress": s.enemies_spawned_this_wave / quota,
        "tower_count_norm": len(engine.registry.towers) / max(1, max_towers),
        "enemy_count_norm": len(engine.registry.enemies) / max(1, max_enemies),
        "enemy_slots": enemy_slots,
    }


def flatten_observation(obs: dict[str, Any], *, max_enemies: int) -> list[float]:
    values: list[float] = [float(obs.get(key, 0.0) or 0.0) for key in SCALAR_KEYS]
    enemy_slots = obs.get("enemy_slots", []) or []
    empty_slot = [0.0] * ENEMY_SLOT_SIZE
    for idx in range(max_enemies):
        slot = enemy_slots[idx] if idx < len(enemy_slots) else empty_slot
        values.extend(float(value) for value in slot)
    return values


def observation_size(max_enemies: int) -> int:
    return len(SCALAR_KEYS) + max_enemies * ENEMY_SLOT_SIZE
