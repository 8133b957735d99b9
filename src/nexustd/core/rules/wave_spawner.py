# src/nexustd/core/rules/wave_spawner.py
from __future__ import annotations

from ..config import DEFAULT_CONFIG, GameConfig
from ..events import emit
from ..model.enemies import ENEMY_KINDS, get_enemy_def
from ..model.entities import Enemy
from ..rng import rand_index


def wave_quota(state, config: GameConfig = DEFAULT_CONFIG) -> int:
    return int(state.wave) * int(config.enemies_per_wave)


def enemy_health_for_wave(base_health: float, wave: int, config: GameConfig = DEFAULT_CONFIG) -> float:
    return float(base_health) + (int(wave) - 1) * float(config.health_growth)


def spawn_enemy(state, registry, path_points, kind: str, *, config: GameConfig = DEFAULT_CONFIG) -> Enemy:
    """
    Place a new enemy on the first waypoint, walking toward the second.
    Health scales with the current wave.
    """
    enemy_def = get_enemy_def(kind)
    x0, y0 = path_points[0]
    health = enemy_health_for_wave(enemy_def.health, state.wave, config)
    enemy = Enemy(
        x=float(x0),
        y=float(y0),
        kind=enemy_def.kind,
        waypoint=1,
        health=health,
        max_health=health,
        speed=float(enemy_def.speed),
        value=int(enemy_def.value),
    )
    registry.enemies.append(enemy)
    return enemy


def maybe_spawn_enemy(
    state,
    registry,
    path_points,
    now: float,
    *,
    config: GameConfig = DEFAULT_CONFIG,
) -> Enemy | None:
    """
    At most one spawn per call: the interval since the last spawn must have
    elapsed and the wave quota must not be reached yet.
    """
    last = state.last_wave_spawn_time
    if last is not None and now - last <= config.spawn_interval:
        return None
    if state.enemies_spawned_this_wave >= wave_quota(state, config):
        return None

    kind = ENEMY_KINDS[rand_index(state, len(ENEMY_KINDS))]
    enemy = spawn_enemy(state, registry, path_points, kind, config=config)
    state.last_wave_spawn_time = float(now)
    state.enemies_spawned_this_wave += 1
    return enemy


def check_wave_complete(state, registry, *, config: GameConfig = DEFAULT_CONFIG, events=None) -> bool:
    if registry.enemies:
        return False
    if state.enemies_spawned_this_wave < wave_quota(state, config):
        return False

    completed = state.wave
    state.wave += 1
    state.credits += int(config.wave_bonus)
    state.enemies_spawned_this_wave = 0
    emit(events, "wave_complete", wave=completed, bonus=int(config.wave_bonus))
    return True
