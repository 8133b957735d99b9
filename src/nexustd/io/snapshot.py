from __future__ import annotations

import logging
import math
from typing import Any

from nexustd.core.model.enemies import ENEMY_DEFS
from nexustd.core.model.entities import Enemy, Projectile, Tower
from nexustd.core.model.path import path_from_points
from nexustd.core.model.state import EntityRegistry
from nexustd.core.model.towers import TOWER_DEFS


logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class SnapshotError(ValueError):
    pass


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _opt_float(value: Any) -> float | None:
    if value is None:
        return None
    return _as_float(value)


def _kind(raw: dict[str, Any], catalog: dict[str, Any], label: str) -> str:
    kind = str(raw["type"])
    if kind not in catalog:
        raise SnapshotError(f"unknown {label} type {kind!r}")
    return kind


def _entries(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise SnapshotError(f"snapshot {key!r} must be a list of objects")
    return raw


def _surface_size(raw: Any, default_w: float, default_h: float) -> tuple[float, float]:
    if raw is None:
        return default_w, default_h
    if not isinstance(raw, dict):
        raise SnapshotError(f"snapshot surface must be an object, got {type(raw).__name__}")
    width = _as_float(raw.get("width"), default_w)
    height = _as_float(raw.get("height"), default_h)
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise SnapshotError(f"invalid snapshot surface {width!r}x{height!r}")
    return width, height


def capture_snapshot(engine) -> dict[str, Any]:
    """
    Full copy of registry + GameState as JSON-ready data.

    Positions are in the publisher's surface coordinates; ``surface`` and
    ``clock`` let the reader rescale them and rebase its timers.
    """
    state = engine.state
    registry = engine.registry
    path = engine.path
    return {
        "version": SNAPSHOT_VERSION,
        "health": int(state.health),
        "credits": int(state.credits),
        "wave": int(state.wave),
        "score": int(state.score),
        "playing": bool(state.playing),
        "gameOver": bool(state.game_over),
        "lastWaveSpawn": state.last_wave_spawn_time,
        "enemiesInWave": int(state.enemies_spawned_this_wave),
        "rngState": int(state.rng_state),
        "clock": float(engine.elapsed),
        "surface": {"width": float(engine.width), "height": float(engine.height)},
        "gamePath": {
            "name": path.name,
            "width": float(path.base_width),
            "height": float(path.base_height),
            "points": [{"x": float(x), "y": float(y)} for x, y in path.points],
        },
        "towers": [
            {
                "x": t.x,
                "y": t.y,
                "type": t.kind,
                "level": t.level,
                "range": t.range,
                "damage": t.damage,
                "cost": t.cost,
                "fireInterval": t.fire_interval,
                "lastShot": t.last_shot,
            }
            for t in registry.towers
        ],
        "enemies": [
            {
                "x": e.x,
                "y": e.y,
                "type": e.kind,
                "waypoint": e.waypoint,
                "health": e.health,
                "maxHealth": e.max_health,
                "speed": e.speed,
                "value": e.value,
            }
            for e in registry.enemies
        ],
        "projectiles": [
            {
                "x": p.x,
                "y": p.y,
                "targetX": p.target_x,
                "targetY": p.target_y,
                "damage": p.damage,
                "speed": p.speed,
                "type": p.kind,
            }
            for p in registry.projectiles
        ],
    }


def registry_from_snapshot(data: dict[str, Any], *, sx: float = 1.0, sy: float = 1.0, time_shift: float = 0.0) -> EntityRegistry:
    def _shift(value: Any) -> float | None:
        t = _opt_float(value)
        return None if t is None else t + time_shift

    try:
        towers = [
            Tower(
                x=_as_float(raw["x"]) * sx,
                y=_as_float(raw["y"]) * sy,
                kind=_kind(raw, TOWER_DEFS, "tower"),
                level=_as_int(raw.get("level", 1), 1),
                range=_as_float(raw["range"]) * sx,
                damage=_as_int(raw["damage"]),
                cost=_as_int(raw.get("cost", 0)),
                fire_interval=_as_float(raw.get("fireInterval", 0.5), 0.5),
                last_shot=_shift(raw.get("lastShot")),
            )
            for raw in _entries(data, "towers")
        ]
        enemies = [
            Enemy(
                x=_as_float(raw["x"]) * sx,
                y=_as_float(raw["y"]) * sy,
                kind=_kind(raw, ENEMY_DEFS, "enemy"),
                waypoint=_as_int(raw["waypoint"], 1),
                health=_as_float(raw["health"]),
                max_health=_as_float(raw.get("maxHealth", raw["health"])),
                speed=_as_float(raw["speed"]),
                value=_as_int(raw["value"]),
            )
            for raw in _entries(data, "enemies")
        ]
        projectiles = [
            Projectile(
                x=_as_float(raw["x"]) * sx,
                y=_as_float(raw["y"]) * sy,
                target_x=_as_float(raw["targetX"]) * sx,
                target_y=_as_float(raw["targetY"]) * sy,
                damage=_as_float(raw["damage"]),
                speed=_as_float(raw["speed"]) * sx,
                kind=_kind(raw, TOWER_DEFS, "projectile"),
            )
            for raw in _entries(data, "projectiles")
        ]
    except (KeyError, TypeError, AttributeError) as exc:
        raise SnapshotError(f"malformed snapshot entity: {exc}") from exc
    return EntityRegistry(towers=towers, enemies=enemies, projectiles=projectiles)


def restore_snapshot(engine, data: dict[str, Any]) -> None:
    """
    Replace the engine's registry and GameState wholesale with ``data``.

    Timers are rebased onto the local clock so cooldowns keep their
    remaining time.
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"snapshot must be an object, got {type(data).__name__}")

    src_w, src_h = _surface_size(data.get("surface"), engine.width, engine.height)
    sx = engine.width / src_w
    sy = engine.height / src_h
    time_shift = engine.elapsed - _as_float(data.get("clock"), engine.elapsed)

    registry = registry_from_snapshot(data, sx=sx, sy=sy, time_shift=time_shift)

    raw_path = data.get("gamePath")
    if raw_path is not None and not isinstance(raw_path, dict):
        raise SnapshotError(f"snapshot gamePath must be an object, got {type(raw_path).__name__}")
    if raw_path and raw_path.get("points"):
        try:
            path = path_from_points(
                raw_path["points"],
                name=str(raw_path.get("name", "custom")),
                base_width=_as_float(raw_path.get("width"), 800.0),
                base_height=_as_float(raw_path.get("height"), 400.0),
            )
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"malformed snapshot path: {exc}") from exc
        engine.set_path(path)

    state = engine.state
    state.health = _as_int(data.get("health"), state.health)
    state.credits = _as_int(data.get("credits"), state.credits)
    state.wave = _as_int(data.get("wave"), state.wave)
    state.score = _as_int(data.get("score"), state.score)
    state.game_over = bool(data.get("gameOver", False))
    if state.game_over:
        state.playing = False
    elif "playing" in data:
        state.playing = bool(data["playing"])
    last_spawn = _opt_float(data.get("lastWaveSpawn"))
    state.last_wave_spawn_time = None if last_spawn is None else last_spawn + time_shift
    state.enemies_spawned_this_wave = _as_int(data.get("enemiesInWave"), 0)
    state.rng_state = _as_int(data.get("rngState"), state.rng_state) or 1

    engine.registry.replace(registry)
    logger.debug(
        "snapshot restored wave=%s towers=%s enemies=%s",
        state.wave,
        len(registry.towers),
        len(registry.enemies),
    )
