from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
import json
from pathlib import Path
from typing import Any


_SUPPORTED_SCHEMA_VERSIONS = {1}


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Numeric tunables of the simulation, in base-surface units (800x400)."""

    base_width: float = 800.0
    base_height: float = 400.0

    starting_health: int = 100
    starting_credits: int = 150

    spawn_interval: float = 1.0
    enemies_per_wave: int = 5
    health_growth: float = 10.0
    wave_bonus: int = 50
    score_per_value: int = 10

    arrival_epsilon: float = 5.0
    path_clearance: float = 30.0
    tower_separation: float = 40.0
    hit_radius: float = 20.0
    projectile_speed: float = 8.0

    frame_dt: float = 1.0 / 60.0
    poll_interval: float = 1.0
    activity_limit: int = 10


DEFAULT_CONFIG = GameConfig()

_ALLOWED_KEYS: dict[str, Any] = {
    "schema_version": None,
    "game": {f.name: None for f in fields(GameConfig)},
}


def load_json_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"config root must be a JSON object: {p}")
    _validate_config(payload)
    return payload


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in out and isinstance(out[key], dict) and isinstance(value, dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def apply_overrides(cfg: dict[str, Any], overrides_list: list[str] | None) -> dict[str, Any]:
    if not overrides_list:
        return cfg

    out = cfg
    for item in overrides_list:
        if "=" not in item:
            raise ValueError(f"override must contain '=': {item}")
        path_str, value_str = item.split("=", 1)
        if not path_str:
            raise ValueError(f"override path empty: {item}")
        keys = path_str.split(".")
        if any(not key for key in keys):
            raise ValueError(f"override path has empty segment: {item}")
        value = _cast_scalar(value_str)

        cursor = out
        for key in keys[:-1]:
            if key not in cursor or not isinstance(cursor[key], dict):
                cursor[key] = {}
            cursor = cursor[key]
        cursor[keys[-1]] = value
    _validate_config(out)
    return out


def config_to_dict(config: GameConfig) -> dict[str, Any]:
    return {"schema_version": 1, "game": asdict(config)}


def game_config_from_dict(cfg: dict[str, Any]) -> GameConfig:
    _validate_config(cfg)
    section = cfg.get("game") or {}
    kinds = {f.name: type(getattr(DEFAULT_CONFIG, f.name)) for f in fields(GameConfig)}
    values: dict[str, Any] = {}
    for key, value in section.items():
        try:
            values[key] = kinds[key](value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"game.{key} has invalid value {value!r}") from exc
    return replace(DEFAULT_CONFIG, **values)


def load_game_config(path: str | Path | None = None, overrides: list[str] | None = None) -> GameConfig:
    cfg = config_to_dict(DEFAULT_CONFIG)
    if path is not None:
        cfg = deep_merge(cfg, load_json_config(path))
    cfg = apply_overrides(cfg, overrides)
    return game_config_from_dict(cfg)


def _cast_scalar(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _validate_config(cfg: dict[str, Any]) -> None:
    version = cfg.get("schema_version", 1)
    if version not in _SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version={version!r}")
    _validate_keys(cfg, _ALLOWED_KEYS, prefix="")


def _validate_keys(node: dict[str, Any], allowed: dict[str, Any], *, prefix: str) -> None:
    for key, value in node.items():
        dotted = f"{prefix}{key}"
        if key not in allowed:
            raise ValueError(f"unknown config key: {dotted}")
        sub = allowed[key]
        if isinstance(sub, dict):
            if not isinstance(value, dict):
                raise ValueError(f"config key {dotted} must be an object")
            _validate_keys(value, sub, prefix=f"{dotted}.")
