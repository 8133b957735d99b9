from __future__ import annotations

import math
from typing import Iterable

from ..config import DEFAULT_CONFIG, GameConfig
from ..model.entities import Tower
from ..model.towers import TOWER_DEFS, get_tower_def

INSUFFICIENT_CREDITS = "insufficient credits"
ON_PATH = "on path"
TOO_CLOSE = "too close"
UNKNOWN_KIND = "unknown tower"


def placement_error(
    state,
    registry,
    path_points: Iterable[tuple[float, float]],
    x: float,
    y: float,
    tower_kind: str = "laser",
    *,
    scale_x: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
) -> str | None:
    """
    Reason the tower cannot go at (x, y), or None when it can.

    Only waypoints are checked against the clearance radius, not the
    segments between them.
    """
    if str(tower_kind) not in TOWER_DEFS:
        return UNKNOWN_KIND
    tower_def = get_tower_def(str(tower_kind))
    if int(state.credits) < tower_def.cost:
        return INSUFFICIENT_CREDITS

    clearance = config.path_clearance * scale_x
    for px, py in path_points:
        if math.hypot(px - x, py - y) < clearance:
            return ON_PATH

    separation = config.tower_separation * scale_x
    for tower in registry.towers:
        if math.hypot(tower.x - x, tower.y - y) < separation:
            return TOO_CLOSE
    return None


def can_place_tower(
    state,
    registry,
    path_points,
    x: float,
    y: float,
    tower_kind: str = "laser",
    *,
    scale_x: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
) -> bool:
    return (
        placement_error(state, registry, path_points, x, y, tower_kind, scale_x=scale_x, config=config)
        is None
    )


def place_tower(
    state,
    registry,
    path_points,
    x: float,
    y: float,
    tower_kind: str = "laser",
    *,
    scale_x: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
) -> Tower | None:
    path_points = list(path_points)
    if not can_place_tower(
        state,
        registry,
        path_points,
        x,
        y,
        tower_kind,
        scale_x=scale_x,
        config=config,
    ):
        return None
    tower_def = get_tower_def(str(tower_kind))
    state.credits = int(state.credits) - tower_def.cost
    tower = Tower(
        x=float(x),
        y=float(y),
        kind=tower_def.kind,
        level=1,
        range=tower_def.range * scale_x,
        damage=tower_def.damage,
        cost=tower_def.cost,
        fire_interval=tower_def.fire_interval,
        last_shot=None,
    )
    registry.towers.append(tower)
    return tower
