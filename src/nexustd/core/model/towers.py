from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TowerKind = Literal["laser", "plasma", "quantum"]


@dataclass(frozen=True)
class TowerDef:
    kind: str
    title: str
    cost: int
    range: int
    damage: int
    fire_interval: float
    color: tuple[int, int, int]


TOWER_DEFS: dict[str, TowerDef] = {
    "laser": TowerDef(
        kind="laser",
        title="Laser Node",
        cost=50,
        range=80,
        damage=25,
        fire_interval=0.5,
        color=(59, 130, 246),
    ),
    "plasma": TowerDef(
        kind="plasma",
        title="Plasma Core",
        cost=100,
        range=60,
        damage=45,
        fire_interval=0.5,
        color=(6, 182, 212),
    ),
    "quantum": TowerDef(
        kind="quantum",
        title="Quantum Gate",
        cost=200,
        range=100,
        damage=80,
        fire_interval=0.5,
        color=(139, 92, 246),
    ),
}


def get_tower_def(kind: str) -> TowerDef:
    try:
        return TOWER_DEFS[kind]
    except KeyError as exc:
        raise KeyError(f"Unknown tower kind: {kind!r}") from exc


def list_tower_defs() -> list[TowerDef]:
    return list(TOWER_DEFS.values())


def cheapest_tower_def() -> TowerDef:
    return min(TOWER_DEFS.values(), key=lambda tower_def: tower_def.cost)
