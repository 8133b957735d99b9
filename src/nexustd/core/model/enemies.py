from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EnemyKind = Literal["virus", "malware", "trojan"]


@dataclass(frozen=True)
class EnemyDef:
    kind: str
    health: float
    speed: float
    value: int
    size: float
    color: tuple[int, int, int]


ENEMY_DEFS: dict[str, EnemyDef] = {
    "virus": EnemyDef(kind="virus", health=50.0, speed=2.0, value=10, size=8.0, color=(239, 68, 68)),
    "malware": EnemyDef(kind="malware", health=100.0, speed=1.5, value=20, size=10.0, color=(249, 115, 22)),
    "trojan": EnemyDef(kind="trojan", health=200.0, speed=1.0, value=40, size=12.0, color=(220, 38, 38)),
}

# Spawn draws index into this tuple; order is part of the seeded behavior.
ENEMY_KINDS: tuple[str, ...] = tuple(ENEMY_DEFS)


def get_enemy_def(kind: str) -> EnemyDef:
    try:
        return ENEMY_DEFS[kind]
    except KeyError as exc:
        raise KeyError(f"Unknown enemy kind: {kind!r}") from exc
