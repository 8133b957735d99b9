from __future__ import annotations
from dataclasses import dataclass


@dataclass(slots=True)
class Enemy:
    x: float
    y: float
    kind: str

    # Index into the path of the waypoint being walked toward.
    waypoint: int

    health: float
    max_health: float
    speed: float
    value: int


@dataclass(slots=True)
class Tower:
    x: float
    y: float
    kind: str
    level: int
    range: float
    damage: int
    cost: int
    fire_interval: float
    last_shot: float | None = None


@dataclass(slots=True)
class Projectile:
    x: float
    y: float
    # Copied from the target enemy at fire time, never a live reference.
    target_x: float
    target_y: float
    damage: float
    speed: float
    kind: str
