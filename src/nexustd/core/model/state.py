from __future__ import annotations
from dataclasses import dataclass, field
from .entities import Enemy, Projectile, Tower


@dataclass(slots=True)
class GameState:
    health: int = 100
    credits: int = 150
    wave: int = 1
    score: int = 0

    playing: bool = False
    paused: bool = False
    game_over: bool = False

    last_wave_spawn_time: float | None = None
    enemies_spawned_this_wave: int = 0

    rng_state: int = 1


@dataclass(slots=True)
class EntityRegistry:
    towers: list[Tower] = field(default_factory=list)
    enemies: list[Enemy] = field(default_factory=list)
    projectiles: list[Projectile] = field(default_factory=list)

    def clear(self) -> None:
        self.towers.clear()
        self.enemies.clear()
        self.projectiles.clear()

    def replace(self, other: "EntityRegistry") -> None:
        self.towers[:] = other.towers
        self.enemies[:] = other.enemies
        self.projectiles[:] = other.projectiles
