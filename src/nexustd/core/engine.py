# src/nexustd/core/engine.py
from __future__ import annotations

import logging
from typing import Any, Literal

from .config import DEFAULT_CONFIG, GameConfig
from .events import GameEvent, emit
from .model.entities import Tower
from .model.path import PathData, random_path
from .model.state import EntityRegistry, GameState
from .rng import seed_state
from .rules.enemy_motion import step_enemies
from .rules.placement import place_tower
from .rules.projectiles import step_projectiles
from .rules.tower_attack import step_towers
from .rules.wave_spawner import check_wave_complete, maybe_spawn_enemy


logger = logging.getLogger(__name__)

ActionType = Literal[
    "START",
    "PAUSE_TOGGLE",
    "RESET",
    "PLACE_TOWER",
]


class Engine:
    """
    Headless simulation: no GUI, no I/O.

    ``tick(now)`` is one frame of the game with ``now`` the elapsed time in
    seconds. ``step(dt)`` is the fixed-step driver used by frame callbacks.
    """

    def __init__(
        self,
        path: PathData | None = None,
        *,
        width: float = 800.0,
        height: float = 400.0,
        config: GameConfig = DEFAULT_CONFIG,
        seed: int | None = None,
    ) -> None:
        self.config = config
        self.width = float(width)
        self.height = float(height)
        self.state = self._fresh_state()
        seed_state(self.state, seed)
        self.registry = EntityRegistry()
        self.events: list[GameEvent] = []

        self._fixed_path = path is not None
        self.path = path if path is not None else random_path(self.state)
        self.path_points = self.path.scaled(self.width, self.height)

        self.elapsed = 0.0
        self._accum = 0.0
        self._in_tick = False

    @property
    def scale_x(self) -> float:
        return self.width / self.config.base_width

    @property
    def scale_y(self) -> float:
        return self.height / self.config.base_height

    def _fresh_state(self) -> GameState:
        return GameState(
            health=int(self.config.starting_health),
            credits=int(self.config.starting_credits),
        )

    def set_path(self, path: PathData) -> None:
        self.path = path
        self.path_points = path.scaled(self.width, self.height)

    def reset(self) -> None:
        rng_state = self.state.rng_state
        self.state = self._fresh_state()
        self.state.rng_state = rng_state
        self.registry.clear()
        if not self._fixed_path:
            self.set_path(random_path(self.state))
        self.elapsed = 0.0
        self._accum = 0.0
        emit(self.events, "game_reset", path=self.path.name, new_path=not self._fixed_path)

    def act(self, action_type: ActionType, payload: dict[str, Any] | None = None) -> Tower | None:
        if action_type == "RESET":
            self.reset()
            return None

        if self.state.game_over:
            return None

        if action_type == "START":
            if not self.state.playing:
                self.state.playing = True
                emit(self.events, "game_started")
            return None

        if action_type == "PAUSE_TOGGLE":
            if self.state.playing:
                self.state.paused = not self.state.paused
            return None

        if action_type == "PLACE_TOWER":
            if not payload or not self.state.playing or self.state.paused:
                return None
            x = payload.get("x")
            y = payload.get("y")
            if x is None or y is None:
                return None
            kind = str(payload.get("kind", "laser"))
            tower = place_tower(
                self.state,
                self.registry,
                self.path_points,
                float(x),
                float(y),
                tower_kind=kind,
                scale_x=self.scale_x,
                config=self.config,
            )
            if tower is None:
                logger.debug("placement refused kind=%s at (%.1f,%.1f)", kind, float(x), float(y))
                return None
            emit(self.events, "tower_placed", kind=tower.kind, x=tower.x, y=tower.y, cost=tower.cost)
            return tower

        raise ValueError(f"Unknown action_type={action_type!r}")

    def tick(self, now: float) -> None:
        """
        spawn -> move -> target/fire -> resolve hits -> wave check.
        """
        if self._in_tick:
            raise RuntimeError("Engine.tick re-entered while a tick is in flight")
        s = self.state
        if not s.playing or s.paused or s.game_over:
            return

        self._in_tick = True
        try:
            maybe_spawn_enemy(s, self.registry, self.path_points, now, config=self.config)

            breached = step_enemies(
                s,
                self.registry,
                self.path_points,
                scale_x=self.scale_x,
                scale_y=self.scale_y,
                config=self.config,
            )
            if breached is not None:
                s.game_over = True
                s.playing = False
                emit(self.events, "game_over", score=s.score, wave=s.wave)
                return

            step_towers(s, self.registry, now, scale_x=self.scale_x, config=self.config, events=self.events)
            step_projectiles(s, self.registry, scale_x=self.scale_x, config=self.config, events=self.events)
            check_wave_complete(s, self.registry, config=self.config, events=self.events)
        finally:
            self._in_tick = False

    def step(self, dt_seconds: float) -> str | None:
        """
        Advance in fixed frames of ``config.frame_dt``.
        """
        s = self.state
        if not s.playing or s.paused or s.game_over:
            return None

        frame_dt = self.config.frame_dt
        self._accum += max(0.0, dt_seconds)
        while self._accum >= frame_dt:
            self._accum -= frame_dt
            self.elapsed += frame_dt
            self.tick(self.elapsed)
            if self.state.game_over:
                return "game over"
        return None

    def drain_events(self) -> list[GameEvent]:
        events = self.events[:]
        self.events.clear()
        return events

    def observe(self) -> dict[str, Any]:
        s = self.state
        return {
            "health": s.health,
            "credits": s.credits,
            "wave": s.wave,
            "score": s.score,
            "playing": s.playing,
            "paused": s.paused,
            "game_over": s.game_over,
            "enemies_spawned_this_wave": s.enemies_spawned_this_wave,
            "path": [list(p) for p in self.path_points],
            "towers": [
                {
                    "x": t.x,
                    "y": t.y,
                    "kind": t.kind,
                    "level": t.level,
                    "range": t.range,
                    "damage": t.damage,
                    "cost": t.cost,
                }
                for t in self.registry.towers
            ],
            "enemies": [
                {
                    "x": e.x,
                    "y": e.y,
                    "kind": e.kind,
                    "health": e.health,
                    "max_health": e.max_health,
                    "waypoint": e.waypoint,
                }
                for e in self.registry.enemies
            ],
            "projectiles": [
                {"x": p.x, "y": p.y, "target_x": p.target_x, "target_y": p.target_y, "kind": p.kind}
                for p in self.registry.projectiles
            ],
        }
