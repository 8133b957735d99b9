from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

import gymnasium as gym
import numpy as np

from nexustd.core.config import DEFAULT_CONFIG, GameConfig
from nexustd.core.engine import Engine
from nexustd.core.model.path import get_path_pattern
from nexustd.core.model.towers import TOWER_DEFS
from nexustd.core.rules.placement import can_place_tower

from .obs import build_observation, flatten_observation, observation_size


logger = logging.getLogger(__name__)

NOOP = 0


@dataclass(frozen=True, slots=True)
class RewardConfig:
    score_weight: float = 1.0
    wave_bonus: float = 0.0
    terminal_loss_penalty: float = 100.0
    invalid_action_penalty: float = 0.0


def placement_grid(engine: Engine, cell: float) -> list[tuple[float, float]]:
    """Cell centres over the whole surface, row-major, in engine coordinates."""
    config = engine.config
    cols = int(config.base_width // cell)
    rows = int(config.base_height // cell)
    return [
        ((c + 0.5) * cell * engine.scale_x, (r + 0.5) * cell * engine.scale_y)
        for r in range(rows)
        for c in range(cols)
    ]


class NexusDefenseEnv(gym.Env):
    """
    Single-player engine behind a discrete action space.

    Action 0 is a no-op; action ``1 + kind * cells + cell`` places a tower of
    that kind at the centre of that grid cell. Every step then advances the
    engine by ``frames_per_step`` fixed frames.
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        *,
        path: str | None = None,
        width: float = 800.0,
        height: float = 400.0,
        config: GameConfig = DEFAULT_CONFIG,
        grid_cell: float = 40.0,
        frames_per_step: int = 30,
        max_steps: int = 2000,
        max_enemies: int = 32,
        strict_invalid_actions: bool = False,
        reward_config: RewardConfig | None = None,
    ) -> None:
        super().__init__()
        self.path_name = path
        self.width = float(width)
        self.height = float(height)
        self.config = config
        self.grid_cell = float(grid_cell)
        self.frames_per_step = int(frames_per_step)
        self.max_steps = int(max_steps)
        self.max_enemies = int(max_enemies)
        self.strict_invalid_actions = strict_invalid_actions
        self.reward_config = reward_config or RewardConfig()
        self.tower_kinds = tuple(TOWER_DEFS)

        self.engine: Engine | None = None
        self.cells: list[tuple[float, float]] = []
        self._step_count = 0
        self._last_action_mask: np.ndarray | None = None

        layout_engine = Engine(self._path_data(), width=self.width, height=self.height, config=self.config)
        self.cells = placement_grid(layout_engine, self.grid_cell)
        self.action_space = gym.spaces.Discrete(1 + len(self.tower_kinds) * len(self.cells))
        self.observation_space = gym.spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=(observation_size(self.max_enemies),),
            dtype=np.float32,
        )

    def _path_data(self):
        return get_path_pattern(self.path_name) if self.path_name else None

    def _observation(self) -> np.ndarray:
        obs_dict = build_observation(
            self.engine,
            max_enemies=self.max_enemies,
            max_towers=len(self.cells),
        )
        return np.asarray(flatten_observation(obs_dict, max_enemies=self.max_enemies), dtype=np.float32)

    def decode_action(self, action_id: int) -> tuple[str, float, float] | None:
        if action_id == NOOP:
            return None
        idx = int(action_id) - 1
        kind_idx, cell_idx = divmod(idx, len(self.cells))
        if kind_idx < 0 or kind_idx >= len(self.tower_kinds):
            raise ValueError(f"Invalid action id {action_id!r}")
        x, y = self.cells[cell_idx]
        return self.tower_kinds[kind_idx], x, y

    def _compute_action_mask(self) -> np.ndarray:
        if self.engine is None:
            raise RuntimeError("Environment not reset")
        engine = self.engine
        mask = np.zeros(self.action_space.n, dtype=bool)
        mask[NOOP] = True
        if not engine.state.playing or engine.state.paused or engine.state.game_over:
            return mask
        for kind_idx, kind in enumerate(self.tower_kinds):
            base = 1 + kind_idx * len(self.cells)
            for cell_idx, (x, y) in enumerate(self.cells):
                mask[base + cell_idx] = can_place_tower(
                    engine.state,
                    engine.registry,
                    engine.path_points,
                    x,
                    y,
                    kind,
                    scale_x=engine.scale_x,
                    config=engine.config,
                )
        return mask

    def action_masks(self) -> np.ndarray:
        if self._last_action_mask is None:
            self._last_action_mask = self._compute_action_mask()
        return self._last_action_mask

    def reset(self, *, seed: int | None = None, options: dict[str, Any] | None = None) -> tuple[np.ndarray, dict]:
        super().reset(seed=seed)
        if options and options.get("path"):
            self.path_name = str(options["path"])
        engine_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.engine = Engine(
            self._path_data(), width=self.width, height=self.height, config=self.config, seed=engine_seed
        )
        self.engine.act("START")
        self.engine.drain_events()
        self._step_count = 0
        self._last_action_mask = self._compute_action_mask()
        info = {"engine_seed": engine_seed, "path": self.engine.path.name, "action_mask": self._last_action_mask}
        return self._observation(), info

    def step(self, action: int) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        if self.engine is None or self._last_action_mask is None:
            raise RuntimeError("Environment not reset")
        engine = self.engine
        self._step_count += 1
        action_id = int(action)
        invalid_action = False
        if action_id < 0 or action_id >= self.action_space.n or not bool(self._last_action_mask[action_id]):
            if self.strict_invalid_actions:
                raise ValueError(f"Action not valid in current state: {action_id!r}")
            invalid_action = True
            action_id = NOOP

        prev_score = engine.state.score
        prev_wave = engine.state.wave
        decoded = self.decode_action(action_id)
        if decoded is not None:
            kind, x, y = decoded
            engine.act("PLACE_TOWER", {"x": x, "y": y, "kind": kind})

        for _ in range(self.frames_per_step):
            if engine.step(engine.config.frame_dt) == "game over":
                break
        engine.drain_events()

        rc = self.reward_config
        reward = (engine.state.score - prev_score) * rc.score_weight
        reward += (engine.state.wave - prev_wave) * rc.wave_bonus
        if invalid_action:
            reward -= rc.invalid_action_penalty
        terminated = bool(engine.state.game_over)
        if terminated:
            reward -= rc.terminal_loss_penalty
            logger.info("episode_done wave=%s score=%s steps=%s", engine.state.wave, engine.state.score, self._step_count)
        truncated = not terminated and self._step_count >= self.max_steps

        self._last_action_mask = self._compute_action_mask()
        info = {
            "invalid_action": invalid_action,
            "wave": engine.state.wave,
            "score": engine.state.score,
            "action_mask": self._last_action_mask,
        }
        return self._observation(), float(reward), terminated, truncated, info

    def render(self) -> None:
        return None
