import numpy as np
import pytest

from nexustd.ai.env import NOOP, NexusDefenseEnv


def _first_placement(mask: np.ndarray) -> int:
    valid = np.flatnonzero(mask)
    return int(valid[valid != NOOP][0])


def test_reset_shapes_and_mask() -> None:
    env = NexusDefenseEnv(path="zigzag")
    obs, info = env.reset(seed=3)

    assert obs.shape == env.observation_space.shape
    assert obs.dtype == np.float32
    mask = env.action_masks()
    assert mask.shape == (env.action_space.n,)
    assert mask[NOOP]
    assert mask.sum() > 1
    assert info["path"] == "zigzag"


def test_masked_placement_is_applied() -> None:
    env = NexusDefenseEnv(path="zigzag", frames_per_step=10)
    env.reset(seed=3)
    action = _first_placement(env.action_masks())

    obs, reward, terminated, truncated, info = env.step(action)

    assert not info["invalid_action"]
    assert len(env.engine.registry.towers) == 1
    assert env.engine.state.credits == 150 - env.engine.registry.towers[0].cost
    assert obs.shape == env.observation_space.shape
    assert not terminated and not truncated


def test_masked_out_action_becomes_noop() -> None:
    env = NexusDefenseEnv(path="zigzag")
    env.reset(seed=3)
    blocked = int(np.flatnonzero(~env.action_masks())[0])

    _, _, _, _, info = env.step(blocked)

    assert info["invalid_action"]
    assert env.engine.registry.towers == []


def test_strict_mode_raises_on_invalid_action() -> None:
    env = NexusDefenseEnv(path="zigzag", strict_invalid_actions=True)
    env.reset(seed=3)
    with pytest.raises(ValueError):
        env.step(env.action_space.n + 5)


def test_same_seed_same_trajectory() -> None:
    def run(seed: int) -> np.ndarray:
        env = NexusDefenseEnv(frames_per_step=20)
        obs, _ = env.reset(seed=seed)
        for _ in range(5):
            obs, *_ = env.step(NOOP)
        return obs

    assert np.array_equal(run(8), run(8))


def test_truncates_after_max_steps() -> None:
    env = NexusDefenseEnv(path="zigzag", max_steps=2, frames_per_step=1)
    env.reset(seed=0)
    assert not env.step(NOOP)[3]
    assert env.step(NOOP)[3]


def test_step_before_reset_raises() -> None:
    with pytest.raises(RuntimeError):
        NexusDefenseEnv().step(NOOP)
