import argparse
import random

from gymnasium.utils.env_checker import check_env

from nexustd.ai.env import NexusDefenseEnv


def _choose_action(mask, rng: random.Random) -> int:
    valid = [idx for idx, allowed in enumerate(mask) if bool(allowed)]
    if not valid:
        raise RuntimeError("No valid actions available")
    return rng.choice(valid)


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--path", default="zigzag")
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--steps", type=int, default=50)
    ap.add_argument("--frames-per-step", type=int, default=30)
    args = ap.parse_args()

    env = NexusDefenseEnv(path=args.path, frames_per_step=args.frames_per_step)
    check_env(env, skip_render_check=True)

    rng = random.Random(args.seed)
    env.reset(seed=args.seed)
    total = 0.0
    for step_idx in range(args.steps):
        action = _choose_action(env.action_masks(), rng)
        _, reward, terminated, truncated, info = env.step(action)
        total += reward
        if terminated or truncated:
            print(f"episode ended at step {step_idx} wave={info['wave']} score={info['score']}")
            env.reset(seed=args.seed + step_idx + 1)
    print(f"ok: {args.steps} steps, total reward {total:.1f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
