from __future__ import annotations

import argparse
import logging

from nexustd.core.config import load_game_config
from nexustd.core.engine import Engine
from nexustd.core.model.path import get_path_pattern, load_path_json


def _parse_placement(raw: str) -> tuple[str, float, float]:
    try:
        kind, coords = raw.split(":", 1)
        x_str, y_str = coords.split(",", 1)
        return kind.strip(), float(x_str), float(y_str)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"placement must look like kind:x,y, got {raw!r}") from exc


def _resolve_path(path_arg: str | None):
    if path_arg is None:
        return None
    if path_arg.endswith(".json"):
        return load_path_json(path_arg)
    return get_path_pattern(path_arg)


def main() -> int:
    ap = argparse.ArgumentParser(description="Run the defense simulation without a window.")
    ap.add_argument("--path", default=None, help="Pattern name (e.g. zigzag) or path to a JSON path file")
    ap.add_argument("--seconds", type=float, default=30.0)
    ap.add_argument("--fps", type=int, default=60)
    ap.add_argument("--seed", type=int, default=1)
    ap.add_argument("--config", default=None, help="JSON config file")
    ap.add_argument("--set", dest="overrides", action="append", default=[], help="Override, e.g. game.wave_bonus=80")
    ap.add_argument("--place", action="append", type=_parse_placement, default=[], help="kind:x,y (repeatable)")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_game_config(args.config, args.overrides)
    engine = Engine(_resolve_path(args.path), config=config, seed=args.seed)
    engine.act("START")
    for kind, x, y in args.place:
        tower = engine.act("PLACE_TOWER", {"x": x, "y": y, "kind": kind})
        if tower is None:
            print(f"placement refused: {kind} at ({x:.0f},{y:.0f})")

    ticks = int(args.seconds * args.fps)
    dt = 1.0 / max(1, args.fps)
    for _ in range(ticks):
        engine.step(dt)
        for event in engine.drain_events():
            if event.name in ("wave_complete", "game_over"):
                logging.getLogger("nexustd.headless").info("%s %s", event.name, event.payload)
        if engine.state.game_over:
            break

    s = engine.state
    print(
        f"path={engine.path.name} wave={s.wave} credits={s.credits} score={s.score} "
        f"towers={len(engine.registry.towers)} enemies={len(engine.registry.enemies)} game_over={s.game_over}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
