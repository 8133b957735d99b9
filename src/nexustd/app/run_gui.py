from __future__ import annotations

import argparse
import logging
from pathlib import Path

from nexustd.app.session import GameSession
from nexustd.core.config import load_game_config
from nexustd.core.engine import Engine
from nexustd.gui.pyglet_app import run
from nexustd.io.activity import ActivityLog
from nexustd.net.coordinator import TurnCoordinator
from nexustd.net.directory import RoomDirectory
from nexustd.net.store import FileStore


def main() -> int:
    ap = argparse.ArgumentParser(description="Play Nexus Network Defense.")
    ap.add_argument("--store-dir", default=str(Path.home() / ".nexustd"), help="Shared store directory")
    ap.add_argument("--width", type=int, default=800)
    ap.add_argument("--height", type=int, default=400)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--config", default=None)
    ap.add_argument("--name", default="Player")
    group = ap.add_mutually_exclusive_group()
    group.add_argument("--host", action="store_true", help="Create a multiplayer room")
    group.add_argument("--join", metavar="ROOM_ID", default=None, help="Join a multiplayer room")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = FileStore(args.store_dir)
    config = load_game_config(args.config)
    engine = Engine(width=args.width, height=args.height, config=config, seed=args.seed)
    activity = ActivityLog(store, limit=config.activity_limit)
    coordinator = TurnCoordinator(RoomDirectory(store), engine)
    session = GameSession(engine, coordinator=coordinator, listeners=[activity.handle])

    if args.host:
        room_id = session.host_room(args.name)
        if room_id is None:
            print("could not create a room (store unavailable)")
            return 1
        print(f"room id: {room_id}")
    elif args.join:
        if not session.join_room(args.join, args.name):
            print(f"could not join room {args.join} (missing or full)")
            return 1

    run(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
