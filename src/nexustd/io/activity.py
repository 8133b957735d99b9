from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import time
from typing import Any, Callable

from nexustd.core.events import GameEvent
from nexustd.core.model.towers import get_tower_def
from nexustd.io.snapshot import _as_int
from nexustd.net.store import KeyValueStore, StoreUnavailable


logger = logging.getLogger(__name__)

ACTIVITY_KEY = "activities"
DEFAULT_LIMIT = 10


@dataclass(frozen=True, slots=True)
class Activity:
    type: str
    message: str
    timestamp: int


def describe_event(event: GameEvent) -> tuple[str, str] | None:
    """(type, message) for events worth a log line; shots and kills are not."""
    payload = event.payload
    if event.name == "game_started":
        return "System", "Defense system activated"
    if event.name == "game_reset":
        if payload.get("new_path", True):
            return "System", f"Defense system reset - New path generated: {payload.get('path')}"
        return "System", f"Defense system reset - Path kept: {payload.get('path')}"
    if event.name == "tower_placed":
        try:
            title = get_tower_def(str(payload.get("kind"))).title
        except KeyError:
            title = str(payload.get("kind"))
        return "Defense", f"{title} deployed"
    if event.name == "wave_complete":
        return "Wave", f"Wave {payload.get('wave')} completed"
    if event.name == "game_over":
        return "Alert", f"Nexus compromised - Score: {payload.get('score', 0)}"
    return None


class ActivityLog:
    """Most recent activities first, trimmed to ``limit``, kept in the store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = ACTIVITY_KEY,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.store = store
        self.key = key
        self.limit = int(limit)
        self._clock = clock or (lambda: int(time.time() * 1000))

    def recent(self) -> list[Activity]:
        try:
            text = self.store.get(self.key)
        except StoreUnavailable as exc:
            logger.warning("activity log read failed: %s", exc)
            return []
        if not text:
            return []
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("activity log unreadable: %s", exc)
            return []
        items: list[Activity] = []
        for entry in raw if isinstance(raw, list) else []:
            if not isinstance(entry, dict):
                continue
            items.append(
                Activity(
                    type=str(entry.get("type", "")),
                    message=str(entry.get("message", "")),
                    timestamp=_as_int(entry.get("timestamp")),
                )
            )
        return items

    def record(self, kind: str, message: str) -> Activity:
        activity = Activity(type=kind, message=message, timestamp=int(self._clock()))
        items = [activity, *self.recent()][: self.limit]
        payload: list[dict[str, Any]] = [
            {"type": a.type, "message": a.message, "timestamp": a.timestamp} for a in items
        ]
        try:
            self.store.set(self.key, json.dumps(payload))
        except StoreUnavailable as exc:
            logger.warning("activity log write failed: %s", exc)
        return activity

    def handle(self, event: GameEvent) -> None:
        described = describe_event(event)
        if described is None:
            return
        self.record(*described)
