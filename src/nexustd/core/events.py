from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

EventName = Literal[
    "game_started",
    "game_reset",
    "tower_placed",
    "shot_fired",
    "enemy_destroyed",
    "wave_complete",
    "game_over",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


def emit(state_events: list[GameEvent] | None, name: EventName, **payload: Any) -> None:
    """Queue an event; rules receive ``None`` when nobody is listening."""
    if state_events is None:
        return
    state_events.append(GameEvent(name=name, payload=payload))
