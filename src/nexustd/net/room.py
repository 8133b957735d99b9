from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

ROOM_KEY_PREFIX = "room:"


class RoomFormatError(ValueError):
    pass


@dataclass(slots=True)
class PlayerSlot:
    id: str
    name: str
    ready: bool = False


@dataclass(slots=True)
class Room:
    room_id: str
    host: PlayerSlot
    guest: PlayerSlot | None = None
    game_started: bool = False
    current_turn: str | None = None
    game_state: dict[str, Any] | None = None
    last_updated: int = 0
    version: int = 0

    def other_player_id(self, player_id: str) -> str | None:
        if self.guest is None:
            return None
        if player_id == self.host.id:
            return self.guest.id
        if player_id == self.guest.id:
            return self.host.id
        return None


def room_key(room_id: str) -> str:
    return f"{ROOM_KEY_PREFIX}{room_id}"


def _slot_to_dict(slot: PlayerSlot | None) -> dict[str, Any] | None:
    if slot is None:
        return None
    return {"id": slot.id, "name": slot.name, "ready": bool(slot.ready)}


def _slot_from_dict(raw: Any) -> PlayerSlot | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise RoomFormatError(f"player slot must be an object, got {raw!r}")
    try:
        return PlayerSlot(id=str(raw["id"]), name=str(raw["name"]), ready=bool(raw.get("ready", False)))
    except KeyError as exc:
        raise RoomFormatError(f"player slot missing {exc}") from exc


def _int_field(raw: dict[str, Any], key: str) -> int:
    try:
        return int(raw.get(key, 0) or 0)
    except (TypeError, ValueError) as exc:
        raise RoomFormatError(f"room field {key} must be an integer") from exc


def room_to_dict(room: Room) -> dict[str, Any]:
    return {
        "roomId": room.room_id,
        "host": _slot_to_dict(room.host),
        "guest": _slot_to_dict(room.guest),
        "gameStarted": bool(room.game_started),
        "currentTurn": room.current_turn,
        "gameState": room.game_state,
        "lastUpdated": int(room.last_updated),
        "version": int(room.version),
    }


def room_from_dict(raw: Any) -> Room:
    if not isinstance(raw, dict):
        raise RoomFormatError(f"room must be an object, got {type(raw).__name__}")
    try:
        room_id = str(raw["roomId"])
        host = _slot_from_dict(raw["host"])
    except KeyError as exc:
        raise RoomFormatError(f"room missing {exc}") from exc
    if host is None:
        raise RoomFormatError(f"room {room_id!r} has no host")
    current_turn = raw.get("currentTurn")
    game_state = raw.get("gameState")
    if game_state is not None and not isinstance(game_state, dict):
        raise RoomFormatError(f"room {room_id!r} gameState must be an object")
    return Room(
        room_id=room_id,
        host=host,
        guest=_slot_from_dict(raw.get("guest")),
        game_started=bool(raw.get("gameStarted", False)),
        current_turn=None if current_turn is None else str(current_turn),
        game_state=game_state,
        last_updated=_int_field(raw, "lastUpdated"),
        version=_int_field(raw, "version"),
    )


def encode_room(room: Room) -> str:
    return json.dumps(room_to_dict(room), separators=(",", ":"))


def decode_room(text: str) -> Room:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RoomFormatError(f"room record is not valid JSON: {exc}") from exc
    return room_from_dict(raw)
