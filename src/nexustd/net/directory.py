from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Any, Callable

from .room import PlayerSlot, Room, RoomFormatError, decode_room, encode_room, room_key
from .store import KeyValueStore, StoreUnavailable


logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 7
_CREATE_ATTEMPTS = 5


def generate_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def now_ms() -> int:
    return int(time.time() * 1000)


class RoomDirectory:
    """
    Room records in the shared store, one key per room.

    Every operation is a plain read-modify-write: no lock, no transaction,
    the last writer wins. Mutating operations absorb ``StoreUnavailable``
    (logged, reported as failure); ``load_room`` lets it through so pollers
    can tell "store down" from "room gone".
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        id_factory: Callable[[], str] = generate_id,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self._new_id = id_factory
        self._clock = clock

    def load_room(self, room_id: str) -> Room | None:
        text = self.store.get(room_key(room_id))
        if text is None:
            return None
        try:
            return decode_room(text)
        except RoomFormatError as exc:
            logger.warning("room=%s unreadable record ignored: %s", room_id, exc)
            return None

    def _save(self, room: Room) -> None:
        room.version += 1
        room.last_updated = int(self._clock())
        self.store.set(room_key(room.room_id), encode_room(room))

    def create_room(self, player_name: str) -> tuple[str, str] | None:
        """Returns (room_id, host_player_id), or None when the store failed."""
        try:
            for _ in range(_CREATE_ATTEMPTS):
                room_id = self._new_id()
                if self.store.get(room_key(room_id)) is None:
                    break
            else:
                logger.warning("create_room gave up after %s id collisions", _CREATE_ATTEMPTS)
                return None
            player_id = self._new_id()
            room = Room(
                room_id=room_id,
                host=PlayerSlot(id=player_id, name=str(player_name), ready=False),
                guest=None,
                game_started=False,
                current_turn=player_id,
                game_state=None,
            )
            self._save(room)
        except StoreUnavailable as exc:
            logger.warning("create_room failed: %s", exc)
            return None
        logger.info("room=%s created by host=%s", room_id, player_id)
        return room_id, player_id

    def join_room(self, room_id: str, player_name: str) -> str | None:
        """Returns the new guest id, or None when the room is missing or full."""
        try:
            room = self.load_room(room_id)
            if room is None:
                logger.info("join refused: room=%s not found", room_id)
                return None
            if room.guest is not None:
                logger.info("join refused: room=%s full", room_id)
                return None
            player_id = self._new_id()
            room.guest = PlayerSlot(id=player_id, name=str(player_name), ready=False)
            self._save(room)
        except StoreUnavailable as exc:
            logger.warning("join_room room=%s failed: %s", room_id, exc)
            return None
        logger.info("room=%s joined by guest=%s", room_id, player_id)
        return player_id

    def leave_room(self, room_id: str, player_id: str, *, is_host: bool) -> bool:
        try:
            if is_host:
                self.store.delete(room_key(room_id))
                logger.info("room=%s closed by host", room_id)
                return True
            room = self.load_room(room_id)
            if room is None:
                return False
            if room.guest is not None and room.guest.id == player_id:
                room.guest = None
                if room.current_turn != room.host.id:
                    room.current_turn = room.host.id
                self._save(room)
                logger.info("room=%s guest=%s left", room_id, player_id)
            return True
        except StoreUnavailable as exc:
            logger.warning("leave_room room=%s failed: %s", room_id, exc)
            return False

    def set_ready(self, room_id: str, player_id: str, ready: bool, *, is_host: bool) -> bool:
        try:
            room = self.load_room(room_id)
            if room is None:
                return False
            if is_host:
                room.host.ready = bool(ready)
            elif room.guest is not None and room.guest.id == player_id:
                room.guest.ready = bool(ready)
            else:
                return False
            self._save(room)
            return True
        except StoreUnavailable as exc:
            logger.warning("set_ready room=%s failed: %s", room_id, exc)
            return False

    def start_game(self, room_id: str, *, is_host: bool) -> bool:
        if not room_id or not is_host:
            return False
        try:
            room = self.load_room(room_id)
            if room is None:
                return False
            room.game_started = True
            self._save(room)
            return True
        except StoreUnavailable as exc:
            logger.warning("start_game room=%s failed: %s", room_id, exc)
            return False

    def end_turn(self, room_id: str, player_id: str) -> str | None:
        """Hand the turn to the other player; returns the new ``currentTurn``."""
        try:
            room = self.load_room(room_id)
            if room is None or room.guest is None:
                return None
            if room.current_turn != player_id:
                logger.warning("end_turn room=%s refused: turn belongs to %s", room_id, room.current_turn)
                return None
            room.current_turn = room.other_player_id(player_id)
            self._save(room)
            return room.current_turn
        except StoreUnavailable as exc:
            logger.warning("end_turn room=%s failed: %s", room_id, exc)
            return None

    def publish_snapshot(self, room_id: str, player_id: str, snapshot: dict[str, Any]) -> bool:
        """
        Write ``gameState``. Refused unless it is ``player_id``'s turn, so a
        peer whose turn already passed cannot overwrite the new owner's state.
        """
        try:
            room = self.load_room(room_id)
            if room is None:
                return False
            if room.current_turn != player_id:
                logger.debug("stale publish dropped room=%s player=%s", room_id, player_id)
                return False
            room.game_state = snapshot
            self._save(room)
            return True
        except StoreUnavailable as exc:
            logger.warning("publish_snapshot room=%s failed: %s", room_id, exc)
            return False
