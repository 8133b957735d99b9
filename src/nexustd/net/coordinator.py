from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging

from nexustd.io.snapshot import SnapshotError, capture_snapshot, restore_snapshot

from .directory import RoomDirectory
from .store import StoreUnavailable


logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "IDLE"
    LOBBY = "LOBBY"
    MY_TURN = "MY_TURN"
    OPPONENT_TURN = "OPPONENT_TURN"
    GAME_OVER = "GAME_OVER"


@dataclass(frozen=True, slots=True)
class MultiplayerState:
    is_multiplayer: bool = False
    room_id: str | None = None
    player_id: str | None = None
    player_name: str = ""
    opponent_name: str | None = None
    is_host: bool = False
    game_started: bool = False
    player_turn: str | None = None
    opponent_ready: bool = False
    ready: bool = False


DEFAULT_STATE = MultiplayerState()


class TurnCoordinator:
    """
    One player's side of the room protocol.

    The peer whose turn it is runs its engine and publishes snapshots; the
    other mirrors the last published snapshot. Nothing arbitrates between
    them: ``poll`` refreshes from the room record and last write wins.
    """

    def __init__(self, directory: RoomDirectory, engine=None) -> None:
        self.directory = directory
        self.engine = engine
        self.state = DEFAULT_STATE
        self.phase = Phase.IDLE
        self._adopted_version: int | None = None

    # lobby -----------------------------------------------------------------

    def create_room(self, player_name: str) -> str | None:
        created = self.directory.create_room(player_name)
        if created is None:
            return None
        room_id, player_id = created
        self.state = MultiplayerState(
            is_multiplayer=True,
            room_id=room_id,
            player_id=player_id,
            player_name=str(player_name),
            is_host=True,
            player_turn=player_id,
        )
        self.phase = Phase.LOBBY
        self._adopted_version = None
        return room_id

    def join_room(self, room_id: str, player_name: str) -> bool:
        player_id = self.directory.join_room(room_id, player_name)
        if player_id is None:
            return False
        try:
            room = self.directory.load_room(room_id)
        except StoreUnavailable as exc:
            logger.warning("room=%s joined but could not be re-read: %s", room_id, exc)
            room = None
        self.state = MultiplayerState(
            is_multiplayer=True,
            room_id=room_id,
            player_id=player_id,
            player_name=str(player_name),
            opponent_name=room.host.name if room is not None else None,
            is_host=False,
            player_turn=room.current_turn if room is not None else None,
            opponent_ready=room.host.ready if room is not None else False,
        )
        self.phase = Phase.LOBBY
        self._adopted_version = None
        return True

    def leave_room(self) -> None:
        s = self.state
        if s.room_id and s.player_id:
            self.directory.leave_room(s.room_id, s.player_id, is_host=s.is_host)
        self._reset()

    def set_ready(self, ready: bool) -> None:
        s = self.state
        if not s.room_id or not s.player_id:
            return
        if self.directory.set_ready(s.room_id, s.player_id, ready, is_host=s.is_host):
            self.state = replace(s, ready=bool(ready))

    def can_start(self) -> bool:
        s = self.state
        return (
            self.phase is Phase.LOBBY
            and s.is_host
            and s.opponent_name is not None
            and s.ready
            and s.opponent_ready
        )

    def start_game(self) -> None:
        s = self.state
        if not s.room_id or not s.is_host:
            return
        if self.directory.start_game(s.room_id, is_host=True):
            self.state = replace(s, game_started=True)
            self._enter_game()

    # turns -----------------------------------------------------------------

    @property
    def is_my_turn(self) -> bool:
        s = self.state
        return s.player_id is not None and s.player_turn == s.player_id

    def can_act(self) -> bool:
        if not self.state.is_multiplayer:
            return True
        return self.phase is Phase.MY_TURN

    def end_turn(self) -> bool:
        """Publish the local snapshot, then hand the turn over."""
        s = self.state
        if self.phase is not Phase.MY_TURN or not s.room_id or not s.player_id:
            return False
        if not self._publish():
            return False
        new_turn = self.directory.end_turn(s.room_id, s.player_id)
        if new_turn is None:
            return False
        self.state = replace(self.state, player_turn=new_turn)
        self.phase = Phase.OPPONENT_TURN
        logger.info("room=%s turn handed to %s", s.room_id, new_turn)
        return True

    def notice_game_over(self) -> None:
        if self.phase is Phase.GAME_OVER:
            return
        if self.phase is Phase.MY_TURN:
            self._publish()
        self.phase = Phase.GAME_OVER

    def poll(self) -> None:
        s = self.state
        if not s.is_multiplayer or not s.room_id:
            return
        try:
            room = self.directory.load_room(s.room_id)
        except StoreUnavailable as exc:
            logger.warning("poll room=%s skipped: %s", s.room_id, exc)
            return

        if room is None:
            if not s.is_host:
                logger.info("room=%s gone, host left", s.room_id)
                self._reset()
            return

        if s.is_host:
            guest = room.guest
            self.state = replace(
                s,
                opponent_name=guest.name if guest is not None else None,
                opponent_ready=guest.ready if guest is not None else False,
                game_started=room.game_started,
                player_turn=room.current_turn,
            )
        else:
            self.state = replace(
                s,
                opponent_name=room.host.name,
                opponent_ready=room.host.ready,
                game_started=room.game_started,
                player_turn=room.current_turn,
            )

        if self.phase is Phase.LOBBY:
            if self.state.game_started:
                self._enter_game()
                if self.phase is Phase.OPPONENT_TURN:
                    self._adopt(room)
            return

        if self.phase is Phase.OPPONENT_TURN:
            self._adopt(room)
            if self.phase is Phase.OPPONENT_TURN and self.is_my_turn:
                self.phase = Phase.MY_TURN
                logger.info("room=%s my turn", s.room_id)
            return

        if self.phase is Phase.MY_TURN:
            if not self.is_my_turn:
                self.phase = Phase.OPPONENT_TURN
                return
            self._publish()

    # internals -------------------------------------------------------------

    def _enter_game(self) -> None:
        self.phase = Phase.MY_TURN if self.is_my_turn else Phase.OPPONENT_TURN
        logger.info("room=%s game started phase=%s", self.state.room_id, self.phase.value)

    def _publish(self) -> bool:
        s = self.state
        if self.engine is None or not s.room_id or not s.player_id:
            return False
        return self.directory.publish_snapshot(s.room_id, s.player_id, capture_snapshot(self.engine))

    def _adopt(self, room) -> None:
        if self.engine is None or room.game_state is None:
            return
        if room.version == self._adopted_version:
            return
        try:
            restore_snapshot(self.engine, room.game_state)
        except SnapshotError as exc:
            logger.warning("room=%s snapshot rejected: %s", room.room_id, exc)
            return
        self._adopted_version = room.version
        if self.engine.state.game_over:
            self.phase = Phase.GAME_OVER

    def _reset(self) -> None:
        self.state = DEFAULT_STATE
        self.phase = Phase.IDLE
        self._adopted_version = None
