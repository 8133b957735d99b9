from __future__ import annotations

import logging
from typing import Callable

import pyglet

from nexustd.core.engine import Engine
from nexustd.core.events import GameEvent
from nexustd.core.model.entities import Tower
from nexustd.net.coordinator import Phase, TurnCoordinator


logger = logging.getLogger(__name__)

EventListener = Callable[[GameEvent], None]


class GameSession:
    """
    Wires the engine, the optional turn coordinator and event listeners to
    one cooperative clock.

    Two tasks run on the clock: the tick driver (every ``frame_dt``) and the
    poll driver (every ``poll_interval``, only while a room is active). Each
    is scheduled and unscheduled on its own; pausing and ``stop()`` cancel
    both.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        coordinator: TurnCoordinator | None = None,
        listeners: list[EventListener] | None = None,
        clock: pyglet.clock.Clock | None = None,
    ) -> None:
        self.engine = engine
        self.coordinator = coordinator
        self.listeners: list[EventListener] = list(listeners or [])
        self.clock = clock if clock is not None else pyglet.clock.get_default()
        self._ticking = False
        self._polling = False

    @property
    def ticking(self) -> bool:
        return self._ticking

    @property
    def polling(self) -> bool:
        return self._polling

    @property
    def multiplayer(self) -> bool:
        return self.coordinator is not None and self.coordinator.state.is_multiplayer

    # commands --------------------------------------------------------------

    def start(self) -> bool:
        if self.multiplayer:
            coordinator = self.coordinator
            if coordinator.phase is Phase.LOBBY:
                if not coordinator.can_start():
                    logger.info("start refused: lobby not ready")
                    return False
                coordinator.start_game()
            if not coordinator.can_act():
                return False
        self.engine.act("START")
        self._dispatch()
        self._start_ticking()
        return True

    def toggle_pause(self) -> None:
        if self.multiplayer and not self.coordinator.can_act():
            return
        self.engine.act("PAUSE_TOGGLE")
        if self.engine.state.paused:
            self._stop_ticking()
            self._stop_polling()
        else:
            if self.multiplayer:
                self._start_polling()
            self._start_ticking()

    def place_tower(self, x: float, y: float, kind: str) -> Tower | None:
        if self.multiplayer and not self.coordinator.can_act():
            return None
        tower = self.engine.act("PLACE_TOWER", {"x": x, "y": y, "kind": kind})
        self._dispatch()
        return tower

    def reset(self) -> None:
        if self.multiplayer and not self.coordinator.can_act():
            return
        self._stop_ticking()
        self.engine.act("RESET")
        self._dispatch()

    def host_room(self, player_name: str) -> str | None:
        if self.coordinator is None:
            raise RuntimeError("session has no turn coordinator")
        room_id = self.coordinator.create_room(player_name)
        if room_id is not None:
            self._start_polling()
        return room_id

    def join_room(self, room_id: str, player_name: str) -> bool:
        if self.coordinator is None:
            raise RuntimeError("session has no turn coordinator")
        joined = self.coordinator.join_room(room_id, player_name)
        if joined:
            self._start_polling()
        return joined

    def end_turn(self) -> bool:
        if not self.multiplayer:
            return False
        return self.coordinator.end_turn()

    def leave_room(self) -> None:
        self._stop_polling()
        if self.coordinator is not None and self.coordinator.state.room_id:
            self.coordinator.leave_room()

    def stop(self) -> None:
        self._stop_ticking()
        self.leave_room()

    # drivers ---------------------------------------------------------------

    def _start_ticking(self) -> None:
        if self._ticking:
            return
        self.clock.schedule_interval(self._on_frame, self.engine.config.frame_dt)
        self._ticking = True

    def _stop_ticking(self) -> None:
        if not self._ticking:
            return
        self.clock.unschedule(self._on_frame)
        self._ticking = False

    def _start_polling(self) -> None:
        if self._polling:
            return
        self.clock.schedule_interval(self._on_poll, self.engine.config.poll_interval)
        self._polling = True

    def _stop_polling(self) -> None:
        if not self._polling:
            return
        self.clock.unschedule(self._on_poll)
        self._polling = False

    def _on_frame(self, dt: float) -> None:
        # Mirroring side: the opponent's engine is authoritative.
        if self.multiplayer and not self.coordinator.can_act():
            return
        self.engine.step(dt)
        if self.engine.state.game_over:
            self._stop_ticking()
            if self.multiplayer:
                self.coordinator.notice_game_over()
        self._dispatch()

    def _on_poll(self, dt: float) -> None:
        coordinator = self.coordinator
        if coordinator is None:
            self._stop_polling()
            return
        coordinator.poll()
        if coordinator.phase is Phase.IDLE:
            logger.info("room closed, polling stopped")
            self._stop_polling()
            self._stop_ticking()
            return
        if coordinator.phase is Phase.MY_TURN and self.engine.state.playing:
            self._start_ticking()

    def _dispatch(self) -> None:
        for event in self.engine.drain_events():
            for listener in self.listeners:
                listener(event)
