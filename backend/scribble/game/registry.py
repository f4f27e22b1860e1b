from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from functools import partial
from threading import RLock
from typing import Any, Callable

from . import service
from .clock import Scheduler, TurnClock
from .errors import GameAlreadyStarted, InvalidPayload, RoomCodeExhausted, RoomFull, RoomNotFound
from .models import ChatMessage, GameSettings, Room

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits

# (event name, room) -> None; used for transitions nobody requested (timer, grace advance).
Notifier = Callable[[str, Room], None]


@dataclass
class Membership:
    room_id: str
    display_name: str


def normalize_room_id(room_id: Any) -> str:
    return str(room_id or "").strip().upper()


def _clean_name(name: Any) -> str:
    return str(name or "").strip()


class RoomRegistry:
    """Owns every live room and the connection -> room mapping.

    Lock order is always registry lock first, then the room lock.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        settings: GameSettings | None = None,
        notify: Notifier | None = None,
        code_factory: Callable[[], str] | None = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self._scheduler = scheduler
        self._notify = notify
        self._code_factory = code_factory or self._random_code
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._connections: dict[str, Membership] = {}

    def set_notifier(self, notify: Notifier | None) -> None:
        self._notify = notify

    # ---- lookups ----

    def get_room(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(normalize_room_id(room_id))

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def resolve(self, connection_id: str) -> Room | None:
        with self._lock:
            membership = self._connections.get(connection_id)
            if membership is None:
                return None
            return self._rooms.get(membership.room_id)

    def membership(self, connection_id: str) -> Membership | None:
        with self._lock:
            return self._connections.get(connection_id)

    def stats(self) -> dict:
        with self._lock:
            return {"rooms": len(self._rooms), "players": len(self._connections)}

    # ---- lifecycle ----

    def create_room(self, connection_id: str, display_name: str) -> Room:
        name = _clean_name(display_name)
        if not name:
            raise InvalidPayload()

        with self._lock:
            self._detach_locked(connection_id)

            code = self._new_code_locked()
            room = Room(id=code, settings=self.settings)
            room.clock = TurnClock(self._scheduler, partial(self._on_tick, code), name=code)
            service.add_player(room, connection_id, name)

            self._rooms[code] = room
            self._connections[connection_id] = Membership(room_id=code, display_name=name)

        logger.info("[room-created] room=%s creator=%s", code, connection_id)
        return room

    def join_room(self, connection_id: str, room_id: str, display_name: str) -> Room:
        code = normalize_room_id(room_id)
        name = _clean_name(display_name)
        if not code or not name:
            raise InvalidPayload()

        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                raise RoomNotFound()

            current = self._connections.get(connection_id)
            if current is not None and current.room_id == code:
                return room

            with room.lock:
                if room.started:
                    raise GameAlreadyStarted()
                if len(room.players) >= self.settings.max_players:
                    raise RoomFull()
                service.add_player(room, connection_id, name)

            self._detach_locked(connection_id)
            self._connections[connection_id] = Membership(room_id=code, display_name=name)

        logger.info("[room-join] room=%s player=%s count=%d", code, connection_id, len(room.players))
        return room

    def leave(self, connection_id: str) -> Room | None:
        """Remove the connection from its room. Returns the room it left, if any."""
        with self._lock:
            return self._detach_locked(connection_id)

    def shutdown(self) -> None:
        with self._lock:
            for room in self._rooms.values():
                with room.lock:
                    if room.clock is not None:
                        room.clock.cancel()
            self._rooms.clear()
            self._connections.clear()

    # ---- routed room operations ----

    def start_game(self, connection_id: str) -> Room | None:
        room = self.resolve(connection_id)
        if room is None:
            return None
        return room if service.start_game(room) else None

    def submit_stroke(self, connection_id: str, stroke: Any) -> Room | None:
        room = self.resolve(connection_id)
        if room is None:
            return None
        return room if service.submit_stroke(room, connection_id, stroke) else None

    def clear_canvas(self, connection_id: str) -> Room | None:
        room = self.resolve(connection_id)
        if room is None:
            return None
        return room if service.clear_canvas(room, connection_id) else None

    def submit_chat(self, connection_id: str, text: str) -> tuple[Room, ChatMessage] | None:
        room = self.resolve(connection_id)
        if room is None:
            return None

        with room.lock:
            msg = service.submit_chat(room, connection_id, text)
            if msg is None:
                return None
            if msg.is_correct_guess and service.everyone_guessed(room):
                self._schedule_grace_advance(room)
        return room, msg

    # ---- internals ----

    def _random_code(self) -> str:
        return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(self.settings.room_code_length))

    def _new_code_locked(self) -> str:
        attempts = max(1, self.settings.room_code_attempts)
        for attempt in range(1, attempts + 1):
            code = self._code_factory()
            if code not in self._rooms:
                return code
            logger.warning("[room-code-collision] code=%s attempt=%d", code, attempt)
        raise RoomCodeExhausted(f"no free room code after {attempts} attempts")

    def _detach_locked(self, connection_id: str) -> Room | None:
        membership = self._connections.pop(connection_id, None)
        if membership is None:
            return None
        room = self._rooms.get(membership.room_id)
        if room is None:
            return None

        with room.lock:
            removed = service.remove_player(room, connection_id)
            if removed is None:
                return None
            if not room.players:
                del self._rooms[room.id]
                logger.info("[room-deleted] room=%s", room.id)
            elif service.everyone_guessed(room):
                self._schedule_grace_advance(room)

        logger.info("[room-leave] room=%s player=%s remaining=%d", room.id, connection_id, len(room.players))
        return room

    def _schedule_grace_advance(self, room: Room) -> None:
        logger.info("[turn-all-guessed] room=%s turn=%d", room.id, room.turn)
        self._scheduler.start_background_task(self._advance_after_grace, room.id, room.turn)

    def _advance_after_grace(self, room_id: str, turn: int) -> None:
        self._scheduler.sleep(self.settings.guess_grace_sec)

        room = self.get_room(room_id)
        if room is None:
            return
        with room.lock:
            # A timeout or drawer disconnect may have moved on already.
            if room.turn != turn or not room.in_turn:
                return
            service.advance_turn(room)
        self._publish("game-update", room)

    def _on_tick(self, room_id: str, generation: int) -> bool:
        room = self.get_room(room_id)
        if room is None:
            return False
        with room.lock:
            if room.clock is None or not room.clock.is_current(generation):
                return False
            advanced = service.tick(room)
            live = room.in_turn

        if live:
            self._publish("timer-update", room)
        if advanced:
            self._publish("game-update", room)
        return not advanced

    def _publish(self, event: str, room: Room) -> None:
        if self._notify is None:
            return
        try:
            self._notify(event, room)
        except Exception:
            logger.exception("[notify-error] event=%s room=%s", event, room.id)
