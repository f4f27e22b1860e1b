from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game import service
from ..game.errors import RoomCodeExhausted, RoomError
from ..game.models import Room
from ..game.registry import RoomRegistry
from . import events

logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def _display_name(payload: dict) -> str:
    return str(payload.get("playerName", payload.get("displayName", "")) or "")


def register_socketio_handlers(socketio: SocketIO, registry: RoomRegistry) -> None:
    def _view_for(room: Room, viewer_sid: str) -> dict:
        state = service.get_state(room)
        return service.room_view(state, viewer_id=viewer_sid, redact=registry.settings.redact_word)

    def _broadcast_room_state(event: str, room: Room) -> None:
        state = service.get_state(room)
        drawer_id = state["currentDrawer"]

        if registry.settings.redact_word and drawer_id and not state["gameEnded"]:
            socketio.emit(event, service.room_view(state), to=room.id, skip_sid=drawer_id)
            socketio.emit(event, state, to=drawer_id)
            return

        socketio.emit(event, service.room_view(state, redact=registry.settings.redact_word), to=room.id)

    def _notify(event: str, room: Room) -> None:
        if event == events.TIMER_UPDATE:
            with room.lock:
                payload = {"timeLeft": room.time_left, "round": room.round}
            socketio.emit(events.TIMER_UPDATE, payload, to=room.id)
            return
        _broadcast_room_state(event, room)

    registry.set_notifier(_notify)

    def _announce_departure(room: Room | None, sid: str) -> None:
        if room is None:
            return
        leave_room(room.id, sid=sid)
        # Empty rooms are already gone from the registry.
        if registry.get_room(room.id) is room:
            _broadcast_room_state(events.PLAYER_LEFT, room)

    @socketio.on("connect")
    def on_connect(auth=None):
        logger.debug("[connect] sid=%s", request.sid)

    @socketio.on(events.CREATE_ROOM)
    def create_room(data):
        payload = _payload(data)
        previous = registry.resolve(request.sid)

        try:
            room = registry.create_room(request.sid, _display_name(payload))
        except RoomError as exc:
            emit(events.ROOM_ERROR, exc.to_payload())
            return
        except RoomCodeExhausted:
            logger.exception("[room-create-failed] sid=%s", request.sid)
            return

        if previous is not None:
            _announce_departure(previous, request.sid)

        join_room(room.id)
        emit(events.ROOM_CREATED, {"roomId": room.id, "gameState": _view_for(room, request.sid)})

    @socketio.on(events.JOIN_ROOM)
    def join_game_room(data):
        payload = _payload(data)
        previous = registry.resolve(request.sid)

        try:
            room = registry.join_room(request.sid, payload.get("roomId", ""), _display_name(payload))
        except RoomError as exc:
            logger.info("[room-join-rejected] sid=%s error=%s", request.sid, exc.code)
            emit(events.ROOM_ERROR, exc.to_payload())
            return

        if previous is not None and previous is not room:
            _announce_departure(previous, request.sid)

        join_room(room.id)
        _broadcast_room_state(events.PLAYER_JOINED, room)

    @socketio.on(events.LEAVE_ROOM)
    def leave_game_room(data=None):
        _announce_departure(registry.leave(request.sid), request.sid)

    @socketio.on(events.START_GAME)
    def start_game(data=None):
        room = registry.start_game(request.sid)
        if room is None:
            return
        _broadcast_room_state(events.GAME_STARTED, room)

    @socketio.on(events.DRAWING_DATA)
    def drawing_data(data):
        room = registry.submit_stroke(request.sid, data)
        if room is None:
            return
        emit(events.DRAWING_DATA, data, to=room.id, include_self=False)

    @socketio.on(events.CHAT_MESSAGE)
    def chat_message(data):
        if isinstance(data, str):
            text = data
        else:
            payload = _payload(data)
            text = payload.get("message", payload.get("text", ""))

        result = registry.submit_chat(request.sid, text)
        if result is None:
            return

        room, msg = result
        socketio.emit(events.CHAT_MESSAGE, msg.to_payload(), to=room.id)
        if msg.is_correct_guess:
            _broadcast_room_state(events.GAME_UPDATE, room)

    @socketio.on(events.CLEAR_CANVAS)
    def clear_canvas(data=None):
        room = registry.clear_canvas(request.sid)
        if room is None:
            return
        socketio.emit(events.CLEAR_CANVAS, to=room.id)

    @socketio.on(events.GET_GAME_STATE)
    def get_game_state(data=None):
        room = registry.resolve(request.sid)
        if room is None:
            return
        emit(events.GAME_UPDATE, _view_for(room, request.sid))

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        logger.debug("[disconnect] sid=%s reason=%s", request.sid, reason)
        room = registry.leave(request.sid)
        if room is not None and registry.get_room(room.id) is room:
            _broadcast_room_state(events.PLAYER_LEFT, room)
