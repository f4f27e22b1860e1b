from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game import service

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    registry = current_app.extensions["scribble"]
    room = registry.get_room(code)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    state = service.get_state(room)
    # Anonymous HTTP callers never see the live word.
    return jsonify(service.room_view(state, redact=registry.settings.redact_word))
