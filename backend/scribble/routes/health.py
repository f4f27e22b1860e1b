from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    registry = current_app.extensions["scribble"]
    stats = registry.stats()
    return jsonify({"status": "healthy", "rooms": stats["rooms"], "players": stats["players"]})
