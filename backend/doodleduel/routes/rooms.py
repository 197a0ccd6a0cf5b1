from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    registry = current_app.extensions["doodleduel"]
    room = registry.get_room(code)
    if not room or room.closed:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(room.public_state())
