from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.drawing import Stroke
from ..game.errors import GameError
from ..game.registry import RoomRegistry, normalize_code


logger = logging.getLogger(__name__)


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > 16:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _normalize_avatar(raw: str) -> str:
    a = (raw or "").strip()
    if len(a) > 256 or "<" in a or ">" in a:
        return ""
    return a


def _error(code: str, message: str) -> dict:
    emit("room:error", {"error": code, "message": message})
    return {"ok": False, "error": code}


def _game_error(exc: GameError) -> dict:
    return _error(exc.code, str(exc))


def register_socketio_handlers(socketio: SocketIO, registry: RoomRegistry) -> None:
    def _current_room():
        return registry.find_by_connection(request.sid)

    def _leave_current_room() -> None:
        room = _current_room()
        if room is None:
            return
        leave_room(room.code)
        room.disconnect(request.sid)

    def _enter_room(room, name: str, avatar: str) -> dict:
        join_room(room.code)
        try:
            player = room.join(request.sid, name, avatar)
        except GameError as exc:
            leave_room(room.code)
            return _game_error(exc)
        if player is None:
            leave_room(room.code)
            return {"ok": False, "error": "join_failed"}
        return {"ok": True, "roomCode": room.code, "playerId": player.id}

    def _run(operation: str, *args) -> dict:
        room = _current_room()
        if room is None:
            return {"ok": False, "error": "not_in_room"}
        try:
            getattr(room, operation)(request.sid, *args)
        except GameError as exc:
            return _game_error(exc)
        return {"ok": True}

    @socketio.on("room:create")
    def room_create(data):
        payload = data or {}
        name = str(payload.get("name", "")).strip()
        avatar = _normalize_avatar(str(payload.get("avatar", "")))
        if not _validate_name(name):
            return _error("invalid_payload", "Please choose a valid name.")

        _leave_current_room()
        room = registry.create_room()
        emit("room:created", {"roomCode": room.code})
        return _enter_room(room, name, avatar)

    @socketio.on("room:join")
    def room_join(data):
        payload = data or {}
        room_code = normalize_code(str(payload.get("roomCode", "")))
        name = str(payload.get("name", "")).strip()
        avatar = _normalize_avatar(str(payload.get("avatar", "")))
        if not room_code or not _validate_name(name):
            return _error("invalid_payload", "Please choose a valid name and room.")

        try:
            room = registry.require_room(room_code)
        except GameError as exc:
            return _game_error(exc)

        # Leaving first also covers re-joining the same room under another name.
        _leave_current_room()
        return _enter_room(room, name, avatar)

    @socketio.on("game:start")
    def game_start(data):
        payload = data or {}
        rounds_raw: Any = payload.get("totalRounds", registry.settings.default_total_rounds)
        try:
            total_rounds = int(rounds_raw)
        except (TypeError, ValueError):
            return _error("invalid_rounds", "Invalid number of rounds.")
        if total_rounds < 1 or total_rounds > registry.settings.max_total_rounds:
            return _error("invalid_rounds", "Invalid number of rounds.")
        return _run("start_game", total_rounds)

    @socketio.on("game:play_again")
    def game_play_again(data=None):
        return _run("play_again")

    @socketio.on("game:choose_word")
    def game_choose_word(data):
        payload = data or {}
        word = str(payload.get("word", "")).strip()
        if not word:
            return {"ok": False, "error": "invalid_payload"}
        return _run("choose_word", word)

    @socketio.on("guess:submit")
    def guess_submit(data):
        payload = data or {}
        text = str(payload.get("text", ""))
        if not text.strip() or len(text) > 100:
            return {"ok": False, "error": "invalid_payload"}
        return _run("submit_guess", text)

    def _stroke(data) -> Stroke | None:
        try:
            return Stroke.from_payload((data or {}).get("stroke"))
        except ValueError:
            return None

    @socketio.on("draw:start_path")
    def draw_start_path(data):
        stroke = _stroke(data)
        if stroke is None:
            return {"ok": False, "error": "invalid_payload"}
        return _run("start_path", stroke)

    @socketio.on("draw:continue_path")
    def draw_continue_path(data):
        stroke = _stroke(data)
        if stroke is None:
            return {"ok": False, "error": "invalid_payload"}
        return _run("continue_path", stroke)

    @socketio.on("draw:undo")
    def draw_undo(data=None):
        return _run("undo")

    @socketio.on("draw:clear")
    def draw_clear(data=None):
        return _run("clear_canvas")

    @socketio.on("game:scribble_check")
    def game_scribble_check(data=None):
        return _run("request_scribble_check")

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        room = _current_room()
        if room is None:
            return
        logger.debug("sid %s left room %s (%s)", request.sid, room.code, reason)
        room.disconnect(request.sid)
