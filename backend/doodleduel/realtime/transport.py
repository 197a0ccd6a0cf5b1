from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flask_socketio import SocketIO

from ..game.timers import TimerHandle


class SocketIONotifier:
    """Delivers room events through Socket.IO rooms (room code) or sids."""

    def __init__(self, socketio: SocketIO):
        self._socketio = socketio

    def emit(self, event: str, payload: Any = None, *, to: str, skip_sid: str | None = None) -> None:
        args = () if payload is None else (payload,)
        self._socketio.emit(event, *args, to=to, skip_sid=skip_sid)


class SocketIOScheduler:
    """Timers and off-lock work on Socket.IO background tasks.

    Works under both eventlet and threading async modes since it only uses
    ``start_background_task`` and ``sleep``. Timers sleep in short slices so
    a cancelled one releases its task within ``poll_interval``.
    """

    def __init__(self, socketio: SocketIO, poll_interval: float = 1.0):
        self._socketio = socketio
        self._poll_interval = poll_interval

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()

        def _runner() -> None:
            remaining = delay
            while remaining > 0 and not handle.cancelled:
                step = min(self._poll_interval, remaining)
                self._socketio.sleep(step)
                remaining -= step
            if not handle.cancelled:
                callback()

        self._socketio.start_background_task(_runner)
        return handle

    def spawn(self, fn: Callable[..., Any], *args: Any) -> None:
        self._socketio.start_background_task(fn, *args)
