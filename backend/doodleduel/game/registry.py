from __future__ import annotations

import logging
import random
import string
from threading import RLock

from .classifier import ScribbleClassifier
from .engine import GameRoom, Notifier
from .errors import RoomNotFound
from .settings import GameSettings
from .timers import Scheduler
from .words import WordBank


logger = logging.getLogger(__name__)

# No 0/O or 1/I so codes can be read out loud.
CODE_ALPHABET = "".join(ch for ch in string.ascii_uppercase + string.digits if ch not in "0O1I")


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class RoomRegistry:
    """Room code -> GameRoom, plus code allocation and empty-room cleanup."""

    def __init__(
        self,
        *,
        notifier: Notifier,
        scheduler: Scheduler,
        word_bank: WordBank,
        settings: GameSettings | None = None,
        classifier: ScribbleClassifier | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or GameSettings()
        self._notifier = notifier
        self._scheduler = scheduler
        self._word_bank = word_bank
        self._classifier = classifier
        self._rng = rng or random.Random()

        self._lock = RLock()
        self._rooms: dict[str, GameRoom] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    @property
    def word_bank(self) -> WordBank:
        return self._word_bank

    def _generate_code(self) -> str:
        length = max(4, self.settings.room_code_length)
        while True:
            code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(length))
            if code not in self._rooms:
                return code

    def create_room(self) -> GameRoom:
        with self._lock:
            code = self._generate_code()
            room = GameRoom(
                code,
                notifier=self._notifier,
                scheduler=self._scheduler,
                word_bank=self._word_bank,
                settings=self.settings,
                classifier=self._classifier,
                on_empty=self._expire,
                rng=random.Random(self._rng.random()),
            )
            self._rooms[code] = room
        logger.info("room %s created", code)
        return room

    def get_room(self, code: str) -> GameRoom | None:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def require_room(self, code: str) -> GameRoom:
        room = self.get_room(code)
        if room is None or room.closed:
            raise RoomNotFound()
        return room

    def list_rooms(self) -> list[GameRoom]:
        with self._lock:
            return list(self._rooms.values())

    def find_by_connection(self, sid: str) -> GameRoom | None:
        # Rooms lock themselves; never call into a room while holding ours.
        for room in self.list_rooms():
            if room.has_connection(sid):
                return room
        return None

    def delete_room(self, code: str) -> bool:
        with self._lock:
            room = self._rooms.pop(normalize_code(code), None)
        if room is None:
            return False
        room.close()
        logger.info("room %s deleted", room.code)
        return True

    def _expire(self, room: GameRoom) -> None:
        # Called from the room's teardown timer: re-check by code that the
        # same, still-empty room is registered before removing it.
        with self._lock:
            if self._rooms.get(room.code) is not room:
                return
            if room.connected_count() > 0:
                return
            del self._rooms[room.code]
        room.close()
        logger.info("room %s torn down after %ss empty", room.code, self.settings.empty_room_grace_sec)
