from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .drawing import DrawingLog


Phase = Literal["idle", "choosing", "drawing", "ending"]

SYSTEM_NAME = "System"


@dataclass
class Player:
    id: str
    name: str
    sid: str
    avatar: str = ""
    score: int = 0
    is_drawing: bool = False
    has_guessed: bool = False
    disconnected: bool = False

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "avatar": self.avatar,
            "score": self.score,
            "isDrawing": self.is_drawing,
            "hasGuessed": self.has_guessed,
            "disconnected": self.disconnected,
        }


@dataclass
class Message:
    player_name: str
    text: str
    is_correct: bool = False

    @classmethod
    def system(cls, text: str, is_correct: bool = False) -> "Message":
        return cls(player_name=SYSTEM_NAME, text=text, is_correct=is_correct)

    def to_payload(self) -> dict:
        return {"playerName": self.player_name, "text": self.text, "isCorrect": self.is_correct}


@dataclass
class Room:
    code: str
    owner_id: str | None = None
    drawer_id: str | None = None
    phase: Phase = "idle"
    is_game_over: bool = False
    total_rounds: int = 3
    current_round: int = 0
    current_word: str = ""
    revealed_indices: set[int] = field(default_factory=set)
    word_choices: list[str] = field(default_factory=list)
    players: dict[str, Player] = field(default_factory=dict)
    messages: list[Message] = field(default_factory=list)
    drawing: DrawingLog = field(default_factory=DrawingLog)

    def connected_players(self) -> list[Player]:
        return [p for p in self.players.values() if not p.disconnected]

    def find_by_sid(self, sid: str) -> Player | None:
        for p in self.players.values():
            if p.sid == sid and not p.disconnected:
                return p
        return None

    def find_by_name(self, name: str) -> Player | None:
        key = name.strip().casefold()
        for p in self.players.values():
            if p.name.casefold() == key:
                return p
        return None

    @property
    def drawer(self) -> Player | None:
        return self.players.get(self.drawer_id) if self.drawer_id else None

    def scoreboard(self) -> list[Player]:
        return sorted(self.players.values(), key=lambda p: (-p.score, p.name.casefold()))
