from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .scoring import ScoringPolicy


@dataclass(frozen=True)
class GameSettings:
    round_duration_sec: int = 90
    choose_duration_sec: int = 15
    reveal_duration_sec: int = 5
    hint_interval_sec: int = 10
    empty_room_grace_sec: int = 300
    word_choices_count: int = 3
    min_players: int = 2
    default_total_rounds: int = 3
    max_total_rounds: int = 10
    room_code_length: int = 6
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "GameSettings":
        defaults = cls()

        def get(key: str, default):
            value = cfg.get(key)
            return default if value is None else type(default)(value)

        return cls(
            round_duration_sec=get("ROUND_DURATION_SEC", defaults.round_duration_sec),
            choose_duration_sec=get("CHOOSE_DURATION_SEC", defaults.choose_duration_sec),
            reveal_duration_sec=get("REVEAL_DURATION_SEC", defaults.reveal_duration_sec),
            hint_interval_sec=get("HINT_INTERVAL_SEC", defaults.hint_interval_sec),
            empty_room_grace_sec=get("EMPTY_ROOM_GRACE_SEC", defaults.empty_room_grace_sec),
            word_choices_count=get("WORD_CHOICES_COUNT", defaults.word_choices_count),
            min_players=get("MIN_PLAYERS", defaults.min_players),
            default_total_rounds=get("DEFAULT_TOTAL_ROUNDS", defaults.default_total_rounds),
            max_total_rounds=get("MAX_TOTAL_ROUNDS", defaults.max_total_rounds),
            room_code_length=get("ROOM_CODE_LENGTH", defaults.room_code_length),
            scoring=ScoringPolicy(
                rate=get("GUESSER_RATE", defaults.scoring.rate),
                bonus=get("GUESSER_BONUS", defaults.scoring.bonus),
                floor=get("GUESSER_FLOOR", defaults.scoring.floor),
                drawer_award=get("DRAWER_POINTS", defaults.scoring.drawer_award),
            ),
        )
