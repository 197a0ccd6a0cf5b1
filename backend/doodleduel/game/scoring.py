from __future__ import annotations

import math
from dataclasses import dataclass


def guesser_points(seconds_remaining: int, rate: float = 0.6, bonus: int = 10, floor: int = 10) -> int:
    """Points for a correct guess with ``seconds_remaining`` on the clock."""
    remaining = max(0, seconds_remaining)
    return max(floor, math.floor(remaining * rate) + bonus)


def drawer_points(award: int = 20) -> int:
    """Points the drawer earns for each correct guesser."""
    return award


@dataclass(frozen=True)
class ScoringPolicy:
    rate: float = 0.6
    bonus: int = 10
    floor: int = 10
    drawer_award: int = 20

    def guesser_points(self, seconds_remaining: int) -> int:
        return guesser_points(seconds_remaining, rate=self.rate, bonus=self.bonus, floor=self.floor)

    def drawer_points(self) -> int:
        return drawer_points(self.drawer_award)
