"""Countdown state and the scheduling seam used by rooms.

Rooms never sleep themselves: they ask a ``Scheduler`` to call them back
later and keep the returned ``TimerHandle`` so the callback can be cancelled
when the room leaves the phase that started it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol


class TimerHandle:
    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(self, fn: Callable[..., Any], *args: Any) -> None: ...


@dataclass(frozen=True)
class Tick:
    remaining: int
    reached_half: bool
    expired: bool


class Countdown:
    """Per-round clock, decremented once per second by the room."""

    def __init__(self, duration: int):
        self.duration = duration
        self.remaining = duration

    @property
    def half_mark(self) -> int:
        return self.duration // 2

    def reset(self) -> None:
        self.remaining = self.duration

    def tick(self) -> Tick:
        if self.remaining > 0:
            self.remaining -= 1
        return Tick(
            remaining=self.remaining,
            reached_half=self.remaining == self.half_mark and self.remaining > 0,
            expired=self.remaining <= 0,
        )
