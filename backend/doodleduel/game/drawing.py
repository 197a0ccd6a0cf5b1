from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any


MAX_POINTS_PER_STROKE = 5000
MAX_STROKES = 2000


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Stroke:
    points: tuple[Point, ...]
    color: str
    line_width: float

    @classmethod
    def from_payload(cls, data: Any) -> "Stroke":
        """Parse ``{color, lineWidth, path: [{x, y}, ...]}``; raises ValueError."""
        if not isinstance(data, dict):
            raise ValueError("stroke must be an object")

        color = data.get("color")
        if not isinstance(color, str) or not color.strip() or len(color) > 32:
            raise ValueError("invalid stroke color")

        width = data.get("lineWidth")
        if not _is_finite_number(width) or width <= 0:
            raise ValueError("invalid stroke width")

        path = data.get("path")
        if not isinstance(path, list) or len(path) > MAX_POINTS_PER_STROKE:
            raise ValueError("invalid stroke path")

        points = []
        for raw in path:
            if not isinstance(raw, dict):
                raise ValueError("invalid stroke point")
            x, y = raw.get("x"), raw.get("y")
            if not _is_finite_number(x) or not _is_finite_number(y):
                raise ValueError("invalid stroke point")
            points.append(Point(float(x), float(y)))

        return cls(points=tuple(points), color=color.strip(), line_width=float(width))

    def to_payload(self) -> dict:
        return {
            "color": self.color,
            "lineWidth": self.line_width,
            "path": [{"x": p.x, "y": p.y} for p in self.points],
        }


class DrawingLog:
    """Ordered strokes of the current round.

    The last stroke is the one being dragged: ``replace_last`` swaps it for a
    newer version, ``append`` starts a new one.
    """

    def __init__(self) -> None:
        self._strokes: list[Stroke] = []

    def __len__(self) -> int:
        return len(self._strokes)

    @property
    def strokes(self) -> tuple[Stroke, ...]:
        return tuple(self._strokes)

    def append(self, stroke: Stroke) -> bool:
        if len(self._strokes) >= MAX_STROKES:
            return False
        self._strokes.append(stroke)
        return True

    def replace_last(self, stroke: Stroke) -> bool:
        if not self._strokes:
            return False
        self._strokes[-1] = stroke
        return True

    def pop(self) -> Stroke | None:
        if not self._strokes:
            return None
        return self._strokes.pop()

    def clear(self) -> None:
        self._strokes = []

    def to_payload(self) -> list[dict]:
        return [s.to_payload() for s in self._strokes]

    def serialize(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))
