from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from pathlib import Path


logger = logging.getLogger(__name__)

FALLBACK_WORDS = ("apple", "house", "turtle", "guitar", "rocket", "pizza", "rainbow", "snowman")


def _clean(words: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for raw in words:
        w = (raw or "").strip()
        if not w or w.lower() in seen:
            continue
        seen.add(w.lower())
        out.append(w)
    return tuple(out)


class WordBank:
    """Immutable pool of candidate words."""

    def __init__(self, words: Iterable[str], rng: random.Random | None = None):
        self._words = _clean(words) or FALLBACK_WORDS
        self._rng = rng or random.Random()

    @classmethod
    def load(cls, path: str | Path, rng: random.Random | None = None) -> "WordBank":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not load word list from %s (%s); using built-in fallback", path, exc)
            return cls(FALLBACK_WORDS, rng=rng)

        words = _clean(text.splitlines())
        if not words:
            logger.warning("Word list %s is empty; using built-in fallback", path)
            return cls(FALLBACK_WORDS, rng=rng)

        logger.info("Loaded %d words from %s", len(words), path)
        return cls(words, rng=rng)

    @property
    def words(self) -> tuple[str, ...]:
        return self._words

    def __len__(self) -> int:
        return len(self._words)

    def pick_choices(self, count: int) -> list[str]:
        if count <= 0:
            return []
        return self._rng.sample(self._words, min(count, len(self._words)))
