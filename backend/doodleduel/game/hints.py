from __future__ import annotations

import random
from collections.abc import Collection

from .masking import letter_indices


MIN_HIDDEN_LETTERS = 2


def hidden_indices(word: str, revealed_indices: Collection[int]) -> list[int]:
    return [i for i in letter_indices(word) if i not in revealed_indices]


def can_reveal(word: str, revealed_indices: Collection[int]) -> bool:
    # One more reveal must still leave MIN_HIDDEN_LETTERS hidden.
    return len(hidden_indices(word, revealed_indices)) > MIN_HIDDEN_LETTERS


def pick_hint_index(word: str, revealed_indices: Collection[int], rng: random.Random | None = None) -> int | None:
    """Random never-revealed letter position, or None if hinting must stop."""
    if not can_reveal(word, revealed_indices):
        return None
    return (rng or random).choice(hidden_indices(word, revealed_indices))
