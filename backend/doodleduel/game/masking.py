from __future__ import annotations

from collections.abc import Collection


PLACEHOLDER = "_"


def mask_word(word: str, revealed_indices: Collection[int], placeholder: str = PLACEHOLDER) -> str:
    """Render ``word`` for guessers.

    Whitespace and revealed positions show the literal character, every other
    position shows ``placeholder``. Positions are joined by a single space.
    """
    return " ".join(
        ch if ch.isspace() or i in revealed_indices else placeholder
        for i, ch in enumerate(word)
    )


def letter_indices(word: str) -> list[int]:
    return [i for i, ch in enumerate(word) if not ch.isspace()]
