from __future__ import annotations


ONE_LETTER_OFF = "is one letter off!"
GETTING_WARMER = "is close, you're getting warmer!"


def _normalize(text: str) -> str:
    return (text or "").strip().lower()


def is_exact_match(guess: str, word: str) -> bool:
    w = _normalize(word)
    if not w:
        return False
    return _normalize(guess) == w


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (ca != cb),  # substitution
                )
            )
        previous = current
    return previous[-1]


def near_miss_feedback(guess: str, word: str) -> str | None:
    """Private hint for a wrong guess, or None when it is not close."""
    g = _normalize(guess)
    distance = levenshtein(g, _normalize(word))
    if distance == 1:
        return f"'{guess.strip()}' {ONE_LETTER_OFF}"
    if 1 < distance <= 3:
        return f"'{guess.strip()}' {GETTING_WARMER}"
    return None
